"""Surface meteorology models feeding the zenith delay models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

SEA_LEVEL_PRESSURE_HPA = 1013.25
SEA_LEVEL_TEMPERATURE_K = 288.15
CONST_RELATIVE_HUMIDITY = 0.7
TEMPERATURE_LAPSE_RATE_KPM = 0.0065


class PressureModel(str, Enum):
    CONST_NN = "ConstNN"
    ISA = "ISA"


class TemperatureModel(str, Enum):
    CONST_NN = "ConstNN"
    ISA = "ISA"


class HumidityModel(str, Enum):
    NONE = "None"
    CONST_NN = "ConstNN"


@dataclass(frozen=True)
class AtmosphereModels:
    """Selection of the pressure, temperature and humidity models."""

    pressure: PressureModel = PressureModel.ISA
    temperature: TemperatureModel = TemperatureModel.ISA
    humidity: HumidityModel = HumidityModel.CONST_NN

    def pressure_hpa(self, alt_m: float) -> float:
        if self.pressure is PressureModel.ISA:
            # Troposphere layer of the International Standard Atmosphere, clamped at 0 m
            return float(SEA_LEVEL_PRESSURE_HPA * (1.0 - 2.25577e-5 * max(alt_m, 0.0)) ** 5.25588)
        return SEA_LEVEL_PRESSURE_HPA

    def temperature_k(self, alt_m: float) -> float:
        if self.temperature is TemperatureModel.ISA:
            return SEA_LEVEL_TEMPERATURE_K - TEMPERATURE_LAPSE_RATE_KPM * max(alt_m, 0.0)
        return SEA_LEVEL_TEMPERATURE_K

    def relative_humidity(self) -> float:
        if self.humidity is HumidityModel.CONST_NN:
            return CONST_RELATIVE_HUMIDITY
        return 0.0


def water_vapor_pressure_hpa(temp_k: float, rel_humidity: float) -> float:
    """Partial water vapour pressure from temperature and relative humidity."""

    temp_c = temp_k - 273.15
    sat_pressure = 6.11 * np.exp((17.15 * temp_c) / (234.7 + temp_c))
    return float(np.clip(rel_humidity, 0.0, 1.0) * sat_pressure)
