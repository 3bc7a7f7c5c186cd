"""GNSS measurement error (baseline variance) models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

import numpy as np

from gnss_obs.signals import SYSTEM_ERROR_FACTORS, SatelliteSystem


class WeightingModel(str, Enum):
    """Elevation/CN0 weighting functions."""

    NONE = "None"
    SINE = "Sine"
    SINE_OFFSET = "SineOffset"
    SINE_CN0 = "SineCN0"
    CN0_REFERENCE = "CN0Reference"
    EXPONENTIAL = "Exponential"


_FIELD_KEYS = {
    "model": "model",
    "carrier_std_m": "carrierStdDev",
    "code_carrier_ratio": "codeCarrierRatio",
    "doppler_std_mps": "dopplerStdDev",
    "code_bias_std_m": "codeBiasStdDev",
    "sine_offset_a": "sineOffsetA",
    "sine_offset_b": "sineOffsetB",
    "cn0_coefficient": "cn0Coefficient",
    "cn0_reference_dbhz": "cn0ReferenceDbHz",
    "elevation_weight": "elevationWeight",
    "exponential_scale": "exponentialScale",
    "exponential_elevation_deg": "exponentialElevationDeg",
    "min_sin_elevation": "minSinElevation",
}


@dataclass(frozen=True)
class GnssMeasurementErrorModel:
    """Baseline measurement variance as a function of geometry and signal quality.

    Each observable has a zenith standard deviation (carrier, code as a
    multiple of carrier, and Doppler in m/s). The variance is

        (system_factor * sigma)^2 * w(elevation, CN0)

    where ``w`` is the selected weighting function. Every weighting is
    non-increasing in both elevation and CN0; elevation enters through its
    sine, floored at ``min_sin_elevation``.
    """

    model: WeightingModel = WeightingModel.SINE_OFFSET
    carrier_std_m: float = 0.003
    code_carrier_ratio: float = 100.0
    doppler_std_mps: float = 0.1
    code_bias_std_m: float = 0.3
    sine_offset_a: float = 1.0
    sine_offset_b: float = 1.0
    cn0_coefficient: float = 1.0e3
    cn0_reference_dbhz: float = 45.0
    elevation_weight: float = 1.0
    exponential_scale: float = 10.0
    exponential_elevation_deg: float = 10.0
    min_sin_elevation: float = 0.1
    # Excluded from the hash; compared by value
    system_factors: Mapping[SatelliteSystem, float] = field(
        default_factory=lambda: dict(SYSTEM_ERROR_FACTORS), hash=False
    )

    def _sin_elevation(self, elev_deg: float) -> float:
        sin_el = np.sin(np.deg2rad(np.clip(elev_deg, 0.0, 90.0)))
        return float(max(sin_el, self.min_sin_elevation))

    def weighting(self, elev_deg: float, cn0_dbhz: float) -> float:
        """Dimensionless variance weight for the configured model."""

        sin_el = self._sin_elevation(elev_deg)
        if self.model is WeightingModel.NONE:
            return 1.0
        if self.model is WeightingModel.SINE:
            return 1.0 / sin_el**2
        if self.model is WeightingModel.SINE_OFFSET:
            return self.sine_offset_a**2 + self.sine_offset_b**2 / sin_el**2
        if self.model is WeightingModel.SINE_CN0:
            # Groves (2013): zenith term plus a tracking-noise term in 1/(C/N0)
            return (1.0 + self.cn0_coefficient * 10.0 ** (-cn0_dbhz / 10.0)) / sin_el**2
        if self.model is WeightingModel.CN0_REFERENCE:
            cn0_factor = 10.0 ** ((self.cn0_reference_dbhz - cn0_dbhz) / 10.0)
            return float(cn0_factor * sin_el ** (-2.0 * self.elevation_weight))
        if self.model is WeightingModel.EXPONENTIAL:
            elev_deg = max(float(np.rad2deg(np.arcsin(sin_el))), 0.0)
            return float((1.0 + self.exponential_scale * np.exp(-elev_deg / self.exponential_elevation_deg)) ** 2)
        raise ValueError(f"Unknown weighting model: {self.model}")

    def system_factor(self, sat_sys: SatelliteSystem) -> float:
        return float(self.system_factors.get(sat_sys, 1.0))

    def carrier_meas_error_var(self, sat_sys: SatelliteSystem, elev_deg: float, cn0_dbhz: float) -> float:
        """Carrier-phase variance [m^2]."""

        sigma = self.system_factor(sat_sys) * self.carrier_std_m
        return sigma**2 * self.weighting(elev_deg, cn0_dbhz)

    def psr_meas_error_var(self, sat_sys: SatelliteSystem, elev_deg: float, cn0_dbhz: float) -> float:
        """Pseudorange variance [m^2]."""

        return self.code_carrier_ratio**2 * self.carrier_meas_error_var(sat_sys, elev_deg, cn0_dbhz)

    def psr_rate_meas_error_var(self, sat_sys: SatelliteSystem, elev_deg: float, cn0_dbhz: float) -> float:
        """Pseudorange-rate (Doppler) variance [m^2/s^2]."""

        sigma = self.system_factor(sat_sys) * self.doppler_std_mps
        return sigma**2 * self.weighting(elev_deg, cn0_dbhz)

    def code_bias_error_var(self) -> float:
        """Geometry-independent code bias variance [m^2]."""

        return self.code_bias_std_m**2

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for attr, key in _FIELD_KEYS.items():
            value = getattr(self, attr)
            payload[key] = value.value if isinstance(value, Enum) else value
        payload["systemFactors"] = {sys.name: factor for sys, factor in self.system_factors.items()}
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "GnssMeasurementErrorModel":
        """Build from the JSON option layout; unknown model names raise ``ValueError``."""

        kwargs: dict[str, Any] = {}
        for attr, key in _FIELD_KEYS.items():
            if key not in payload:
                continue
            if attr == "model":
                try:
                    kwargs[attr] = WeightingModel(payload[key])
                except ValueError as exc:
                    raise ValueError(f"Unknown GNSS measurement error model: {payload[key]!r}") from exc
            else:
                kwargs[attr] = float(payload[key])
        if "systemFactors" in payload:
            factors = dict(SYSTEM_ERROR_FACTORS)
            for name, factor in payload["systemFactors"].items():
                try:
                    factors[SatelliteSystem[name]] = float(factor)
                except KeyError as exc:
                    raise ValueError(f"Unknown satellite system: {name!r}") from exc
            kwargs["system_factors"] = factors
        return cls(**kwargs)
