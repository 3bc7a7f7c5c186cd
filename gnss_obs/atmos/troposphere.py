"""Tropospheric delay providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from gnss_obs.atmos.mapping import cosecant_mapping, niell_hydrostatic_mapping, niell_wet_mapping
from gnss_obs.atmos.standard_atmosphere import AtmosphereModels, HumidityModel
from gnss_obs.atmos.tropo_saastamoinen import saastamoinen_zhd_m, saastamoinen_zwd_m
from gnss_obs.time import GnssTime
from gnss_obs.utils.wgs84 import GeodeticPosition

# Saastamoinen model error standard deviation [m] (RTKLIB ERR_SAAS)
SAASTAMOINEN_ERROR_STD_M = 0.3


class ZenithDelayModel(str, Enum):
    NONE = "None"
    SAASTAMOINEN = "Saastamoinen"


class MappingFunction(str, Enum):
    NONE = "None"
    COSECANT = "Cosecant"
    NIELL = "NMF"


@dataclass(frozen=True)
class ZenithDelay:
    """Zenith hydrostatic/wet delays [m] and their mapping factors."""

    zhd_m: float = 0.0
    zwd_m: float = 0.0
    zhd_mapping: float = 0.0
    zwd_mapping: float = 0.0

    @property
    def slant_delay_m(self) -> float:
        return self.zhd_m * self.zhd_mapping + self.zwd_m * self.zwd_mapping


@dataclass(frozen=True)
class TroposphereModelSelection:
    """Zenith delay models and mapping functions for both components."""

    zhd_model: ZenithDelayModel = ZenithDelayModel.SAASTAMOINEN
    zwd_model: ZenithDelayModel = ZenithDelayModel.SAASTAMOINEN
    zhd_mapping: MappingFunction = MappingFunction.NIELL
    zwd_mapping: MappingFunction = MappingFunction.NIELL
    atmosphere: AtmosphereModels = field(default_factory=AtmosphereModels)

    @classmethod
    def disabled(cls) -> "TroposphereModelSelection":
        return cls(
            zhd_model=ZenithDelayModel.NONE,
            zwd_model=ZenithDelayModel.NONE,
            zhd_mapping=MappingFunction.NONE,
            zwd_mapping=MappingFunction.NONE,
            atmosphere=AtmosphereModels(humidity=HumidityModel.NONE),
        )


def _mapping_factor(
    mapping: MappingFunction,
    hydrostatic: bool,
    time: GnssTime,
    lla: GeodeticPosition,
    elev_deg: float,
) -> float:
    if mapping is MappingFunction.NONE:
        return 1.0
    if mapping is MappingFunction.COSECANT:
        return cosecant_mapping(elev_deg)
    if mapping is MappingFunction.NIELL:
        if hydrostatic:
            return niell_hydrostatic_mapping(elev_deg, lla.lat_deg, lla.alt_m, time.day_of_year)
        return niell_wet_mapping(elev_deg, lla.lat_deg)
    raise ValueError(f"Unknown mapping function: {mapping}")


def calc_tropospheric_delay_and_mapping(
    time: GnssTime,
    lla: GeodeticPosition,
    elev_deg: float,
    az_deg: float,
    selection: TroposphereModelSelection,
) -> ZenithDelay:
    """Return the zenith delays and mapping factors for one line of sight.

    The azimuth is accepted for gradient-capable models; none of the
    implemented models use it.
    """

    atmosphere = selection.atmosphere
    zhd_m = 0.0
    if selection.zhd_model is ZenithDelayModel.SAASTAMOINEN:
        zhd_m = saastamoinen_zhd_m(lla.lat_deg, lla.alt_m, atmosphere.pressure_hpa(lla.alt_m))
    zwd_m = 0.0
    if selection.zwd_model is ZenithDelayModel.SAASTAMOINEN:
        zwd_m = saastamoinen_zwd_m(atmosphere.temperature_k(lla.alt_m), atmosphere.relative_humidity())

    return ZenithDelay(
        zhd_m=zhd_m,
        zwd_m=zwd_m,
        zhd_mapping=_mapping_factor(selection.zhd_mapping, True, time, lla, elev_deg),
        zwd_mapping=_mapping_factor(selection.zwd_mapping, False, time, lla, elev_deg),
    )


def tropo_error_var(dpsr_t_m: float, elev_deg: float) -> float:
    """Variance [m^2] of the modelled slant tropospheric delay."""

    if dpsr_t_m == 0.0:
        return 0.0
    sin_el = np.sin(np.deg2rad(max(elev_deg, 0.0)))
    return float((SAASTAMOINEN_ERROR_STD_M / (sin_el + 0.1)) ** 2)


class TroposphereProvider(ABC):
    """Interface for tropospheric delay strategies."""

    @abstractmethod
    def zenith_delay(
        self,
        time: GnssTime,
        lla: GeodeticPosition,
        elev_deg: float,
        az_deg: float,
    ) -> ZenithDelay:
        """Return zenith delays and mapping factors for the given geometry."""


@dataclass(frozen=True)
class ModelTroposphere(TroposphereProvider):
    """Troposphere provider backed by a :class:`TroposphereModelSelection`."""

    selection: TroposphereModelSelection = field(default_factory=TroposphereModelSelection)

    def zenith_delay(
        self,
        time: GnssTime,
        lla: GeodeticPosition,
        elev_deg: float,
        az_deg: float,
    ) -> ZenithDelay:
        return calc_tropospheric_delay_and_mapping(time, lla, elev_deg, az_deg, self.selection)
