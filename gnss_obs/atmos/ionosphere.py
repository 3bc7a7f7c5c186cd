"""Ionospheric delay providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from gnss_obs.atmos.iono_klobuchar import klobuchar_delay_m
from gnss_obs.signals import L1_FREQUENCY_HZ, Frequency, SatelliteSystem
from gnss_obs.utils.wgs84 import GeodeticPosition

# Broadcast model error ratio (RTKLIB ERR_BRDCI)
BROADCAST_IONO_ERROR_RATIO = 0.5


class IonosphereModel(str, Enum):
    """Selectable ionosphere models."""

    NONE = "None"
    KLOBUCHAR = "Klobuchar"


class AlphaBeta(str, Enum):
    ALPHA = "alpha"
    BETA = "beta"


@dataclass(frozen=True)
class IonosphericCorrection:
    """One broadcast coefficient set."""

    sat_sys: SatelliteSystem
    alpha_beta: AlphaBeta
    data: tuple[float, ...]


@dataclass
class IonosphericCorrections:
    """Broadcast ionosphere parameters collected from navigation data."""

    corrections: list[IonosphericCorrection] = field(default_factory=list)

    def get(self, sat_sys: SatelliteSystem, alpha_beta: AlphaBeta) -> tuple[float, ...] | None:
        for correction in self.corrections:
            if correction.sat_sys == sat_sys and correction.alpha_beta == alpha_beta:
                return correction.data
        return None

    def insert(self, sat_sys: SatelliteSystem, alpha_beta: AlphaBeta, data: tuple[float, ...]) -> None:
        """Add or replace the coefficients for a system."""

        self.corrections = [
            c for c in self.corrections if not (c.sat_sys == sat_sys and c.alpha_beta == alpha_beta)
        ]
        self.corrections.append(IonosphericCorrection(sat_sys, alpha_beta, tuple(data)))


def calc_ionospheric_delay(
    tow_s: float,
    freq: Frequency,
    freq_num: int,
    lla: GeodeticPosition,
    elev_deg: float,
    az_deg: float,
    model: IonosphereModel,
    corrections: IonosphericCorrections | None = None,
) -> float:
    """Return the slant ionospheric group delay [m] on ``freq``."""

    if model is IonosphereModel.NONE:
        return 0.0
    if model is IonosphereModel.KLOBUCHAR:
        alpha = beta = None
        if corrections is not None:
            alpha = corrections.get(SatelliteSystem.GPS, AlphaBeta.ALPHA)
            beta = corrections.get(SatelliteSystem.GPS, AlphaBeta.BETA)
        delay_l1_m = klobuchar_delay_m(
            tow_s, lla.lat_deg, lla.lon_deg, elev_deg, az_deg, alpha=alpha, beta=beta
        )
        return delay_l1_m * (L1_FREQUENCY_HZ / freq.freq_hz(freq_num)) ** 2
    raise ValueError(f"Unknown ionosphere model: {model}")


def iono_error_var(dpsr_i_m: float) -> float:
    """Variance [m^2] of a broadcast-model ionospheric delay."""

    return (dpsr_i_m * BROADCAST_IONO_ERROR_RATIO) ** 2


class IonosphereProvider(ABC):
    """Interface for ionospheric delay strategies."""

    @abstractmethod
    def delay_m(
        self,
        tow_s: float,
        freq: Frequency,
        freq_num: int,
        lla: GeodeticPosition,
        elev_deg: float,
        az_deg: float,
        corrections: IonosphericCorrections | None,
    ) -> float:
        """Return the slant ionospheric delay in meters."""


@dataclass(frozen=True)
class ModelIonosphere(IonosphereProvider):
    """Ionosphere provider backed by a configured :class:`IonosphereModel`."""

    model: IonosphereModel = IonosphereModel.KLOBUCHAR

    def delay_m(
        self,
        tow_s: float,
        freq: Frequency,
        freq_num: int,
        lla: GeodeticPosition,
        elev_deg: float,
        az_deg: float,
        corrections: IonosphericCorrections | None,
    ) -> float:
        return calc_ionospheric_delay(
            tow_s, freq, freq_num, lla, elev_deg, az_deg, self.model, corrections
        )
