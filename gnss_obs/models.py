"""Core data models for per-epoch observation estimation."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Iterator, Mapping, Protocol

import numpy as np

from gnss_obs.atmos.troposphere import ZenithDelay
from gnss_obs.geometry import line_of_sight_unit
from gnss_obs.signals import Frequency, SatelliteSystem
from gnss_obs.time import GnssTime
from gnss_obs.utils.angles import elev_az_from_rx_sv
from gnss_obs.utils.wgs84 import GeodeticPosition, ecef_to_lla

DEFAULT_CN0_DBHZ = 1.0


class ObservableType(Enum):
    """Observable kinds estimated per signal and receiver."""

    PSEUDORANGE = "Pseudorange"
    CARRIER = "Carrier"
    DOPPLER = "Doppler"


class ReceiverType(IntEnum):
    """Default receiver slots; any IntEnum indexing the receiver array works."""

    ROVER = 0
    BASE = 1


@dataclass(frozen=True, order=True)
class SatSigId:
    """Satellite signal identifier: one satellite on one frequency."""

    freq: Frequency
    sat_num: int

    @property
    def sat_sys(self) -> SatelliteSystem:
        return self.freq.system

    def __str__(self) -> str:
        return f"{self.freq.value}-{self.sat_sys.value}{self.sat_num:02d}"


@dataclass(frozen=True)
class UncertainValue:
    """A value with its standard deviation (same unit)."""

    value: float = 0.0
    std_dev: float = 0.0


@dataclass(frozen=True)
class SatelliteClock:
    """Satellite clock bias [s] and drift [s/s] at transmit time."""

    bias_s: float = 0.0
    drift_sps: float = 0.0


class NavDataLike(Protocol):
    def calc_satellite_position_variance(self) -> float:
        ...


@dataclass(frozen=True)
class SatelliteNavData:
    """Navigation data reference carrying the user range accuracy."""

    ura_m: float = 0.0

    def calc_satellite_position_variance(self) -> float:
        return self.ura_m**2


@dataclass
class ObservationData:
    """Measurement with its modelled estimate and variance."""

    measurement: float
    estimate: float = float("nan")
    meas_var: float = 0.0


@dataclass
class CorrectionTerms:
    """Intermediate terms of the last estimate, kept for diagnostics."""

    range_m: float = 0.0
    tropo_zenith: ZenithDelay = field(default_factory=ZenithDelay)
    tropo_delay_m: float = 0.0
    iono_delay_m: float = 0.0
    sagnac_m: float = 0.0
    sagnac_rate_mps: float = 0.0


@dataclass
class ReceiverObservation:
    """Satellite state and observables of one signal at one receiver."""

    sat_pos_ecef_m: np.ndarray
    sat_vel_ecef_mps: np.ndarray
    sat_clock: SatelliteClock
    elev_deg: float
    az_deg: float
    los_unit_ecef: np.ndarray
    obs: dict[ObservableType, ObservationData] = field(default_factory=dict)
    cn0_dbhz: float | None = None
    terms: CorrectionTerms = field(default_factory=CorrectionTerms)

    @classmethod
    def from_states(
        cls,
        receiver_pos_ecef_m: np.ndarray,
        sat_pos_ecef_m: np.ndarray,
        sat_vel_ecef_mps: np.ndarray,
        sat_clock: SatelliteClock | None = None,
        obs: Mapping[ObservableType, float] | None = None,
        cn0_dbhz: float | None = None,
    ) -> "ReceiverObservation":
        """Derive elevation, azimuth and line of sight from the positions."""

        sat_pos = np.asarray(sat_pos_ecef_m, dtype=float)
        elev_deg, az_deg = elev_az_from_rx_sv(np.asarray(receiver_pos_ecef_m, dtype=float), sat_pos)
        return cls(
            sat_pos_ecef_m=sat_pos,
            sat_vel_ecef_mps=np.asarray(sat_vel_ecef_mps, dtype=float),
            sat_clock=sat_clock or SatelliteClock(),
            elev_deg=elev_deg,
            az_deg=az_deg,
            los_unit_ecef=line_of_sight_unit(receiver_pos_ecef_m, sat_pos),
            obs={obs_type: ObservationData(float(value)) for obs_type, value in (obs or {}).items()},
            cn0_dbhz=cn0_dbhz,
        )

    @property
    def cn0_or_default(self) -> float:
        return DEFAULT_CN0_DBHZ if self.cn0_dbhz is None else float(self.cn0_dbhz)


@dataclass
class SignalObservation:
    """Observations of one satellite signal across the participating receivers."""

    nav: NavDataLike
    recv_obs: dict[int, ReceiverObservation] = field(default_factory=dict)
    freq_num: int = 0


@dataclass
class ObservationSet:
    """Per-epoch container of signal observations, annotated in place."""

    signals: dict[SatSigId, SignalObservation] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.signals)

    def __iter__(self) -> Iterator[SatSigId]:
        return iter(self.signals)

    def __getitem__(self, sat_sig_id: SatSigId) -> SignalObservation:
        return self.signals[sat_sig_id]

    def items(self):
        return self.signals.items()

    def add(self, sat_sig_id: SatSigId, signal: SignalObservation) -> None:
        self.signals[sat_sig_id] = signal

    def copy(self) -> "ObservationSet":
        return copy.deepcopy(self)

    def reset_estimates(self) -> None:
        """Clear estimates, variances and correction terms, keeping measurements."""

        for signal in self.signals.values():
            for recv_obs in signal.recv_obs.values():
                recv_obs.terms = CorrectionTerms()
                for obs_data in recv_obs.obs.values():
                    obs_data.estimate = float("nan")
                    obs_data.meas_var = 0.0


def _zero_per_system() -> dict[SatelliteSystem, UncertainValue]:
    return {sat_sys: UncertainValue() for sat_sys in SatelliteSystem}


@dataclass(frozen=True)
class ReceiverClock:
    """Receiver clock error states [s, s/s] with per-system time offsets."""

    bias: UncertainValue = field(default_factory=UncertainValue)
    drift: UncertainValue = field(default_factory=UncertainValue)
    sys_time_diff_bias: Mapping[SatelliteSystem, UncertainValue] = field(default_factory=_zero_per_system)
    sys_time_diff_drift: Mapping[SatelliteSystem, UncertainValue] = field(default_factory=_zero_per_system)


@dataclass(frozen=True)
class ReceiverState:
    """Receiver position, velocity and clock state for one epoch."""

    receiver_type: int
    time: GnssTime
    pos_ecef_m: np.ndarray
    vel_ecef_mps: np.ndarray = field(default_factory=lambda: np.zeros(3))
    clock: ReceiverClock = field(default_factory=ReceiverClock)
    inter_frequency_bias: Mapping[Frequency, UncertainValue] = field(default_factory=dict)

    @property
    def lla(self) -> GeodeticPosition:
        return ecef_to_lla(self.pos_ecef_m)
