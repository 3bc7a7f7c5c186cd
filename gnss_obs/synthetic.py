"""Synthetic observation epochs for demos and end-to-end checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from gnss_obs.atmos.ionosphere import IonosphereProvider, IonosphericCorrections, ModelIonosphere
from gnss_obs.atmos.troposphere import ModelTroposphere, TroposphereProvider
from gnss_obs.geometry import (
    geometric_range_m,
    range_rate_mps,
    sagnac_correction_m,
    sagnac_rate_correction_mps,
)
from gnss_obs.models import (
    ObservableType,
    ObservationData,
    ObservationSet,
    ReceiverObservation,
    ReceiverState,
    SatelliteNavData,
    SatSigId,
    SignalObservation,
)
from gnss_obs.sat.simple_gps import SimpleGpsConstellation, SvState
from gnss_obs.signals import LIGHT_SPEED_MPS, Frequency, SatelliteSystem


def cn0_from_elevation(
    elev_deg: float,
    cn0_zenith_dbhz: float = 45.0,
    cn0_min_dbhz: float = 25.0,
) -> float:
    """Return a simple CN0 model based on elevation angle."""

    weight = np.sin(np.deg2rad(np.clip(float(elev_deg), 0.0, 90.0)))
    cn0 = cn0_min_dbhz + (cn0_zenith_dbhz - cn0_min_dbhz) * weight
    return float(np.clip(cn0, cn0_min_dbhz, cn0_zenith_dbhz))


@dataclass
class SyntheticEpochSource:
    """Generate observation sets from a simulated constellation.

    Measurements are built with the same physical terms the estimator models
    (range, Sagnac, atmosphere, clocks, inter-frequency bias) plus optional
    Gaussian noise, so a matching estimator configuration reproduces them.
    """

    constellation: SimpleGpsConstellation
    receivers: Sequence[ReceiverState]
    frequencies: tuple[Frequency, ...] = (Frequency.G01, Frequency.G02)
    observables: tuple[ObservableType, ...] = tuple(ObservableType)
    elevation_mask_deg: float = 10.0
    cn0_zenith_dbhz: float = 45.0
    cn0_min_dbhz: float = 25.0
    ura_m: float = 2.0
    troposphere: TroposphereProvider = field(default_factory=ModelTroposphere)
    ionosphere: IonosphereProvider = field(default_factory=ModelIonosphere)
    ionospheric_corrections: IonosphericCorrections | None = None
    pr_sigma_m: float = 0.0
    cp_sigma_m: float = 0.0
    doppler_sigma_mps: float = 0.0
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    def __post_init__(self) -> None:
        if not self.receivers:
            raise ValueError("At least one receiver state is required.")
        for freq in self.frequencies:
            if freq.system is not SatelliteSystem.GPS:
                raise ValueError(f"Synthetic constellation only transmits GPS signals, got {freq.name}.")

    def build(self, t: float) -> ObservationSet:
        """Return the observation set for ``t`` seconds after the reference epoch."""

        observations = ObservationSet()
        for state in self.constellation.get_sv_states(t):
            recv_obs = {
                recv: ReceiverObservation.from_states(
                    receiver.pos_ecef_m,
                    state.pos_ecef_m,
                    state.vel_ecef_mps,
                    sat_clock=state.clock,
                )
                for recv, receiver in enumerate(self.receivers)
            }
            if min(obs.elev_deg for obs in recv_obs.values()) < self.elevation_mask_deg:
                continue
            for freq in self.frequencies:
                signal = SignalObservation(nav=SatelliteNavData(ura_m=self.ura_m))
                for recv, template in recv_obs.items():
                    signal.recv_obs[recv] = self._observe(freq, state, self.receivers[recv], template)
                observations.add(SatSigId(freq, state.sat_num), signal)
        return observations

    def _noise(self, sigma: float) -> float:
        return float(self.rng.normal(0.0, sigma)) if sigma > 0.0 else 0.0

    def _observe(
        self,
        freq: Frequency,
        state: SvState,
        receiver: ReceiverState,
        template: ReceiverObservation,
    ) -> ReceiverObservation:
        lla = receiver.lla
        elev_deg, az_deg = template.elev_deg, template.az_deg
        range_m = geometric_range_m(receiver.pos_ecef_m, state.pos_ecef_m)
        sagnac_m = sagnac_correction_m(receiver.pos_ecef_m, state.pos_ecef_m)
        tropo_m = self.troposphere.zenith_delay(receiver.time, lla, elev_deg, az_deg).slant_delay_m
        iono_m = self.ionosphere.delay_m(
            receiver.time.tow_s, freq, 0, lla, elev_deg, az_deg, self.ionospheric_corrections
        )
        clock = receiver.clock
        sys_bias_s = clock.sys_time_diff_bias[freq.system].value
        sys_drift_sps = clock.sys_time_diff_drift[freq.system].value
        clock_m = LIGHT_SPEED_MPS * (clock.bias.value + sys_bias_s - state.clock.bias_s)
        ifb = receiver.inter_frequency_bias.get(freq)
        ifb_m = LIGHT_SPEED_MPS * ifb.value if ifb is not None else 0.0

        values = {
            ObservableType.PSEUDORANGE: range_m + sagnac_m + tropo_m + iono_m + clock_m + ifb_m
            + self._noise(self.pr_sigma_m),
            ObservableType.CARRIER: range_m + sagnac_m + tropo_m - iono_m + clock_m + self._noise(self.cp_sigma_m),
            ObservableType.DOPPLER: range_rate_mps(template.los_unit_ecef, receiver.vel_ecef_mps, state.vel_ecef_mps)
            + sagnac_rate_correction_mps(receiver.pos_ecef_m, state.pos_ecef_m, receiver.vel_ecef_mps, state.vel_ecef_mps)
            + LIGHT_SPEED_MPS * (clock.drift.value + sys_drift_sps - state.clock.drift_sps)
            + self._noise(self.doppler_sigma_mps),
        }
        return ReceiverObservation(
            sat_pos_ecef_m=template.sat_pos_ecef_m,
            sat_vel_ecef_mps=template.sat_vel_ecef_mps,
            sat_clock=template.sat_clock,
            elev_deg=elev_deg,
            az_deg=az_deg,
            los_unit_ecef=template.los_unit_ecef,
            obs={obs_type: ObservationData(float(values[obs_type])) for obs_type in self.observables},
            cn0_dbhz=cn0_from_elevation(elev_deg, self.cn0_zenith_dbhz, self.cn0_min_dbhz),
        )
