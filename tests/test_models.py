from __future__ import annotations

import numpy as np
import pytest

from gnss_obs.models import (
    DEFAULT_CN0_DBHZ,
    ObservableType,
    ObservationSet,
    ReceiverClock,
    ReceiverObservation,
    ReceiverState,
    ReceiverType,
    SatelliteNavData,
    SatSigId,
    SignalObservation,
)
from gnss_obs.signals import Frequency, SatelliteSystem
from gnss_obs.time import GnssTime
from gnss_obs.utils.wgs84 import lla_to_ecef


def test_sat_sig_id_formatting_and_system() -> None:
    sig = SatSigId(Frequency.E05, 11)
    assert sig.sat_sys is SatelliteSystem.GAL
    assert str(sig) == "E05-E11"
    assert SatSigId(Frequency.B01, 3).sat_sys is SatelliteSystem.BDS


def test_frequency_glonass_channel() -> None:
    assert Frequency.R01.freq_hz(1) - Frequency.R01.freq_hz(0) == pytest.approx(562_500.0)
    assert Frequency.G01.wavelength_m() == pytest.approx(0.1903, abs=1e-4)


def test_receiver_observation_from_states() -> None:
    rx = lla_to_ecef(0.0, 0.0, 0.0)
    sv = lla_to_ecef(0.0, 0.0, 20_200_000.0)
    recv_obs = ReceiverObservation.from_states(rx, sv, np.zeros(3), obs={ObservableType.PSEUDORANGE: 2.02e7})

    assert recv_obs.elev_deg > 89.9
    assert np.allclose(recv_obs.los_unit_ecef, [1.0, 0.0, 0.0])
    assert recv_obs.obs[ObservableType.PSEUDORANGE].measurement == 2.02e7
    assert np.isnan(recv_obs.obs[ObservableType.PSEUDORANGE].estimate)
    assert recv_obs.cn0_or_default == DEFAULT_CN0_DBHZ


def test_reset_estimates_keeps_measurements() -> None:
    rx = lla_to_ecef(0.0, 0.0, 0.0)
    recv_obs = ReceiverObservation.from_states(
        rx, lla_to_ecef(10.0, 0.0, 20_200_000.0), np.zeros(3), obs={ObservableType.CARRIER: 5.0}
    )
    recv_obs.obs[ObservableType.CARRIER].estimate = 4.0
    recv_obs.obs[ObservableType.CARRIER].meas_var = 0.1
    recv_obs.terms.range_m = 4.0
    observations = ObservationSet()
    observations.add(SatSigId(Frequency.G01, 1), SignalObservation(SatelliteNavData(), {ReceiverType.ROVER: recv_obs}))

    copied = observations.copy()
    copied.reset_estimates()

    reset = copied[SatSigId(Frequency.G01, 1)].recv_obs[ReceiverType.ROVER]
    assert reset.obs[ObservableType.CARRIER].measurement == 5.0
    assert np.isnan(reset.obs[ObservableType.CARRIER].estimate)
    assert reset.obs[ObservableType.CARRIER].meas_var == 0.0
    assert reset.terms.range_m == 0.0
    assert recv_obs.obs[ObservableType.CARRIER].estimate == 4.0
    assert len(copied) == 1


def test_receiver_state_defaults() -> None:
    state = ReceiverState(ReceiverType.BASE, GnssTime(2300, 0.0), lla_to_ecef(48.0, 9.0, 100.0))

    assert np.array_equal(state.vel_ecef_mps, np.zeros(3))
    assert set(state.clock.sys_time_diff_bias) == set(SatelliteSystem)
    assert state.inter_frequency_bias == {}
    assert state.lla.alt_m == pytest.approx(100.0, abs=1e-3)
    assert ReceiverClock().bias.std_dev == 0.0


def test_satellite_position_variance() -> None:
    assert SatelliteNavData(ura_m=2.0).calc_satellite_position_variance() == 4.0


def test_package_exports_resolve() -> None:
    import gnss_obs

    for name in gnss_obs.__all__:
        assert getattr(gnss_obs, name) is not None
    assert gnss_obs.atmos.ModelTroposphere is not None
    assert gnss_obs.meas.GnssMeasurementErrorModel is not None
    assert gnss_obs.utils.get_logger is not None
