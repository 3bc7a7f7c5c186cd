from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass

import numpy as np
import pytest

from gnss_obs.atmos.ionosphere import IonosphereModel, IonosphereProvider
from gnss_obs.atmos.troposphere import TroposphereModelSelection, TroposphereProvider, ZenithDelay
from gnss_obs.config import EstimatorConfig
from gnss_obs.estimator import DIFFERENCE_TERMS, ObservationDifference, ObservationEstimator
from gnss_obs.meas.error_model import GnssMeasurementErrorModel, WeightingModel
from gnss_obs.models import (
    ObservableType,
    ObservationSet,
    ReceiverClock,
    ReceiverObservation,
    ReceiverState,
    ReceiverType,
    SatelliteClock,
    SatelliteNavData,
    SatSigId,
    SignalObservation,
    UncertainValue,
)
from gnss_obs.signals import LIGHT_SPEED_MPS, Frequency, SatelliteSystem
from gnss_obs.time import GnssTime

C = LIGHT_SPEED_MPS
TIME = GnssTime(week=2300, tow_s=345_600.0)
POLE_RX = np.array([0.0, 0.0, 6_378_137.0])
POLE_SV = np.array([0.0, 0.0, 26_378_137.0])
RX_POS = np.array([4_157_000.0, 671_000.0, 4_774_000.0])
SV_POS = np.array([15_600_000.0, 7_540_000.0, 20_140_000.0])
SV_VEL = np.array([-1_200.0, 2_500.0, 600.0])

NO_ATMOSPHERE = EstimatorConfig(
    ionosphere_model=IonosphereModel.NONE,
    troposphere_models=TroposphereModelSelection.disabled(),
)


@dataclass(frozen=True)
class ConstTroposphere(TroposphereProvider):
    zhd_m: float = 0.0

    def zenith_delay(self, time, lla, elev_deg, az_deg) -> ZenithDelay:
        return ZenithDelay(zhd_m=self.zhd_m, zwd_m=0.0, zhd_mapping=1.0, zwd_mapping=1.0)


@dataclass(frozen=True)
class ConstIonosphere(IonosphereProvider):
    delay: float = 0.0

    def delay_m(self, tow_s, freq, freq_num, lla, elev_deg, az_deg, corrections) -> float:
        return self.delay


def _observation_set(
    rx_pos: np.ndarray = RX_POS,
    sv_pos: np.ndarray = SV_POS,
    sv_vel: np.ndarray = SV_VEL,
    sat_clock: SatelliteClock | None = None,
    freq: Frequency = Frequency.G01,
    ura_m: float = 0.0,
    cn0_dbhz: float | None = 45.0,
    recv: int = ReceiverType.ROVER,
) -> ObservationSet:
    recv_obs = ReceiverObservation.from_states(
        rx_pos,
        sv_pos,
        sv_vel,
        sat_clock=sat_clock,
        obs={obs_type: 0.0 for obs_type in ObservableType},
        cn0_dbhz=cn0_dbhz,
    )
    observations = ObservationSet()
    observations.add(SatSigId(freq, 5), SignalObservation(nav=SatelliteNavData(ura_m), recv_obs={recv: recv_obs}))
    return observations


def _receiver(
    pos: np.ndarray = RX_POS,
    clock: ReceiverClock | None = None,
    ifb: dict | None = None,
) -> ReceiverState:
    return ReceiverState(
        ReceiverType.ROVER,
        TIME,
        pos,
        clock=clock or ReceiverClock(),
        inter_frequency_bias=ifb or {},
    )


def _clock(bias_std: float = 0.0, drift_std: float = 0.0) -> ReceiverClock:
    sys_bias = {sat_sys: UncertainValue() for sat_sys in SatelliteSystem}
    sys_drift = {sat_sys: UncertainValue() for sat_sys in SatelliteSystem}
    sys_bias[SatelliteSystem.GPS] = UncertainValue(3e-8, bias_std)
    sys_drift[SatelliteSystem.GPS] = UncertainValue(2e-10, drift_std)
    return ReceiverClock(
        bias=UncertainValue(1e-6, bias_std),
        drift=UncertainValue(5e-9, drift_std),
        sys_time_diff_bias=sys_bias,
        sys_time_diff_drift=sys_drift,
    )


def _estimate(
    estimator: ObservationEstimator,
    receiver: ReceiverState,
    obs_diff: ObservationDifference,
    **set_kwargs,
) -> dict[ObservableType, tuple[float, float]]:
    observations = _observation_set(**set_kwargs)
    estimator.compute_estimates(observations, [receiver], None, obs_diff, "test")
    (signal,) = observations.signals.values()
    (recv_obs,) = signal.recv_obs.values()
    return {obs_type: (data.estimate, data.meas_var) for obs_type, data in recv_obs.obs.items()}


def test_zenith_satellite_without_corrections() -> None:
    estimator = ObservationEstimator(NO_ATMOSPHERE)
    result = _estimate(
        estimator,
        _receiver(POLE_RX),
        ObservationDifference.NO_DIFFERENCE,
        rx_pos=POLE_RX,
        sv_pos=POLE_SV,
        sv_vel=np.zeros(3),
    )

    assert result[ObservableType.PSEUDORANGE][0] == pytest.approx(2.0e7, abs=1e-6)
    assert result[ObservableType.CARRIER][0] == pytest.approx(2.0e7, abs=1e-6)
    assert result[ObservableType.DOPPLER][0] == pytest.approx(0.0, abs=1e-9)


def test_difference_modes_drop_clock_terms() -> None:
    estimator = ObservationEstimator(NO_ATMOSPHERE)
    receiver = _receiver(clock=_clock())
    sat_clock = SatelliteClock(bias_s=2e-7, drift_sps=1e-11)

    results = {
        mode: _estimate(estimator, receiver, mode, sat_clock=sat_clock) for mode in ObservationDifference
    }
    nd = results[ObservationDifference.NO_DIFFERENCE]
    sd = results[ObservationDifference.SINGLE_DIFFERENCE]
    dd = results[ObservationDifference.DOUBLE_DIFFERENCE]

    for obs_type in (ObservableType.PSEUDORANGE, ObservableType.CARRIER):
        assert np.isclose(nd[obs_type][0] - sd[obs_type][0], -C * 2e-7, rtol=0.0, atol=1e-6)
        assert np.isclose(sd[obs_type][0] - dd[obs_type][0], C * (1e-6 + 3e-8), rtol=0.0, atol=1e-6)

    doppler = ObservableType.DOPPLER
    assert np.isclose(nd[doppler][0] - sd[doppler][0], -C * 1e-11, rtol=0.0, atol=1e-8)
    assert np.isclose(sd[doppler][0] - dd[doppler][0], C * (5e-9 + 2e-10), rtol=0.0, atol=1e-8)


def test_code_minus_carrier_is_twice_the_ionosphere() -> None:
    estimator = ObservationEstimator(
        NO_ATMOSPHERE, troposphere=ConstTroposphere(2.4), ionosphere=ConstIonosphere(3.5)
    )
    result = _estimate(estimator, _receiver(clock=_clock()), ObservationDifference.NO_DIFFERENCE)

    diff = result[ObservableType.PSEUDORANGE][0] - result[ObservableType.CARRIER][0]
    assert diff == pytest.approx(7.0, abs=1e-6)


def test_doppler_ignores_atmosphere() -> None:
    receiver = _receiver(clock=_clock())
    plain = ObservationEstimator(NO_ATMOSPHERE)
    delayed = ObservationEstimator(
        NO_ATMOSPHERE, troposphere=ConstTroposphere(2.4), ionosphere=ConstIonosphere(3.5)
    )

    for mode in ObservationDifference:
        a = _estimate(plain, receiver, mode)[ObservableType.DOPPLER]
        b = _estimate(delayed, receiver, mode)[ObservableType.DOPPLER]
        assert a[0] == b[0]
        assert a[1] == b[1]


def test_doppler_includes_sagnac_rate() -> None:
    estimator = ObservationEstimator(NO_ATMOSPHERE)
    observations = _observation_set()
    estimator.compute_estimates(observations, [_receiver()], None, ObservationDifference.DOUBLE_DIFFERENCE)
    (signal,) = observations.signals.values()
    recv_obs = signal.recv_obs[ReceiverType.ROVER]

    range_rate = float(np.dot(recv_obs.los_unit_ecef, SV_VEL))
    doppler = recv_obs.obs[ObservableType.DOPPLER].estimate
    assert recv_obs.terms.sagnac_rate_mps != 0.0
    assert doppler == pytest.approx(range_rate + recv_obs.terms.sagnac_rate_mps)


def test_zero_troposphere_provider_matches_disabled_models() -> None:
    receiver = _receiver(clock=_clock())
    disabled = ObservationEstimator(NO_ATMOSPHERE)
    zero = ObservationEstimator(NO_ATMOSPHERE, troposphere=ConstTroposphere(0.0))

    for mode in ObservationDifference:
        assert _estimate(disabled, receiver, mode) == _estimate(zero, receiver, mode)


def test_variance_never_below_baseline() -> None:
    error_model = GnssMeasurementErrorModel(model=WeightingModel.SINE)
    estimator = ObservationEstimator(
        NO_ATMOSPHERE,
        troposphere=ConstTroposphere(2.4),
        ionosphere=ConstIonosphere(3.5),
        error_model=error_model,
    )
    receiver = _receiver(
        clock=_clock(bias_std=1e-9, drift_std=1e-11),
        ifb={Frequency.G01: UncertainValue(5e-9, 1e-9)},
    )

    variances = {mode: _estimate(estimator, receiver, mode, ura_m=2.0) for mode in ObservationDifference}
    obs = _observation_set()
    (signal,) = obs.signals.values()
    elev_deg = signal.recv_obs[ReceiverType.ROVER].elev_deg
    baseline = {
        ObservableType.PSEUDORANGE: error_model.psr_meas_error_var(SatelliteSystem.GPS, elev_deg, 45.0),
        ObservableType.CARRIER: error_model.carrier_meas_error_var(SatelliteSystem.GPS, elev_deg, 45.0),
        ObservableType.DOPPLER: error_model.psr_rate_meas_error_var(SatelliteSystem.GPS, elev_deg, 45.0),
    }

    for obs_type, base in baseline.items():
        nd = variances[ObservationDifference.NO_DIFFERENCE][obs_type][1]
        sd = variances[ObservationDifference.SINGLE_DIFFERENCE][obs_type][1]
        dd = variances[ObservationDifference.DOUBLE_DIFFERENCE][obs_type][1]
        assert nd >= sd >= dd >= base
        assert dd == pytest.approx(base)
    psr = ObservableType.PSEUDORANGE
    assert variances[ObservationDifference.NO_DIFFERENCE][psr][1] > variances[ObservationDifference.SINGLE_DIFFERENCE][psr][1]


def test_no_difference_pseudorange_variance_terms() -> None:
    error_model = GnssMeasurementErrorModel(model=WeightingModel.NONE)
    estimator = ObservationEstimator(NO_ATMOSPHERE, ionosphere=ConstIonosphere(4.0), error_model=error_model)
    clock = ReceiverClock(bias=UncertainValue(0.0, 1e-9))
    receiver = _receiver(clock=clock, ifb={Frequency.G01: UncertainValue(0.0, 2e-9)})

    var = _estimate(estimator, receiver, ObservationDifference.NO_DIFFERENCE, ura_m=2.0)[ObservableType.PSEUDORANGE][1]

    expected = (
        error_model.psr_meas_error_var(SatelliteSystem.GPS, 45.0, 45.0)
        + 2.0**2  # satellite position
        + (0.5 * 4.0) ** 2  # ionosphere
        + (C * 1e-9) ** 2  # receiver clock
        + 0.3**2  # code bias
        + (C * 2e-9) ** 2  # inter-frequency bias
    )
    assert var == pytest.approx(expected)


def test_single_difference_variance_keeps_only_receiver_clock() -> None:
    error_model = GnssMeasurementErrorModel(model=WeightingModel.NONE)
    estimator = ObservationEstimator(
        NO_ATMOSPHERE,
        troposphere=ConstTroposphere(2.0),
        ionosphere=ConstIonosphere(4.0),
        error_model=error_model,
    )
    receiver = _receiver(
        clock=_clock(bias_std=1e-9, drift_std=1e-11),
        ifb={Frequency.G01: UncertainValue(5e-9, 2e-9)},
    )

    result = _estimate(estimator, receiver, ObservationDifference.SINGLE_DIFFERENCE, ura_m=2.0)

    # Receiver and per-system clock share the same sigma in _clock
    clock_bias_var = C**2 * (1e-9**2 + 1e-9**2)
    clock_drift_var = C**2 * (1e-11**2 + 1e-11**2)
    gps = SatelliteSystem.GPS
    assert result[ObservableType.PSEUDORANGE][1] == pytest.approx(
        error_model.psr_meas_error_var(gps, 45.0, 45.0) + clock_bias_var
    )
    assert result[ObservableType.CARRIER][1] == pytest.approx(
        error_model.carrier_meas_error_var(gps, 45.0, 45.0) + clock_bias_var
    )
    assert result[ObservableType.DOPPLER][1] == pytest.approx(
        error_model.psr_rate_meas_error_var(gps, 45.0, 45.0) + clock_drift_var
    )


def test_single_difference_table_row() -> None:
    sd = DIFFERENCE_TERMS[ObservationDifference.SINGLE_DIFFERENCE]

    assert sd.receiver_clock and sd.system_time_difference and sd.inter_frequency_bias
    assert sd.receiver_clock_var
    assert not (sd.satellite_clock or sd.satellite_error_var or sd.code_bias_var)


def test_inter_frequency_bias_applies_to_code_only() -> None:
    estimator = ObservationEstimator(NO_ATMOSPHERE)
    ifb = {Frequency.G01: UncertainValue(5e-9, 0.0)}

    for mode in ObservationDifference:
        with_ifb = _estimate(estimator, _receiver(ifb=ifb), mode)
        without = _estimate(estimator, _receiver(), mode)
        psr = with_ifb[ObservableType.PSEUDORANGE][0] - without[ObservableType.PSEUDORANGE][0]
        assert psr == pytest.approx(C * 5e-9, abs=1e-6)
        assert with_ifb[ObservableType.CARRIER] == without[ObservableType.CARRIER]


def test_inter_frequency_bias_only_for_matching_frequency() -> None:
    estimator = ObservationEstimator(NO_ATMOSPHERE)
    ifb = {Frequency.G02: UncertainValue(5e-9, 1e-9)}
    mode = ObservationDifference.NO_DIFFERENCE

    assert _estimate(estimator, _receiver(ifb=ifb), mode) == _estimate(estimator, _receiver(), mode)


def test_lower_cn0_does_not_reduce_variance() -> None:
    estimator = ObservationEstimator(NO_ATMOSPHERE, error_model=GnssMeasurementErrorModel(model=WeightingModel.CN0_REFERENCE))
    receiver = _receiver()
    mode = ObservationDifference.DOUBLE_DIFFERENCE

    weak = _estimate(estimator, receiver, mode, cn0_dbhz=30.0)
    strong = _estimate(estimator, receiver, mode, cn0_dbhz=45.0)
    missing = _estimate(estimator, receiver, mode, cn0_dbhz=None)

    for obs_type in ObservableType:
        assert weak[obs_type][1] >= strong[obs_type][1]
        assert missing[obs_type][1] >= weak[obs_type][1]


def test_recomputation_is_idempotent() -> None:
    estimator = ObservationEstimator(NO_ATMOSPHERE, troposphere=ConstTroposphere(2.4), ionosphere=ConstIonosphere(1.0))
    receivers = [_receiver(clock=_clock(1e-9, 1e-11))]
    observations = _observation_set(ura_m=1.0)
    estimator.compute_estimates(observations, receivers, None, ObservationDifference.NO_DIFFERENCE)

    again = observations.copy()
    again.reset_estimates()
    estimator.compute_estimates(again, receivers, None, ObservationDifference.NO_DIFFERENCE)

    for sat_sig_id, signal in observations.items():
        for recv, recv_obs in signal.recv_obs.items():
            for obs_type, data in recv_obs.obs.items():
                other = again[sat_sig_id].recv_obs[recv].obs[obs_type]
                assert other.estimate == data.estimate
                assert other.meas_var == data.meas_var


def test_estimates_finite_with_default_models() -> None:
    estimator = ObservationEstimator()
    result = _estimate(estimator, _receiver(clock=_clock()), ObservationDifference.NO_DIFFERENCE, ura_m=2.0)

    for estimate, var in result.values():
        assert np.isfinite(estimate)
        assert np.isfinite(var)
        assert var > 0.0


def test_missing_receiver_slot_raises() -> None:
    estimator = ObservationEstimator(NO_ATMOSPHERE)
    observations = _observation_set(recv=ReceiverType.BASE)

    with pytest.raises(LookupError, match="receiver slot"):
        estimator.compute_estimates(observations, [_receiver()], None, ObservationDifference.NO_DIFFERENCE)


def test_negative_receiver_slot_raises() -> None:
    estimator = ObservationEstimator(NO_ATMOSPHERE)
    observations = _observation_set(recv=-1)

    with pytest.raises(LookupError, match="receiver slot"):
        estimator.compute_estimates(
            observations, [_receiver(), _receiver()], None, ObservationDifference.NO_DIFFERENCE
        )


def test_missing_system_time_difference_raises() -> None:
    estimator = ObservationEstimator(NO_ATMOSPHERE)
    clock = ReceiverClock(
        sys_time_diff_bias={SatelliteSystem.GAL: UncertainValue()},
        sys_time_diff_drift={SatelliteSystem.GAL: UncertainValue()},
    )

    with pytest.raises(LookupError, match="GPS"):
        _estimate(estimator, _receiver(clock=clock), ObservationDifference.DOUBLE_DIFFERENCE)


def test_difference_table() -> None:
    dd = DIFFERENCE_TERMS[ObservationDifference.DOUBLE_DIFFERENCE]
    nd = DIFFERENCE_TERMS[ObservationDifference.NO_DIFFERENCE]

    assert dd.inter_frequency_bias
    assert not (dd.receiver_clock or dd.satellite_clock or dd.receiver_clock_var)
    assert all(vars(nd).values())


def test_debug_logging_reports_breakdown(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="gnss_obs")
    estimator = ObservationEstimator(NO_ATMOSPHERE, ionosphere=ConstIonosphere(2.0))
    receiver = _receiver(
        clock=_clock(bias_std=1e-9, drift_std=1e-11),
        ifb={Frequency.G01: UncertainValue(5e-9, 1e-9)},
    )

    result = _estimate(
        estimator,
        receiver,
        ObservationDifference.NO_DIFFERENCE,
        sat_clock=SatelliteClock(bias_s=2e-7, drift_sps=1e-11),
        ura_m=2.0,
    )

    text = caplog.text
    assert "Calculating observation estimates" in text
    for label in (
        "Geometrical range",
        "Sagnac correction",
        "Ionospheric delay",
        "Receiver clock bias",
        "Satellite clock bias",
        "Inter-system clock bias",
        "Inter-frequency bias",
        "Pseudorange estimate",
        "Line-of-sight range rate",
        "Sagnac rate correction",
        "Receiver clock drift",
        "Satellite clock drift",
        "Inter-system clock drift",
        "Measurement error variance",
        "Satellite position variance",
        "Ionosphere variance",
        "Code bias variance",
        "Inter-frequency bias variance",
        "Receiver clock bias variance",
        "Receiver clock drift variance",
        "Observation error variance",
    ):
        assert label in text

    # The logged pseudorange contributions add up to the logged estimate.
    term = re.compile(r"\[Pseudorange\]\[\S+\]\s+([ +-]) (\d+\.\d{4}) \[m\] ")
    total = 0.0
    for record in caplog.records:
        match = term.search(record.getMessage())
        if match:
            sign, value = match.groups()
            total += -float(value) if sign == "-" else float(value)
    assert total == pytest.approx(result[ObservableType.PSEUDORANGE][0], abs=1e-3)


def test_debug_logging_follows_difference_mode(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="gnss_obs")
    estimator = ObservationEstimator(NO_ATMOSPHERE)
    receiver = _receiver(clock=_clock(bias_std=1e-9), ifb={Frequency.G01: UncertainValue(5e-9, 1e-9)})

    _estimate(estimator, receiver, ObservationDifference.DOUBLE_DIFFERENCE, sat_clock=SatelliteClock(bias_s=2e-7))

    text = caplog.text
    assert "Inter-frequency bias" in text
    assert "Receiver clock" not in text
    assert "Satellite clock" not in text
    assert "Inter-system clock" not in text
    assert "Code bias variance" not in text


def test_estimation_does_not_import_report_module() -> None:
    sys.modules.pop("gnss_obs.report", None)
    _estimate(ObservationEstimator(), _receiver(), ObservationDifference.NO_DIFFERENCE)
    assert "gnss_obs.report" not in sys.modules
