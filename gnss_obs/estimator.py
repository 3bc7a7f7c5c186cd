"""Observation estimates and measurement variances for one epoch.

For every signal and receiver the estimator models the expected
pseudorange, carrier-phase range and range-rate from the receiver state,
the satellite state and the configured correction providers, then builds the
measurement variance from the error model plus the error contributions that
survive the selected observation differencing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

import numpy as np

from gnss_obs.atmos.ionosphere import (
    IonosphereProvider,
    IonosphericCorrections,
    ModelIonosphere,
    iono_error_var,
)
from gnss_obs.atmos.troposphere import ModelTroposphere, TroposphereProvider, tropo_error_var
from gnss_obs.config import EstimatorConfig
from gnss_obs.geometry import (
    geometric_range_m,
    range_rate_mps,
    sagnac_correction_m,
    sagnac_rate_correction_mps,
)
from gnss_obs.meas.error_model import GnssMeasurementErrorModel
from gnss_obs.models import (
    ObservableType,
    ObservationData,
    ObservationSet,
    ReceiverObservation,
    ReceiverState,
    SatSigId,
    SignalObservation,
    UncertainValue,
)
from gnss_obs.signals import LIGHT_SPEED_MPS
from gnss_obs.utils.logging import get_logger
from gnss_obs.utils.wgs84 import GeodeticPosition

logger = get_logger(__name__)


class ObservationDifference(str, Enum):
    """How the estimates are used downstream."""

    NO_DIFFERENCE = "none"
    SINGLE_DIFFERENCE = "single"
    DOUBLE_DIFFERENCE = "double"


@dataclass(frozen=True)
class DifferenceTerms:
    """Terms kept in the estimate and variance for one differencing mode."""

    receiver_clock: bool
    satellite_clock: bool
    system_time_difference: bool
    inter_frequency_bias: bool
    satellite_error_var: bool  # satellite position, ionosphere and troposphere
    code_bias_var: bool  # code bias and inter-frequency bias
    receiver_clock_var: bool


DIFFERENCE_TERMS: dict[ObservationDifference, DifferenceTerms] = {
    ObservationDifference.NO_DIFFERENCE: DifferenceTerms(
        receiver_clock=True,
        satellite_clock=True,
        system_time_difference=True,
        inter_frequency_bias=True,
        satellite_error_var=True,
        code_bias_var=True,
        receiver_clock_var=True,
    ),
    ObservationDifference.SINGLE_DIFFERENCE: DifferenceTerms(
        receiver_clock=True,
        satellite_clock=False,
        system_time_difference=True,
        inter_frequency_bias=True,
        satellite_error_var=False,
        code_bias_var=False,
        receiver_clock_var=True,
    ),
    ObservationDifference.DOUBLE_DIFFERENCE: DifferenceTerms(
        receiver_clock=False,
        satellite_clock=False,
        system_time_difference=False,
        inter_frequency_bias=True,
        satellite_error_var=False,
        code_bias_var=False,
        receiver_clock_var=False,
    ),
}

# (label, value) contributions summed into one estimate or variance
Contributions = list[tuple[str, float]]


@dataclass(frozen=True)
class _PairContext:
    """Everything one observable needs for a signal/receiver pair."""

    sat_sig_id: SatSigId
    recv: int
    signal: SignalObservation
    receiver: ReceiverState
    recv_obs: ReceiverObservation
    sys_bias: UncertainValue
    sys_drift: UncertainValue
    ifb: UncertainValue | None
    cn0_dbhz: float


def _lookup_receiver(receivers: Sequence[ReceiverState], recv: int) -> ReceiverState:
    if recv < 0:
        raise LookupError(f"Invalid receiver slot {recv!r}")
    try:
        return receivers[recv]
    except IndexError as exc:
        raise LookupError(f"No receiver state for receiver slot {recv!r}") from exc


def _lookup_system_term(terms, sat_sig_id: SatSigId, recv: int, label: str) -> UncertainValue:
    try:
        return terms[sat_sig_id.sat_sys]
    except KeyError as exc:
        raise LookupError(
            f"Receiver slot {recv!r} has no {label} for {sat_sig_id.sat_sys.name}"
        ) from exc


def _clock_contributions(
    terms: DifferenceTerms,
    receiver: UncertainValue,
    satellite_s: float,
    system: UncertainValue,
    kind: str,
) -> Contributions:
    """Clock bias [m] or drift [m/s] contributions kept by the differencing mode."""

    parts: Contributions = []
    if terms.receiver_clock:
        parts.append((f"Receiver clock {kind}", LIGHT_SPEED_MPS * receiver.value))
    if terms.satellite_clock:
        parts.append((f"Satellite clock {kind}", -LIGHT_SPEED_MPS * satellite_s))
    if terms.system_time_difference:
        parts.append((f"Inter-system clock {kind}", LIGHT_SPEED_MPS * system.value))
    return parts


class ObservationEstimator:
    """Computes observation estimates and variances for an epoch."""

    def __init__(
        self,
        config: EstimatorConfig | None = None,
        *,
        troposphere: TroposphereProvider | None = None,
        ionosphere: IonosphereProvider | None = None,
        error_model: GnssMeasurementErrorModel | None = None,
    ) -> None:
        self.config = config or EstimatorConfig()
        self.troposphere = troposphere or ModelTroposphere(self.config.troposphere_models)
        self.ionosphere = ionosphere or ModelIonosphere(self.config.ionosphere_model)
        self.error_model = error_model or self.config.gnss_measurement_error
        self._estimators: dict[
            ObservableType, Callable[[_PairContext, DifferenceTerms], tuple[Contributions, Contributions]]
        ] = {
            ObservableType.PSEUDORANGE: self._pseudorange,
            ObservableType.CARRIER: self._carrier,
            ObservableType.DOPPLER: self._doppler,
        }

    def compute_estimates(
        self,
        observations: ObservationSet,
        receivers: Sequence[ReceiverState],
        ionospheric_corrections: IonosphericCorrections | None,
        obs_diff: ObservationDifference,
        name_id: str = "",
    ) -> None:
        """Fill ``estimate`` and ``meas_var`` of every observable in place.

        ``receivers`` is indexed by the receiver slot used as key in each
        signal's ``recv_obs``. A slot or per-system clock entry missing from
        the receiver states raises ``LookupError``.
        """

        terms = DIFFERENCE_TERMS[obs_diff]
        debug = logger.isEnabledFor(logging.DEBUG)
        if debug:
            logger.debug("%s: Calculating observation estimates (%s)", name_id, obs_diff.name)
        lla_cache: dict[int, GeodeticPosition] = {}

        for sat_sig_id, signal in observations.items():
            for recv, recv_obs in signal.recv_obs.items():
                receiver = _lookup_receiver(receivers, recv)
                if recv not in lla_cache:
                    lla_cache[recv] = receiver.lla
                self._update_terms(
                    sat_sig_id, signal, receiver, recv_obs, lla_cache[recv], ionospheric_corrections
                )
                ctx = _PairContext(
                    sat_sig_id=sat_sig_id,
                    recv=recv,
                    signal=signal,
                    receiver=receiver,
                    recv_obs=recv_obs,
                    sys_bias=_lookup_system_term(
                        receiver.clock.sys_time_diff_bias, sat_sig_id, recv, "system time difference bias"
                    ),
                    sys_drift=_lookup_system_term(
                        receiver.clock.sys_time_diff_drift, sat_sig_id, recv, "system time difference drift"
                    ),
                    ifb=receiver.inter_frequency_bias.get(sat_sig_id.freq),
                    cn0_dbhz=recv_obs.cn0_or_default,
                )
                for obs_type, obs_data in recv_obs.obs.items():
                    parts, var_parts = self._estimators[obs_type](ctx, terms)
                    obs_data.estimate = float(sum(value for _, value in parts))
                    obs_data.meas_var = float(sum(value for _, value in var_parts))
                    if debug:
                        self._log_result(ctx, obs_type, obs_data, parts, var_parts, name_id)

    def _update_terms(
        self,
        sat_sig_id: SatSigId,
        signal: SignalObservation,
        receiver: ReceiverState,
        recv_obs: ReceiverObservation,
        lla: GeodeticPosition,
        ionospheric_corrections: IonosphericCorrections | None,
    ) -> None:
        out = recv_obs.terms
        out.range_m = geometric_range_m(receiver.pos_ecef_m, recv_obs.sat_pos_ecef_m)
        out.tropo_zenith = self.troposphere.zenith_delay(
            receiver.time, lla, recv_obs.elev_deg, recv_obs.az_deg
        )
        out.tropo_delay_m = out.tropo_zenith.slant_delay_m
        out.iono_delay_m = self.ionosphere.delay_m(
            receiver.time.tow_s,
            sat_sig_id.freq,
            signal.freq_num,
            lla,
            recv_obs.elev_deg,
            recv_obs.az_deg,
            ionospheric_corrections,
        )
        out.sagnac_m = sagnac_correction_m(receiver.pos_ecef_m, recv_obs.sat_pos_ecef_m)
        out.sagnac_rate_mps = sagnac_rate_correction_mps(
            receiver.pos_ecef_m,
            recv_obs.sat_pos_ecef_m,
            receiver.vel_ecef_mps,
            recv_obs.sat_vel_ecef_mps,
        )

    def _range_variance(self, ctx: _PairContext, terms: DifferenceTerms) -> Contributions:
        """Variance contributions shared by pseudorange and carrier [m^2]."""

        parts: Contributions = []
        t = ctx.recv_obs.terms
        if terms.satellite_error_var:
            parts.append(("Satellite position variance", ctx.signal.nav.calc_satellite_position_variance()))
            parts.append(("Ionosphere variance", iono_error_var(t.iono_delay_m)))
            parts.append(("Troposphere variance", tropo_error_var(t.tropo_delay_m, ctx.recv_obs.elev_deg)))
        if terms.receiver_clock_var:
            parts.append(
                (
                    "Receiver clock bias variance",
                    LIGHT_SPEED_MPS**2 * (ctx.receiver.clock.bias.std_dev**2 + ctx.sys_bias.std_dev**2),
                )
            )
        return parts

    def _pseudorange(self, ctx: _PairContext, terms: DifferenceTerms) -> tuple[Contributions, Contributions]:
        t = ctx.recv_obs.terms
        parts: Contributions = [
            ("Geometrical range", t.range_m),
            ("Sagnac correction", t.sagnac_m),
            ("Tropospheric delay", t.tropo_delay_m),
            ("Ionospheric delay", t.iono_delay_m),
        ]
        parts += _clock_contributions(
            terms, ctx.receiver.clock.bias, ctx.recv_obs.sat_clock.bias_s, ctx.sys_bias, "bias"
        )
        if ctx.ifb is not None and terms.inter_frequency_bias:
            parts.append(("Inter-frequency bias", LIGHT_SPEED_MPS * ctx.ifb.value))

        var_parts: Contributions = [
            (
                "Measurement error variance",
                self.error_model.psr_meas_error_var(ctx.sat_sig_id.sat_sys, ctx.recv_obs.elev_deg, ctx.cn0_dbhz),
            )
        ]
        var_parts += self._range_variance(ctx, terms)
        if terms.code_bias_var:
            var_parts.append(("Code bias variance", self.error_model.code_bias_error_var()))
            if ctx.ifb is not None:
                var_parts.append(("Inter-frequency bias variance", (LIGHT_SPEED_MPS * ctx.ifb.std_dev) ** 2))
        return parts, var_parts

    def _carrier(self, ctx: _PairContext, terms: DifferenceTerms) -> tuple[Contributions, Contributions]:
        t = ctx.recv_obs.terms
        parts: Contributions = [
            ("Geometrical range", t.range_m),
            ("Sagnac correction", t.sagnac_m),
            ("Tropospheric delay", t.tropo_delay_m),
            ("Ionospheric delay", -t.iono_delay_m),
        ]
        parts += _clock_contributions(
            terms, ctx.receiver.clock.bias, ctx.recv_obs.sat_clock.bias_s, ctx.sys_bias, "bias"
        )

        var_parts: Contributions = [
            (
                "Measurement error variance",
                self.error_model.carrier_meas_error_var(ctx.sat_sig_id.sat_sys, ctx.recv_obs.elev_deg, ctx.cn0_dbhz),
            )
        ]
        var_parts += self._range_variance(ctx, terms)
        return parts, var_parts

    def _doppler(self, ctx: _PairContext, terms: DifferenceTerms) -> tuple[Contributions, Contributions]:
        recv_obs = ctx.recv_obs
        parts: Contributions = [
            (
                "Line-of-sight range rate",
                range_rate_mps(recv_obs.los_unit_ecef, ctx.receiver.vel_ecef_mps, recv_obs.sat_vel_ecef_mps),
            ),
            ("Sagnac rate correction", recv_obs.terms.sagnac_rate_mps),
        ]
        parts += _clock_contributions(
            terms, ctx.receiver.clock.drift, recv_obs.sat_clock.drift_sps, ctx.sys_drift, "drift"
        )

        var_parts: Contributions = [
            (
                "Measurement error variance",
                self.error_model.psr_rate_meas_error_var(ctx.sat_sig_id.sat_sys, recv_obs.elev_deg, ctx.cn0_dbhz),
            )
        ]
        if terms.receiver_clock_var:
            var_parts.append(
                (
                    "Receiver clock drift variance",
                    LIGHT_SPEED_MPS**2 * (ctx.receiver.clock.drift.std_dev**2 + ctx.sys_drift.std_dev**2),
                )
            )
        return parts, var_parts

    @staticmethod
    def _log_result(
        ctx: _PairContext,
        obs_type: ObservableType,
        obs_data: ObservationData,
        parts: Contributions,
        var_parts: Contributions,
        name_id: str,
    ) -> None:
        prefix = f"{name_id}:   [{ctx.sat_sig_id}][{obs_type.value:11}][{ctx.recv}]"
        if obs_type is ObservableType.DOPPLER:
            unit, var_unit = "m/s", "m^2/s^2"
        else:
            unit, var_unit = "m", "m^2"

        for idx, (label, value) in enumerate(parts):
            sign = " " if idx == 0 else ("-" if value < 0.0 else "+")
            logger.debug("%s   %s %.4f [%s] %s", prefix, sign, abs(value), unit, label)
        logger.debug("%s   = %.4f [%s] %s estimate", prefix, obs_data.estimate, unit, obs_type.value)
        if np.isfinite(obs_data.measurement):
            logger.debug("%s       %.4e [%s] Difference to measurement", prefix, obs_data.measurement - obs_data.estimate, unit)

        for idx, (label, value) in enumerate(var_parts):
            logger.debug("%s   %s %.4g [%s] %s", prefix, " " if idx == 0 else "+", value, var_unit, label)
        logger.debug("%s   = %.4g [%s] Observation error variance", prefix, obs_data.meas_var, var_unit)
