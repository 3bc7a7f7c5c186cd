"""Command line entrypoint.

Two commands:
  1) estimate      run the estimator on a synthetic epoch and print/save the table
  2) error-budget  plot the configured measurement error model
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np

from gnss_obs.config import EstimatorConfig, load_estimator_config
from gnss_obs.estimator import ObservationDifference, ObservationEstimator
from gnss_obs.models import ReceiverClock, ReceiverState, ReceiverType, UncertainValue
from gnss_obs.sat.simple_gps import SimpleGpsConfig, SimpleGpsConstellation
from gnss_obs.synthetic import SyntheticEpochSource
from gnss_obs.time import GnssTime
from gnss_obs.utils.logging import get_logger
from gnss_obs.utils.wgs84 import lla_to_ecef

logger = get_logger(__name__)

# Rover and base roughly 1 km apart.
_ROVER_LLA = (48.780, 9.172, 300.0)
_BASE_LLA = (48.789, 9.172, 310.0)


def _load_config(path: str | None) -> EstimatorConfig:
    if path is None:
        return EstimatorConfig()
    return load_estimator_config(path)


def _demo_receivers(time: GnssTime) -> list[ReceiverState]:
    clock = ReceiverClock(bias=UncertainValue(4.2e-6, 1e-9), drift=UncertainValue(1e-9, 1e-11))
    return [
        ReceiverState(ReceiverType.ROVER, time, lla_to_ecef(*_ROVER_LLA), clock=clock),
        ReceiverState(ReceiverType.BASE, time, lla_to_ecef(*_BASE_LLA), clock=clock),
    ]


def _cmd_estimate(args: argparse.Namespace) -> None:
    from gnss_obs.report import observations_to_frame

    config = _load_config(args.config)
    time = GnssTime(week=args.week, tow_s=args.tow)
    source = SyntheticEpochSource(
        constellation=SimpleGpsConstellation(SimpleGpsConfig(seed=args.seed)),
        receivers=_demo_receivers(time),
        pr_sigma_m=args.pr_sigma,
        rng=np.random.default_rng(args.seed),
    )
    observations = source.build(0.0)
    logger.info("Built %d signals from the synthetic constellation", len(observations))

    estimator = ObservationEstimator(config)
    estimator.compute_estimates(
        observations, source.receivers, source.ionospheric_corrections, ObservationDifference(args.mode), "cli"
    )
    frame = observations_to_frame(observations)
    if args.csv:
        out = Path(args.csv)
        out.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(out, index=False)
        logger.info("Wrote %d rows to %s", len(frame), out)
    else:
        print(frame.to_string(index=False))


def _cmd_error_budget(args: argparse.Namespace) -> None:
    from gnss_obs.report import plot_error_budget

    config = _load_config(args.config)
    out = plot_error_budget(config.gnss_measurement_error, args.out, cn0_dbhz=args.cn0)
    logger.info("Saved error budget plot to %s", out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gnss-obs", description="GNSS observation estimator")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO, -vv for DEBUG")
    sub = parser.add_subparsers(dest="cmd", required=True)

    est = sub.add_parser("estimate", help="Estimate observations of a synthetic epoch")
    est.add_argument("--config", type=str, default=None, help="Path to an estimator config JSON file")
    est.add_argument("--mode", choices=[m.value for m in ObservationDifference], default="none")
    est.add_argument("--seed", type=int, default=7)
    est.add_argument("--week", type=int, default=2300)
    est.add_argument("--tow", type=float, default=345_600.0)
    est.add_argument("--pr-sigma", type=float, default=0.0, help="Pseudorange noise sigma (m)")
    est.add_argument("--csv", type=str, default=None, help="Write the table to this CSV file")
    est.set_defaults(func=_cmd_estimate)

    budget = sub.add_parser("error-budget", help="Plot measurement sigma against elevation")
    budget.add_argument("--config", type=str, default=None, help="Path to an estimator config JSON file")
    budget.add_argument("--cn0", type=float, default=45.0, help="CN0 in dB-Hz")
    budget.add_argument("--out", type=str, required=True, help="Output PNG path")
    budget.set_defaults(func=_cmd_error_budget)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        get_logger("gnss_obs", logging.DEBUG if args.verbose > 1 else logging.INFO)
    args.func(args)


if __name__ == "__main__":
    main()
