from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from gnss_obs.estimator import ObservationDifference, ObservationEstimator
from gnss_obs.meas.error_model import GnssMeasurementErrorModel, WeightingModel
from gnss_obs.models import ReceiverState, ReceiverType
from gnss_obs.report import FRAME_COLUMNS, observations_to_frame, plot_error_budget
from gnss_obs.sat.simple_gps import SimpleGpsConfig, SimpleGpsConstellation
from gnss_obs.synthetic import SyntheticEpochSource
from gnss_obs.time import GnssTime
from gnss_obs.utils.wgs84 import lla_to_ecef


def test_observations_to_frame() -> None:
    pytest.importorskip("pandas")

    time = GnssTime(2300, 345_600.0)
    source = SyntheticEpochSource(
        constellation=SimpleGpsConstellation(SimpleGpsConfig(seed=7)),
        receivers=[ReceiverState(ReceiverType.ROVER, time, lla_to_ecef(48.78, 9.172, 300.0))],
    )
    observations = source.build(0.0)
    ObservationEstimator().compute_estimates(observations, source.receivers, None, ObservationDifference.SINGLE_DIFFERENCE)

    frame = observations_to_frame(observations)

    assert list(frame.columns) == FRAME_COLUMNS
    assert len(frame) == 3 * len(observations)
    assert set(frame["obs_type"]) == {"Pseudorange", "Carrier", "Doppler"}
    assert np.all(np.isfinite(frame["estimate"]))
    assert np.all(frame["meas_var"] > 0.0)


def test_plot_error_budget(tmp_path: Path) -> None:
    pytest.importorskip("matplotlib")

    out = plot_error_budget(GnssMeasurementErrorModel(model=WeightingModel.SINE_CN0), tmp_path / "plots" / "budget.png")

    assert out.exists()
    assert out.stat().st_size > 0
