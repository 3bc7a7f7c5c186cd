"""Measurement error models."""

from gnss_obs.meas.error_model import GnssMeasurementErrorModel, WeightingModel

__all__ = [
    "GnssMeasurementErrorModel",
    "WeightingModel",
]
