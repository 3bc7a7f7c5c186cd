"""GNSS observation estimation and error-budget engine."""

from gnss_obs import atmos, meas, utils
from gnss_obs.config import EstimatorConfig, load_estimator_config, save_estimator_config
from gnss_obs.estimator import DIFFERENCE_TERMS, ObservationDifference, ObservationEstimator
from gnss_obs.models import (
    ObservableType,
    ObservationData,
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
from gnss_obs.signals import Frequency, SatelliteSystem
from gnss_obs.time import GnssTime

__all__ = [
    "DIFFERENCE_TERMS",
    "EstimatorConfig",
    "Frequency",
    "GnssTime",
    "ObservableType",
    "ObservationData",
    "ObservationDifference",
    "ObservationEstimator",
    "ObservationSet",
    "ReceiverClock",
    "ReceiverObservation",
    "ReceiverState",
    "ReceiverType",
    "SatSigId",
    "SatelliteClock",
    "SatelliteNavData",
    "SatelliteSystem",
    "SignalObservation",
    "UncertainValue",
    "load_estimator_config",
    "save_estimator_config",
    "atmos",
    "meas",
    "utils",
]
