"""Geometry and logging utilities.

NOTE: Keep this package lightweight.
Avoid importing optional dependencies (matplotlib, pandas) at import time.
"""

from gnss_obs.utils.angles import elev_az_from_rx_sv
from gnss_obs.utils.logging import get_logger
from gnss_obs.utils.wgs84 import (
    OMEGA_EARTH_RPS,
    GeodeticPosition,
    ecef_to_enu_matrix,
    ecef_to_lla,
    lla_to_ecef,
)

__all__ = [
    "OMEGA_EARTH_RPS",
    "GeodeticPosition",
    "ecef_to_enu_matrix",
    "ecef_to_lla",
    "elev_az_from_rx_sv",
    "get_logger",
    "lla_to_ecef",
]
