"""Receiver-to-satellite look angles."""

from __future__ import annotations

import numpy as np

from gnss_obs.utils.wgs84 import ecef_to_enu_matrix, ecef_to_lla


def elev_az_from_rx_sv(pos_rx: np.ndarray, pos_sv: np.ndarray) -> tuple[float, float]:
    """Compute elevation and azimuth (deg) from receiver to satellite using ENU.

    Azimuth is measured clockwise from north and wrapped into [0, 360).
    """

    lat_deg, lon_deg, _ = ecef_to_lla(pos_rx)
    east, north, up = ecef_to_enu_matrix(lat_deg, lon_deg) @ (pos_sv - pos_rx)
    elev = float(np.rad2deg(np.arctan2(up, np.hypot(east, north))))
    az = float(np.rad2deg(np.arctan2(east, north)))
    if az < 0.0:
        az += 360.0
    return elev, az
