"""WGS-84 ellipsoid and geodetic conversions."""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

WGS84_A_M = 6_378_137.0
WGS84_F = 1.0 / 298.257223563
WGS84_B_M = WGS84_A_M * (1.0 - WGS84_F)
WGS84_E2 = WGS84_F * (2.0 - WGS84_F)
WGS84_EP2 = (WGS84_A_M**2 - WGS84_B_M**2) / WGS84_B_M**2
OMEGA_EARTH_RPS = 7.2921151467e-5


class GeodeticPosition(NamedTuple):
    """Geodetic latitude/longitude (deg) and ellipsoidal height (m)."""

    lat_deg: float
    lon_deg: float
    alt_m: float


def lla_to_ecef(lat_deg: float, lon_deg: float, alt_m: float) -> np.ndarray:
    """Convert geodetic latitude/longitude/altitude to ECEF meters."""

    lat = np.deg2rad(lat_deg)
    lon = np.deg2rad(lon_deg)
    sin_lat = np.sin(lat)
    cos_lat = np.cos(lat)

    # Prime vertical radius of curvature
    n = WGS84_A_M / np.sqrt(1.0 - WGS84_E2 * sin_lat**2)
    return np.array(
        [
            (n + alt_m) * cos_lat * np.cos(lon),
            (n + alt_m) * cos_lat * np.sin(lon),
            (n * (1.0 - WGS84_E2) + alt_m) * sin_lat,
        ],
        dtype=float,
    )


def ecef_to_lla(pos_ecef_m: np.ndarray) -> GeodeticPosition:
    """Convert an ECEF position to geodetic coordinates.

    Bowring's closed form gives the starting latitude, which is then refined
    by fixed-point iteration until it moves less than 1e-12 rad.
    """

    x_m, y_m, z_m = (float(v) for v in pos_ecef_m)
    lon = np.arctan2(y_m, x_m)
    p = np.hypot(x_m, y_m)

    if p == 0.0:
        lat = np.pi / 2.0 if z_m >= 0.0 else -np.pi / 2.0
        return GeodeticPosition(float(np.rad2deg(lat)), float(np.rad2deg(lon)), abs(z_m) - WGS84_B_M)

    theta = np.arctan2(z_m * WGS84_A_M, p * WGS84_B_M)
    lat = np.arctan2(
        z_m + WGS84_EP2 * WGS84_B_M * np.sin(theta) ** 3,
        p - WGS84_E2 * WGS84_A_M * np.cos(theta) ** 3,
    )
    for _ in range(5):
        n = WGS84_A_M / np.sqrt(1.0 - WGS84_E2 * np.sin(lat) ** 2)
        alt = p / np.cos(lat) - n
        lat_next = np.arctan2(z_m, p * (1.0 - WGS84_E2 * n / (n + alt)))
        converged = abs(lat_next - lat) < 1e-12
        lat = lat_next
        if converged:
            break

    n = WGS84_A_M / np.sqrt(1.0 - WGS84_E2 * np.sin(lat) ** 2)
    alt = p / np.cos(lat) - n
    return GeodeticPosition(float(np.rad2deg(lat)), float(np.rad2deg(lon)), float(alt))


def ecef_to_enu_matrix(lat_deg: float, lon_deg: float) -> np.ndarray:
    """Return the rotation matrix from ECEF to local East-North-Up."""

    lat = np.deg2rad(lat_deg)
    lon = np.deg2rad(lon_deg)
    sin_lat, cos_lat = np.sin(lat), np.cos(lat)
    sin_lon, cos_lon = np.sin(lon), np.cos(lon)
    return np.array(
        [
            [-sin_lon, cos_lon, 0.0],
            [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],
            [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat],
        ],
        dtype=float,
    )
