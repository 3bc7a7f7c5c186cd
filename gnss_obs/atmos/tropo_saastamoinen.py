"""Saastamoinen zenith tropospheric delay model."""

from __future__ import annotations

import numpy as np

from gnss_obs.atmos.standard_atmosphere import water_vapor_pressure_hpa


def saastamoinen_zhd_m(lat_deg: float, alt_m: float, pressure_hpa: float) -> float:
    """Return the zenith hydrostatic delay in meters."""

    lat_rad = np.deg2rad(lat_deg)
    pressure_hpa = max(0.0, pressure_hpa)
    zhd = 0.0022768 * pressure_hpa / (1.0 - 0.00266 * np.cos(2.0 * lat_rad) - 0.00028 * alt_m / 1000.0)
    return float(max(zhd, 0.0))


def saastamoinen_zwd_m(temp_k: float, rel_humidity: float) -> float:
    """Return the zenith wet delay in meters."""

    temp_k = max(200.0, temp_k)
    e_hpa = water_vapor_pressure_hpa(temp_k, rel_humidity)
    return float(max(0.002277 * (1255.0 / temp_k + 0.05) * e_hpa, 0.0))
