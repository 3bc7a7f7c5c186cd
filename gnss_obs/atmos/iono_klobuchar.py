"""Klobuchar broadcast ionospheric delay model (IS-GPS-200)."""

from __future__ import annotations

import numpy as np

from gnss_obs.signals import LIGHT_SPEED_MPS

DEFAULT_ALPHA = (2.5e-8, 1.5e-8, -1.2e-7, 0.0)
DEFAULT_BETA = (90_000.0, 0.0, -110_000.0, 0.0)

Coefficients = tuple[float, float, float, float]


def klobuchar_delay_s(
    tow_s: float,
    lat_deg: float,
    lon_deg: float,
    elev_deg: float,
    az_deg: float,
    alpha: Coefficients | None = None,
    beta: Coefficients | None = None,
) -> float:
    """Return the L1 ionospheric group delay in seconds."""

    alpha = DEFAULT_ALPHA if alpha is None else alpha
    beta = DEFAULT_BETA if beta is None else beta

    # Semicircles, except the azimuth which stays in radians
    lat_sc = lat_deg / 180.0
    lon_sc = lon_deg / 180.0
    elev_sc = max(elev_deg / 180.0, 1e-3)
    az_rad = np.deg2rad(az_deg)

    # Earth-centred angle to the ionospheric pierce point
    psi = 0.0137 / (elev_sc + 0.11) - 0.022
    phi_i = float(np.clip(lat_sc + psi * np.cos(az_rad), -0.416, 0.416))
    lam_i = lon_sc + psi * np.sin(az_rad) / np.cos(phi_i * np.pi)
    phi_m = phi_i + 0.064 * np.cos((lam_i - 1.617) * np.pi)

    t_local = np.mod(43_200.0 * lam_i + tow_s, 86_400.0)

    amp = max(0.0, float(np.polyval(alpha[::-1], phi_m)))
    per = max(72_000.0, float(np.polyval(beta[::-1], phi_m)))

    x = 2.0 * np.pi * (t_local - 50_400.0) / per
    slant_factor = 1.0 + 16.0 * (0.53 - elev_sc) ** 3
    if abs(x) < 1.57:
        return float(slant_factor * (5e-9 + amp * (1.0 - x**2 / 2.0 + x**4 / 24.0)))
    return float(slant_factor * 5e-9)


def klobuchar_delay_m(
    tow_s: float,
    lat_deg: float,
    lon_deg: float,
    elev_deg: float,
    az_deg: float,
    alpha: Coefficients | None = None,
    beta: Coefficients | None = None,
) -> float:
    """Return the L1 ionospheric group delay in meters."""

    delay_s = klobuchar_delay_s(tow_s, lat_deg, lon_deg, elev_deg, az_deg, alpha=alpha, beta=beta)
    return max(LIGHT_SPEED_MPS * delay_s, 0.0)
