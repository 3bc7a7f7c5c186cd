"""Receiver-satellite geometry and Earth-rotation corrections."""

from __future__ import annotations

import numpy as np

from gnss_obs.signals import LIGHT_SPEED_MPS
from gnss_obs.utils.wgs84 import OMEGA_EARTH_RPS


def geometric_range_m(receiver_ecef_m: np.ndarray, sv_ecef_m: np.ndarray) -> float:
    """Compute geometric range between receiver and satellite."""

    return float(np.linalg.norm(sv_ecef_m - receiver_ecef_m))


def line_of_sight_unit(receiver_ecef_m: np.ndarray, sv_ecef_m: np.ndarray) -> np.ndarray:
    """Unit vector pointing from the receiver to the satellite."""

    los = np.asarray(sv_ecef_m, dtype=float) - np.asarray(receiver_ecef_m, dtype=float)
    return los / np.linalg.norm(los)


def sagnac_correction_m(receiver_ecef_m: np.ndarray, sv_ecef_m: np.ndarray) -> float:
    """Range correction for Earth rotation during signal transit."""

    return float(
        OMEGA_EARTH_RPS / LIGHT_SPEED_MPS * (sv_ecef_m[0] * receiver_ecef_m[1] - sv_ecef_m[1] * receiver_ecef_m[0])
    )


def sagnac_rate_correction_mps(
    receiver_ecef_m: np.ndarray,
    sv_ecef_m: np.ndarray,
    receiver_vel_mps: np.ndarray,
    sv_vel_mps: np.ndarray,
) -> float:
    """Time derivative of :func:`sagnac_correction_m`."""

    return float(
        OMEGA_EARTH_RPS
        / LIGHT_SPEED_MPS
        * (
            sv_vel_mps[0] * receiver_ecef_m[1]
            + sv_ecef_m[0] * receiver_vel_mps[1]
            - sv_vel_mps[1] * receiver_ecef_m[0]
            - sv_ecef_m[1] * receiver_vel_mps[0]
        )
    )


def range_rate_mps(
    los_unit: np.ndarray,
    receiver_vel_mps: np.ndarray,
    sv_vel_mps: np.ndarray,
) -> float:
    """Relative velocity projected onto the line of sight."""

    return float(np.dot(los_unit, np.asarray(sv_vel_mps) - np.asarray(receiver_vel_mps)))
