"""Simplified GPS-like constellation with circular orbits."""

from __future__ import annotations

from dataclasses import dataclass
from math import ceil

import numpy as np

from gnss_obs.models import SatelliteClock
from gnss_obs.utils.wgs84 import OMEGA_EARTH_RPS

MU_EARTH = 3.986004418e14


@dataclass(frozen=True)
class SvState:
    """Satellite ECEF state and clock at a given epoch."""

    sat_num: int
    t: float
    pos_ecef_m: np.ndarray
    vel_ecef_mps: np.ndarray
    clock: SatelliteClock


@dataclass(frozen=True)
class SimpleGpsConfig:
    """Configuration for the simplified GPS constellation."""

    num_sats: int = 24
    num_planes: int = 6
    radius_m: float = 26_560_000.0
    inclination_deg: float = 55.0
    seed: int | None = 0
    clock_bias_sigma_s: float = 50e-9
    clock_drift_sigma_sps: float = 1e-10
    enable_clock: bool = True


def _rot_z(angle_rad: float) -> np.ndarray:
    cos_a, sin_a = np.cos(angle_rad), np.sin(angle_rad)
    return np.array([[cos_a, -sin_a, 0.0], [sin_a, cos_a, 0.0], [0.0, 0.0, 1.0]], dtype=float)


def _rot_x(angle_rad: float) -> np.ndarray:
    cos_a, sin_a = np.cos(angle_rad), np.sin(angle_rad)
    return np.array([[1.0, 0.0, 0.0], [0.0, cos_a, -sin_a], [0.0, sin_a, cos_a]], dtype=float)


class SimpleGpsConstellation:
    """Deterministic GPS-like constellation.

    Satellites are spread over equally spaced planes with random phase
    offsets drawn from ``config.seed``; clocks get a random constant drift.
    """

    def __init__(self, config: SimpleGpsConfig | None = None) -> None:
        self.config = config or SimpleGpsConfig()
        if self.config.num_sats < 1:
            raise ValueError("num_sats must be positive.")
        rng = np.random.default_rng(self.config.seed)
        num_planes = max(1, min(self.config.num_planes, self.config.num_sats))
        self._mean_motion = float(np.sqrt(MU_EARTH / self.config.radius_m**3))
        self._plane_rot = [
            _rot_z(raan) @ _rot_x(np.deg2rad(self.config.inclination_deg))
            for raan in np.linspace(0.0, 2.0 * np.pi, num_planes, endpoint=False)
        ]
        plane_offsets = rng.uniform(0.0, 2.0 * np.pi, size=num_planes)
        sats_per_plane = ceil(self.config.num_sats / num_planes)
        self._plane_index = [i % num_planes for i in range(self.config.num_sats)]
        self._mean_anom = np.array(
            [
                2.0 * np.pi * (i // num_planes) / sats_per_plane + plane_offsets[i % num_planes]
                for i in range(self.config.num_sats)
            ]
        )
        if self.config.enable_clock:
            self._clk_bias = rng.normal(0.0, self.config.clock_bias_sigma_s, size=self.config.num_sats)
            self._clk_drift = rng.normal(0.0, self.config.clock_drift_sigma_sps, size=self.config.num_sats)
        else:
            self._clk_bias = np.zeros(self.config.num_sats)
            self._clk_drift = np.zeros(self.config.num_sats)

    def get_sv_states(self, t: float) -> list[SvState]:
        """Return satellite states at ``t`` seconds after the reference epoch."""

        rot_earth = _rot_z(-OMEGA_EARTH_RPS * t)
        omega = np.array([0.0, 0.0, OMEGA_EARTH_RPS])
        radius = self.config.radius_m
        states: list[SvState] = []
        for idx, plane in enumerate(self._plane_index):
            theta = self._mean_motion * t + self._mean_anom[idx]
            r_orb = radius * np.array([np.cos(theta), np.sin(theta), 0.0])
            v_orb = radius * self._mean_motion * np.array([-np.sin(theta), np.cos(theta), 0.0])
            r_eci = self._plane_rot[plane] @ r_orb
            v_eci = self._plane_rot[plane] @ v_orb
            r_ecef = rot_earth @ r_eci
            v_ecef = rot_earth @ v_eci - np.cross(omega, r_ecef)
            states.append(
                SvState(
                    sat_num=idx + 1,
                    t=t,
                    pos_ecef_m=r_ecef,
                    vel_ecef_mps=v_ecef,
                    clock=SatelliteClock(
                        bias_s=float(self._clk_bias[idx] + self._clk_drift[idx] * t),
                        drift_sps=float(self._clk_drift[idx]),
                    ),
                )
            )
        return states
