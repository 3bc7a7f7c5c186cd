"""Satellite constellation models."""

from gnss_obs.sat.simple_gps import SimpleGpsConfig, SimpleGpsConstellation, SvState

__all__ = [
    "SimpleGpsConfig",
    "SimpleGpsConstellation",
    "SvState",
]
