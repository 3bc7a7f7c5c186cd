"""Tropospheric mapping functions.

Niell (1996) coefficients are tabulated at 15, 30, 45, 60 and 75 degrees of
latitude and interpolated linearly in between; outside that band the edge
values apply.
"""

from __future__ import annotations

import numpy as np

MIN_ELEVATION_DEG = 0.1

_NMF_LATITUDES_DEG = np.array([15.0, 30.0, 45.0, 60.0, 75.0])

_NMF_HYDRO_AVG = np.array(
    [
        [1.2769934e-3, 1.2683230e-3, 1.2465397e-3, 1.2196049e-3, 1.2045996e-3],
        [2.9153695e-3, 2.9152299e-3, 2.9288445e-3, 2.9022565e-3, 2.9024912e-3],
        [62.610505e-3, 62.837393e-3, 63.721774e-3, 63.824265e-3, 64.258455e-3],
    ]
)
_NMF_HYDRO_AMP = np.array(
    [
        [0.0, 1.2709626e-5, 2.6523662e-5, 3.4000452e-5, 4.1202191e-5],
        [0.0, 2.1414979e-5, 3.0160779e-5, 7.2562722e-5, 11.723375e-5],
        [0.0, 9.0128400e-5, 4.3497037e-5, 84.795348e-5, 170.37206e-5],
    ]
)
_NMF_WET = np.array(
    [
        [5.8021897e-4, 5.6794847e-4, 5.8118019e-4, 5.9727542e-4, 6.1641693e-4],
        [1.4275268e-3, 1.5138625e-3, 1.4572752e-3, 1.5007428e-3, 1.7599082e-3],
        [4.3472961e-2, 4.6729510e-2, 4.3908931e-2, 4.4626982e-2, 5.4736038e-2],
    ]
)
_NMF_HEIGHT = (2.53e-5, 5.49e-3, 1.14e-3)


def _sin_elev(elev_deg: float) -> float:
    return float(np.sin(np.deg2rad(np.clip(elev_deg, MIN_ELEVATION_DEG, 90.0))))


def marini_continued_fraction(sin_el: float, a: float, b: float, c: float) -> float:
    """Normalised continued fraction m(e) = f(1) / f(sin e) of Marini form."""

    top = 1.0 + a / (1.0 + b / (1.0 + c))
    bottom = sin_el + a / (sin_el + b / (sin_el + c))
    return top / bottom


def cosecant_mapping(elev_deg: float) -> float:
    return 1.0 / _sin_elev(elev_deg)


def _interp_coefficients(table: np.ndarray, lat_deg: float) -> tuple[float, float, float]:
    abs_lat = abs(lat_deg)
    a, b, c = (float(np.interp(abs_lat, _NMF_LATITUDES_DEG, row)) for row in table)
    return a, b, c


def niell_hydrostatic_mapping(elev_deg: float, lat_deg: float, alt_m: float, day_of_year: float) -> float:
    """Niell hydrostatic mapping factor including the seasonal and height terms."""

    # Seasonal phase, shifted by half a year in the southern hemisphere
    doy = day_of_year + (365.25 / 2.0 if lat_deg < 0.0 else 0.0)
    seasonal = np.cos(2.0 * np.pi * (doy - 28.0) / 365.25)
    avg = _interp_coefficients(_NMF_HYDRO_AVG, lat_deg)
    amp = _interp_coefficients(_NMF_HYDRO_AMP, lat_deg)
    a, b, c = (mean - ampl * seasonal for mean, ampl in zip(avg, amp))

    sin_el = _sin_elev(elev_deg)
    mapping = marini_continued_fraction(sin_el, a, b, c)
    height_corr = 1.0 / sin_el - marini_continued_fraction(sin_el, *_NMF_HEIGHT)
    return float(mapping + height_corr * alt_m / 1000.0)


def niell_wet_mapping(elev_deg: float, lat_deg: float) -> float:
    """Niell wet mapping factor."""

    a, b, c = _interp_coefficients(_NMF_WET, lat_deg)
    return float(marini_continued_fraction(_sin_elev(elev_deg), a, b, c))
