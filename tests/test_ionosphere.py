from __future__ import annotations

import numpy as np
import pytest

from gnss_obs.atmos.iono_klobuchar import klobuchar_delay_m, klobuchar_delay_s
from gnss_obs.atmos.ionosphere import (
    AlphaBeta,
    IonosphereModel,
    IonosphericCorrections,
    ModelIonosphere,
    calc_ionospheric_delay,
    iono_error_var,
)
from gnss_obs.signals import L1_FREQUENCY_HZ, Frequency, SatelliteSystem
from gnss_obs.utils.wgs84 import GeodeticPosition

LLA = GeodeticPosition(48.78, 9.172, 300.0)


def test_klobuchar_delay_positive_and_bounded() -> None:
    for elev_deg in (5.0, 30.0, 60.0, 90.0):
        delay_s = klobuchar_delay_s(345_600.0, 48.78, 9.172, elev_deg, 120.0)
        assert delay_s > 0.0
        assert klobuchar_delay_m(345_600.0, 48.78, 9.172, elev_deg, 120.0) < 100.0


def test_klobuchar_delay_grows_at_low_elevation() -> None:
    low = klobuchar_delay_m(345_600.0, 48.78, 9.172, 10.0, 180.0)
    high = klobuchar_delay_m(345_600.0, 48.78, 9.172, 80.0, 180.0)
    assert low > high


def test_no_model_returns_zero() -> None:
    delay = calc_ionospheric_delay(345_600.0, Frequency.G01, 0, LLA, 30.0, 90.0, IonosphereModel.NONE)
    assert delay == 0.0


def test_delay_scales_with_inverse_square_frequency() -> None:
    l1 = calc_ionospheric_delay(345_600.0, Frequency.G01, 0, LLA, 30.0, 90.0, IonosphereModel.KLOBUCHAR)
    l2 = calc_ionospheric_delay(345_600.0, Frequency.G02, 0, LLA, 30.0, 90.0, IonosphereModel.KLOBUCHAR)

    expected_ratio = (L1_FREQUENCY_HZ / Frequency.G02.freq_hz()) ** 2
    assert np.isclose(l2 / l1, expected_ratio)


def test_broadcast_coefficients_override_defaults() -> None:
    corrections = IonosphericCorrections()
    corrections.insert(SatelliteSystem.GPS, AlphaBeta.ALPHA, (0.0, 0.0, 0.0, 0.0))
    corrections.insert(SatelliteSystem.GPS, AlphaBeta.BETA, (72_000.0, 0.0, 0.0, 0.0))

    provider = ModelIonosphere(IonosphereModel.KLOBUCHAR)
    # Early afternoon local time at the pierce point
    with_corr = provider.delay_m(48_200.0, Frequency.G01, 0, LLA, 90.0, 0.0, corrections)
    without = provider.delay_m(48_200.0, Frequency.G01, 0, LLA, 90.0, 0.0, None)

    # Zero amplitude leaves only the 5 ns night-time floor.
    assert with_corr == pytest.approx(5e-9 * 299_792_458.0, rel=1e-3)
    assert without > with_corr


def test_insert_replaces_existing_coefficients() -> None:
    corrections = IonosphericCorrections()
    corrections.insert(SatelliteSystem.GPS, AlphaBeta.ALPHA, (1.0, 2.0, 3.0, 4.0))
    corrections.insert(SatelliteSystem.GPS, AlphaBeta.ALPHA, (5.0, 6.0, 7.0, 8.0))

    assert len(corrections.corrections) == 1
    assert corrections.get(SatelliteSystem.GPS, AlphaBeta.ALPHA) == (5.0, 6.0, 7.0, 8.0)
    assert corrections.get(SatelliteSystem.GAL, AlphaBeta.ALPHA) is None


def test_iono_error_var_is_half_delay_squared() -> None:
    assert iono_error_var(4.0) == pytest.approx(4.0)
    assert iono_error_var(0.0) == 0.0
