from __future__ import annotations

import pytest

from natalengine.core.angles import angular_separation, signed_delta
from natalengine.ephemeris.lunar import (
    AU_KM,
    lunar_arguments,
    mean_lunar_apogee,
    mean_lunar_node,
    moon_position,
    true_lunar_node,
)
from natalengine.ephemeris.solar import solar_mean_longitude, sun_position

J2000 = 2451545.0


def test_solar_mean_longitude_at_epoch() -> None:
    assert solar_mean_longitude(J2000) == pytest.approx(280.46, abs=0.01)


def test_sun_reference_position() -> None:
    # 1992-10-13 0h TD
    sun = sun_position(2448908.5)
    assert sun.longitude == pytest.approx(199.90988, abs=1e-3)
    assert sun.distance_au == pytest.approx(0.99766, abs=1e-4)
    assert sun.latitude == 0.0


def test_moon_reference_position() -> None:
    # 1992-04-12 0h TD; truncated series so generous tolerances
    moon = moon_position(2448724.5)
    assert angular_separation(moon.longitude, 133.162655) < 0.3
    assert moon.latitude == pytest.approx(-3.229126, abs=0.3)
    assert moon.distance_au * AU_KM == pytest.approx(368409.7, abs=3000.0)


def test_lunar_arguments_at_reference_date() -> None:
    args = lunar_arguments(2448724.5)
    assert args.mean_longitude == pytest.approx(134.290182, abs=1e-5)
    assert args.mean_elongation == pytest.approx(113.842304, abs=1e-5)
    assert args.sun_mean_anomaly == pytest.approx(97.643514, abs=1e-5)
    assert args.moon_mean_anomaly == pytest.approx(5.150833, abs=1e-5)
    assert args.argument_of_latitude == pytest.approx(219.889721, abs=1e-5)


def test_mean_node_regresses() -> None:
    assert mean_lunar_node(J2000) == pytest.approx(125.0445479)
    year_later = mean_lunar_node(J2000 + 365.25)
    assert angular_separation(year_later, 125.0445479 - 19.3413) < 0.01


def test_true_node_oscillates_about_mean_node() -> None:
    offsets = [
        signed_delta(mean_lunar_node(J2000 + day), true_lunar_node(J2000 + day))
        for day in range(0, 180, 5)
    ]
    assert all(abs(offset) <= 2.01 for offset in offsets)
    assert max(offsets) > 0.8
    assert min(offsets) < -0.8


def test_mean_apogee_at_epoch() -> None:
    assert mean_lunar_apogee(J2000) == pytest.approx(263.3532465)
