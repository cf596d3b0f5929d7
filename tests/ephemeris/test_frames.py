from __future__ import annotations

import pytest

from natalengine.core.angles import angular_separation
from natalengine.ephemeris.frames import (
    EARTH_EQUATORIAL_RADIUS_AU,
    ecliptic_to_equatorial,
    equation_of_time,
    equatorial_to_ecliptic,
    heliocentric_to_geocentric,
    mean_obliquity,
    nutation,
    rectangular_to_spherical,
    spherical_to_rectangular,
    topocentric_moon,
)
from natalengine.ephemeris.series import HeliocentricPosition

J2000 = 2451545.0


def test_mean_obliquity_at_epoch() -> None:
    assert mean_obliquity(J2000) == pytest.approx(23.439291)


def test_nutation_reference_values() -> None:
    # 1987-04-10 0h TD
    nut = nutation(2446895.5)
    assert nut.longitude * 3600.0 == pytest.approx(-3.788, abs=0.6)
    assert nut.obliquity * 3600.0 == pytest.approx(9.443, abs=0.2)


def test_equatorial_to_ecliptic_reference() -> None:
    # Pollux
    lon, lat = equatorial_to_ecliptic(116.328942, 28.026183, 23.4392911)
    assert lon == pytest.approx(113.215630, abs=1e-5)
    assert lat == pytest.approx(6.684170, abs=1e-5)


@pytest.mark.parametrize(
    ("lon", "lat"),
    [(0.0, 0.0), (45.0, 5.0), (133.2, -3.2), (271.0, 1.5), (359.5, -6.0)],
)
def test_ecliptic_equatorial_roundtrip(lon: float, lat: float) -> None:
    ra, dec = ecliptic_to_equatorial(lon, lat, 23.44)
    back_lon, back_lat = equatorial_to_ecliptic(ra, dec, 23.44)
    assert angular_separation(back_lon, lon) < 1e-9
    assert back_lat == pytest.approx(lat, abs=1e-9)


def test_rectangular_roundtrip() -> None:
    x, y, z = spherical_to_rectangular(200.0, -10.0, 2.5)
    lon, lat, radius = rectangular_to_spherical(x, y, z)
    assert lon == pytest.approx(200.0)
    assert lat == pytest.approx(-10.0)
    assert radius == pytest.approx(2.5)
    assert rectangular_to_spherical(0.0, 0.0, 0.0) == (0.0, 0.0, 0.0)


def test_heliocentric_to_geocentric_opposition() -> None:
    earth = HeliocentricPosition(longitude=10.0, latitude=0.0, radius=1.0)
    mars = HeliocentricPosition(longitude=10.0, latitude=0.0, radius=1.5)
    geo = heliocentric_to_geocentric(mars, earth)
    assert geo.longitude == pytest.approx(10.0)
    assert geo.distance == pytest.approx(0.5)


def test_equation_of_time_reference() -> None:
    # 1992-10-13: +13m42.6s
    assert equation_of_time(2448908.5) == pytest.approx(13.71, abs=0.1)


@pytest.mark.parametrize("offset", range(0, 365, 15))
def test_equation_of_time_bounds(offset: int) -> None:
    assert -20.0 <= equation_of_time(2451545.0 + offset) <= 20.0


def test_topocentric_moon_parallax() -> None:
    distance = 384400.0 / 149_597_870.7
    # Moon on the meridian at the equator: no shift in direction, distance shrinks.
    ra, dec = 90.0, 0.0
    lon, lat = equatorial_to_ecliptic(ra, dec, 23.44)
    shifted = topocentric_moon(
        lon,
        lat,
        distance,
        local_sidereal_time=90.0,
        observer_latitude=0.0,
        obliquity=23.44,
    )
    assert angular_separation(shifted.longitude, lon) < 1e-6
    assert shifted.distance == pytest.approx(distance - EARTH_EQUATORIAL_RADIUS_AU)

    # Moon at the solstitial point on the horizon: full horizontal parallax
    # of about 0.95 degrees along the ecliptic.
    horizon = topocentric_moon(
        90.0,
        0.0,
        distance,
        local_sidereal_time=0.0,
        observer_latitude=0.0,
        obliquity=23.44,
    )
    shift = angular_separation(horizon.longitude, 90.0)
    assert shift == pytest.approx(0.951, abs=0.01)
    assert horizon.latitude == pytest.approx(0.0, abs=1e-6)
