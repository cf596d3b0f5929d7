"""Frame conversions: heliocentric to geocentric, nutation, obliquity.

Everything here is a pure function of its arguments. No light-time or
aberration correction is applied; the only parallax handled is the
topocentric shift of the Moon.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final

from ..core.angles import normalize_degrees, signed_delta
from ..core.time import julian_centuries
from .lunar import AU_KM
from .series import HeliocentricPosition
from .solar import solar_mean_longitude, sun_position

__all__ = [
    "EARTH_EQUATORIAL_RADIUS_AU",
    "GeocentricPosition",
    "Nutation",
    "ecliptic_to_equatorial",
    "equation_of_time",
    "equatorial_to_ecliptic",
    "heliocentric_to_geocentric",
    "mean_obliquity",
    "nutation",
    "rectangular_to_spherical",
    "spherical_to_rectangular",
    "topocentric_moon",
    "true_obliquity",
]

EARTH_EQUATORIAL_RADIUS_AU: Final[float] = 6378.137 / AU_KM


@dataclass(frozen=True)
class GeocentricPosition:
    """Geocentric ecliptic longitude/latitude (degrees) and distance (AU)."""

    longitude: float
    latitude: float
    distance: float


@dataclass(frozen=True)
class Nutation:
    """Nutation in longitude and in obliquity, both in degrees."""

    longitude: float
    obliquity: float


def spherical_to_rectangular(lon: float, lat: float, radius: float) -> tuple[float, float, float]:
    lam = math.radians(lon)
    beta = math.radians(lat)
    return (
        radius * math.cos(beta) * math.cos(lam),
        radius * math.cos(beta) * math.sin(lam),
        radius * math.sin(beta),
    )


def rectangular_to_spherical(x: float, y: float, z: float) -> tuple[float, float, float]:
    radius = math.sqrt(x * x + y * y + z * z)
    if radius == 0.0:
        return 0.0, 0.0, 0.0
    lon = normalize_degrees(math.degrees(math.atan2(y, x)))
    lat = math.degrees(math.asin(max(-1.0, min(1.0, z / radius))))
    return lon, lat, radius


def heliocentric_to_geocentric(
    body: HeliocentricPosition, earth: HeliocentricPosition
) -> GeocentricPosition:
    """Subtract Earth's heliocentric vector from ``body``'s."""

    bx, by, bz = spherical_to_rectangular(body.longitude, body.latitude, body.radius)
    ex, ey, ez = spherical_to_rectangular(earth.longitude, earth.latitude, earth.radius)
    lon, lat, dist = rectangular_to_spherical(bx - ex, by - ey, bz - ez)
    return GeocentricPosition(longitude=lon, latitude=lat, distance=dist)


def nutation(jd: float) -> Nutation:
    """Low-order nutation (Meeus 22, ~0.5" in Δψ, ~0.1" in Δε)."""

    t = julian_centuries(jd)
    omega = math.radians(125.04452 - 1934.136261 * t + 0.0020708 * t * t + t**3 / 450000.0)
    sun = math.radians(280.4665 + 36000.7698 * t)
    moon = math.radians(218.3165 + 481267.8813 * t)
    dpsi = (
        -17.20 * math.sin(omega)
        - 1.32 * math.sin(2.0 * sun)
        - 0.23 * math.sin(2.0 * moon)
        + 0.21 * math.sin(2.0 * omega)
    )
    deps = (
        9.20 * math.cos(omega)
        + 0.57 * math.cos(2.0 * sun)
        + 0.10 * math.cos(2.0 * moon)
        - 0.09 * math.cos(2.0 * omega)
    )
    return Nutation(longitude=dpsi / 3600.0, obliquity=deps / 3600.0)


def mean_obliquity(jd: float) -> float:
    """Mean obliquity of the ecliptic in degrees."""

    t = julian_centuries(jd)
    return 23.439291 - 0.0130042 * t - 1.64e-7 * t * t + 5.04e-7 * t**3


def true_obliquity(jd: float) -> float:
    return mean_obliquity(jd) + nutation(jd).obliquity


def ecliptic_to_equatorial(lon: float, lat: float, obliquity: float) -> tuple[float, float]:
    """Return ``(right_ascension, declination)`` in degrees."""

    lam = math.radians(lon)
    beta = math.radians(lat)
    eps = math.radians(obliquity)
    ra = math.atan2(
        math.sin(lam) * math.cos(eps) - math.tan(beta) * math.sin(eps), math.cos(lam)
    )
    dec = math.asin(
        max(
            -1.0,
            min(1.0, math.sin(beta) * math.cos(eps) + math.cos(beta) * math.sin(eps) * math.sin(lam)),
        )
    )
    return normalize_degrees(math.degrees(ra)), math.degrees(dec)


def equatorial_to_ecliptic(ra: float, dec: float, obliquity: float) -> tuple[float, float]:
    """Return ``(longitude, latitude)`` in degrees."""

    alpha = math.radians(ra)
    delta = math.radians(dec)
    eps = math.radians(obliquity)
    lon = math.atan2(
        math.sin(alpha) * math.cos(eps) + math.tan(delta) * math.sin(eps), math.cos(alpha)
    )
    lat = math.asin(
        max(
            -1.0,
            min(
                1.0,
                math.sin(delta) * math.cos(eps) - math.cos(delta) * math.sin(eps) * math.sin(alpha),
            ),
        )
    )
    return normalize_degrees(math.degrees(lon)), math.degrees(lat)


def equation_of_time(jd: float) -> float:
    """Equation of time in minutes (apparent minus mean solar time).

    Follows Meeus 28.3 with the Sun's right ascension taken from the
    low-precision solar theory; the result stays within about ±17 min.
    """

    nut = nutation(jd)
    eps = mean_obliquity(jd) + nut.obliquity
    sun = sun_position(jd)
    ra, _ = ecliptic_to_equatorial(sun.longitude + nut.longitude, 0.0, eps)
    degrees = (
        solar_mean_longitude(jd)
        - 0.0057183
        - ra
        + nut.longitude * math.cos(math.radians(eps))
    )
    return signed_delta(0.0, degrees) * 4.0


def topocentric_moon(
    longitude: float,
    latitude: float,
    distance_au: float,
    *,
    local_sidereal_time: float,
    observer_latitude: float,
    obliquity: float,
) -> GeocentricPosition:
    """Shift a geocentric lunar position to the observer's location.

    The observer's geocentric vector (spherical Earth, equatorial radius)
    lies in the equatorial frame at hour angle LST; the Moon is rotated into
    that frame, the observer subtracted, and the result rotated back.
    """

    ra, dec = ecliptic_to_equatorial(longitude, latitude, obliquity)
    mx, my, mz = spherical_to_rectangular(ra, dec, distance_au)

    phi = math.radians(observer_latitude)
    theta = math.radians(local_sidereal_time)
    rho = EARTH_EQUATORIAL_RADIUS_AU * math.cos(phi)
    ox = rho * math.cos(theta)
    oy = rho * math.sin(theta)
    oz = EARTH_EQUATORIAL_RADIUS_AU * math.sin(phi)

    topo_ra, topo_dec, topo_dist = rectangular_to_spherical(mx - ox, my - oy, mz - oz)
    topo_lon, topo_lat = equatorial_to_ecliptic(topo_ra, topo_dec, obliquity)
    return GeocentricPosition(longitude=topo_lon, latitude=topo_lat, distance=topo_dist)
