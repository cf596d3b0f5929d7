"""Truncated lunar theory (leading terms of Meeus, chapter 47)."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final

from ..core.angles import normalize_degrees
from ..core.time import julian_centuries

__all__ = [
    "AU_KM",
    "LunarArguments",
    "MoonPosition",
    "lunar_arguments",
    "mean_lunar_apogee",
    "mean_lunar_node",
    "true_lunar_node",
    "moon_position",
]

AU_KM: Final[float] = 149_597_870.7
_MEAN_DISTANCE_KM: Final[float] = 385_000.56

# (D, M, M', F, Σl [1e-6 deg], Σr [1e-3 km])
_LONGITUDE_DISTANCE_TERMS: Final[tuple[tuple[int, int, int, int, int, int], ...]] = (
    (0, 0, 1, 0, 6288774, -20905355),
    (2, 0, -1, 0, 1274027, -3699111),
    (2, 0, 0, 0, 658314, -2955968),
    (0, 0, 2, 0, 213618, -569925),
    (0, 1, 0, 0, -185116, 48888),
    (0, 0, 0, 2, -114332, -3149),
    (2, 0, -2, 0, 58793, 246158),
    (2, -1, -1, 0, 57066, -152138),
    (2, 0, 1, 0, 53322, -170733),
    (2, -1, 0, 0, 45758, -204586),
    (0, 1, -1, 0, -40923, -129620),
    (1, 0, 0, 0, -34720, 108743),
    (0, 1, 1, 0, -30383, 104755),
)

# (D, M, M', F, Σb [1e-6 deg])
_LATITUDE_TERMS: Final[tuple[tuple[int, int, int, int, int], ...]] = (
    (0, 0, 0, 1, 5128122),
    (0, 0, 1, 1, 280602),
    (0, 0, 1, -1, 277693),
    (2, 0, 0, -1, 173237),
    (2, 0, -1, 1, 55413),
    (2, 0, -1, -1, 46271),
    (2, 0, 0, 1, 32573),
    (0, 0, 2, 1, 17198),
    (2, 0, 1, -1, 9266),
    (0, 0, 2, -1, 8822),
    (2, -1, 0, -1, 8216),
    (2, 0, -2, -1, 4324),
)


@dataclass(frozen=True)
class LunarArguments:
    """Fundamental arguments in degrees, normalised to ``[0, 360)``."""

    mean_longitude: float
    mean_elongation: float
    sun_mean_anomaly: float
    moon_mean_anomaly: float
    argument_of_latitude: float
    eccentricity_factor: float


@dataclass(frozen=True)
class MoonPosition:
    longitude: float
    latitude: float
    distance_au: float


def lunar_arguments(jd: float) -> LunarArguments:
    t = julian_centuries(jd)
    t2, t3, t4 = t * t, t**3, t**4
    return LunarArguments(
        mean_longitude=normalize_degrees(
            218.3164477 + 481267.88123421 * t - 0.0015786 * t2 + t3 / 538841.0 - t4 / 65194000.0
        ),
        mean_elongation=normalize_degrees(
            297.8501921 + 445267.1114034 * t - 0.0018819 * t2 + t3 / 545868.0 - t4 / 113065000.0
        ),
        sun_mean_anomaly=normalize_degrees(
            357.5291092 + 35999.0502909 * t - 0.0001536 * t2 + t3 / 24490000.0
        ),
        moon_mean_anomaly=normalize_degrees(
            134.9633964 + 477198.8675055 * t + 0.0087414 * t2 + t3 / 69699.0 - t4 / 14712000.0
        ),
        argument_of_latitude=normalize_degrees(
            93.2720950 + 483202.0175233 * t - 0.0036539 * t2 - t3 / 3526000.0 + t4 / 863310000.0
        ),
        eccentricity_factor=1.0 - 0.002516 * t - 0.0000074 * t2,
    )


def _periodic_argument(args: LunarArguments, d: int, m: int, mp: int, f: int) -> tuple[float, float]:
    angle = math.radians(
        d * args.mean_elongation
        + m * args.sun_mean_anomaly
        + mp * args.moon_mean_anomaly
        + f * args.argument_of_latitude
    )
    return angle, args.eccentricity_factor ** abs(m)


def moon_position(jd: float) -> MoonPosition:
    """Geocentric ecliptic longitude/latitude of date and distance of the Moon.

    Nutation is not included; callers add Δψ where apparent longitude is
    required.
    """

    args = lunar_arguments(jd)
    t = julian_centuries(jd)
    sum_l = 0.0
    sum_r = 0.0
    for d, m, mp, f, coeff_l, coeff_r in _LONGITUDE_DISTANCE_TERMS:
        angle, factor = _periodic_argument(args, d, m, mp, f)
        sum_l += coeff_l * factor * math.sin(angle)
        sum_r += coeff_r * factor * math.cos(angle)
    sum_b = 0.0
    for d, m, mp, f, coeff_b in _LATITUDE_TERMS:
        angle, factor = _periodic_argument(args, d, m, mp, f)
        sum_b += coeff_b * factor * math.sin(angle)

    a1 = math.radians(119.75 + 131.849 * t)
    a2 = math.radians(53.09 + 479264.290 * t)
    a3 = math.radians(313.45 + 481266.484 * t)
    lp = math.radians(args.mean_longitude)
    mp_rad = math.radians(args.moon_mean_anomaly)
    f_rad = math.radians(args.argument_of_latitude)
    sum_l += 3958.0 * math.sin(a1) + 1962.0 * math.sin(lp - f_rad) + 318.0 * math.sin(a2)
    sum_b += (
        -2235.0 * math.sin(lp)
        + 382.0 * math.sin(a3)
        + 175.0 * math.sin(a1 - f_rad)
        + 175.0 * math.sin(a1 + f_rad)
        + 127.0 * math.sin(lp - mp_rad)
        - 115.0 * math.sin(lp + mp_rad)
    )

    return MoonPosition(
        longitude=normalize_degrees(args.mean_longitude + sum_l / 1e6),
        latitude=sum_b / 1e6,
        distance_au=(_MEAN_DISTANCE_KM + sum_r / 1000.0) / AU_KM,
    )


def mean_lunar_node(jd: float) -> float:
    """Longitude of the Moon's mean ascending node (regresses ~19.3°/yr)."""

    t = julian_centuries(jd)
    return normalize_degrees(
        125.0445479 - 1934.1362891 * t + 0.0020754 * t * t + t**3 / 467441.0 - t**4 / 60616000.0
    )


def mean_lunar_apogee(jd: float) -> float:
    """Mean lunar apogee (mean Black Moon Lilith), perigee + 180°."""

    t = julian_centuries(jd)
    perigee = 83.3532465 + 4069.0137287 * t - 0.0103200 * t * t - t**3 / 80053.0 + t**4 / 18999000.0
    return normalize_degrees(perigee + 180.0)


def true_lunar_node(jd: float) -> float:
    """True ascending node: the mean node plus its leading periodic terms."""

    args = lunar_arguments(jd)
    d = math.radians(args.mean_elongation)
    m = math.radians(args.sun_mean_anomaly)
    mp = math.radians(args.moon_mean_anomaly)
    f = math.radians(args.argument_of_latitude)
    correction = (
        -1.4979 * math.sin(2.0 * (d - f))
        - 0.1500 * math.sin(m)
        - 0.1226 * math.sin(2.0 * d)
        + 0.1176 * math.sin(2.0 * f)
        + 0.0801 * math.sin(2.0 * (mp - f))
    )
    return normalize_degrees(mean_lunar_node(jd) + correction)
