"""Classical low-precision solar theory (Meeus, chapter 25)."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.angles import normalize_degrees
from ..core.time import julian_centuries

__all__ = ["SolarPosition", "solar_mean_anomaly", "solar_mean_longitude", "sun_position"]


@dataclass(frozen=True)
class SolarPosition:
    longitude: float
    latitude: float
    distance_au: float
    mean_longitude: float


def solar_mean_longitude(jd: float) -> float:
    """Geometric mean longitude of the Sun, degrees ``[0, 360)``."""

    t = julian_centuries(jd)
    return normalize_degrees(280.46646 + 36000.76983 * t + 0.0003032 * t * t)


def solar_mean_anomaly(jd: float) -> float:
    t = julian_centuries(jd)
    return normalize_degrees(357.52911 + 35999.05029 * t - 0.0001537 * t * t)


def sun_position(jd: float) -> SolarPosition:
    """True geometric longitude of the Sun with the equation of centre applied.

    Latitude is taken as zero. Neither nutation nor aberration is applied.
    """

    t = julian_centuries(jd)
    mean_lon = solar_mean_longitude(jd)
    m = math.radians(solar_mean_anomaly(jd))
    center = (
        (1.914602 - 0.004817 * t - 0.000014 * t * t) * math.sin(m)
        + (0.019993 - 0.000101 * t) * math.sin(2.0 * m)
        + 0.000289 * math.sin(3.0 * m)
    )
    e = 0.016708634 - 0.000042037 * t - 0.0000001267 * t * t
    true_anomaly = m + math.radians(center)
    radius = 1.000001018 * (1.0 - e * e) / (1.0 + e * math.cos(true_anomaly))
    return SolarPosition(
        longitude=normalize_degrees(mean_lon + center),
        latitude=0.0,
        distance_au=radius,
        mean_longitude=mean_lon,
    )
