"""Two-body Keplerian element sets and their position solver.

Planet elements are the JPL "approximate positions" set valid for
1800-2050 (J2000 ecliptic, linear rates per Julian century). Minor bodies
carry osculating elements near J2000 with only the mean longitude
advancing. Longitudes are brought to the equinox of date with the general
precession in longitude so they share a frame with the series tables.

Kepler's equation is solved with a fixed five Newton steps. That is
ample for eccentricities below about 0.3; Pholus (e≈0.57) and Chiron are
reported as approximate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final, Mapping

from ..core.angles import normalize_degrees
from ..core.errors import EphemerisDataUnavailable
from ..core.time import julian_centuries
from .series import HeliocentricPosition

__all__ = [
    "ELEMENT_BODIES",
    "KEPLER_ITERATIONS",
    "KeplerianElements",
    "elements_for",
    "heliocentric_from_elements",
    "solve_kepler",
]


KEPLER_ITERATIONS: Final[int] = 5
GAUSS_DAILY_MOTION: Final[float] = 0.9856076686


@dataclass(frozen=True)
class KeplerianElements:
    """Mean elements at J2000 with per-century rates (degrees, AU)."""

    semi_major_axis: float
    eccentricity: float
    inclination: float
    mean_longitude: float
    longitude_perihelion: float
    longitude_node: float
    semi_major_axis_rate: float = 0.0
    eccentricity_rate: float = 0.0
    inclination_rate: float = 0.0
    mean_longitude_rate: float | None = None
    longitude_perihelion_rate: float = 0.0
    longitude_node_rate: float = 0.0

    def at(self, t: float) -> tuple[float, float, float, float, float, float]:
        """Return ``(a, e, i, L, ϖ, Ω)`` for ``t`` Julian centuries from J2000."""

        rate = self.mean_longitude_rate
        if rate is None:
            rate = GAUSS_DAILY_MOTION / self.semi_major_axis**1.5 * 36525.0
        return (
            self.semi_major_axis + self.semi_major_axis_rate * t,
            self.eccentricity + self.eccentricity_rate * t,
            self.inclination + self.inclination_rate * t,
            self.mean_longitude + rate * t,
            self.longitude_perihelion + self.longitude_perihelion_rate * t,
            self.longitude_node + self.longitude_node_rate * t,
        )


def _minor(a: float, e: float, i: float, node: float, arg_peri: float, mean_anomaly: float) -> KeplerianElements:
    perihelion = node + arg_peri
    return KeplerianElements(
        semi_major_axis=a,
        eccentricity=e,
        inclination=i,
        mean_longitude=normalize_degrees(perihelion + mean_anomaly),
        longitude_perihelion=normalize_degrees(perihelion),
        longitude_node=node,
    )


_PLANET_ELEMENTS: Mapping[str, KeplerianElements] = {
    "Mercury": KeplerianElements(
        0.38709927, 0.20563593, 7.00497902, 252.25032350, 77.45779628, 48.33076593,
        0.00000037, 0.00001906, -0.00594749, 149472.67411175, 0.16047689, -0.12534081,
    ),
    "Venus": KeplerianElements(
        0.72333566, 0.00677672, 3.39467605, 181.97909950, 131.60246718, 76.67984255,
        0.00000390, -0.00004107, -0.00078890, 58517.81538729, 0.00268329, -0.27769418,
    ),
    "Earth": KeplerianElements(
        1.00000261, 0.01671123, -0.00001531, 100.46457166, 102.93768193, 0.0,
        0.00000562, -0.00004392, -0.01294668, 35999.37244981, 0.32327364, 0.0,
    ),
    "Mars": KeplerianElements(
        1.52371034, 0.09339410, 1.84969142, -4.55343205, -23.94362959, 49.55953891,
        0.00001847, 0.00007882, -0.00813131, 19140.30268499, 0.44441088, -0.29257343,
    ),
    "Jupiter": KeplerianElements(
        5.20288700, 0.04838624, 1.30439695, 34.39644051, 14.72847983, 100.47390909,
        -0.00011607, -0.00013253, -0.00183714, 3034.74612775, 0.21252668, 0.20469106,
    ),
    "Saturn": KeplerianElements(
        9.53667594, 0.05386179, 2.48599187, 49.95424423, 92.59887831, 113.66242448,
        -0.00125060, -0.00050991, 0.00193609, 1222.49362201, -0.41897216, -0.28867794,
    ),
    "Uranus": KeplerianElements(
        19.18916464, 0.04725744, 0.77263783, 313.23810451, 170.95427630, 74.01692503,
        -0.00196176, -0.00004397, -0.00242939, 428.48202785, 0.40805281, 0.04240589,
    ),
    "Neptune": KeplerianElements(
        30.06992276, 0.00859048, 1.77004347, -55.12002969, 44.96476227, 131.78422574,
        0.00026291, 0.00005105, 0.00035372, 218.45945325, -0.32241464, -0.00508664,
    ),
    "Pluto": KeplerianElements(
        39.48211675, 0.24882730, 17.14001206, 238.92903833, 224.06891629, 110.30393684,
        -0.00031596, 0.00005170, 0.00004818, 145.20780515, -0.04062942, -0.01183482,
    ),
}

# a, e, i, node, argument of perihelion, mean anomaly at J2000.
_MINOR_ELEMENTS: Mapping[str, KeplerianElements] = {
    "Ceres": _minor(2.7663, 0.0780, 10.583, 80.494, 73.923, 6.5),
    "Pallas": _minor(2.7716, 0.2310, 34.846, 173.096, 310.300, 352.0),
    "Juno": _minor(2.6683, 0.2580, 12.968, 170.130, 247.900, 33.0),
    "Vesta": _minor(2.3617, 0.0895, 7.135, 103.910, 150.820, 343.0),
    "Chiron": _minor(13.648, 0.3814, 6.930, 209.365, 339.483, 35.75),
    "Pholus": _minor(20.430, 0.5720, 24.680, 119.290, 354.900, 32.0),
}

ELEMENT_BODIES: Final[tuple[str, ...]] = tuple(_PLANET_ELEMENTS) + tuple(_MINOR_ELEMENTS)


def elements_for(body: str) -> KeplerianElements:
    """Return the element set for ``body`` or raise :class:`EphemerisDataUnavailable`."""

    elements = _PLANET_ELEMENTS.get(body) or _MINOR_ELEMENTS.get(body)
    if elements is None:
        raise EphemerisDataUnavailable(body, "elements")
    return elements


def solve_kepler(mean_anomaly_rad: float, eccentricity: float) -> float:
    """Eccentric anomaly (radians) after :data:`KEPLER_ITERATIONS` Newton steps."""

    m = mean_anomaly_rad
    e = eccentricity
    ecc = m + e * math.sin(m)
    for _ in range(KEPLER_ITERATIONS):
        ecc -= (ecc - e * math.sin(ecc) - m) / (1.0 - e * math.cos(ecc))
    return ecc


def _precession_in_longitude(t: float) -> float:
    return 1.396971 * t + 0.0003086 * t * t


def heliocentric_from_elements(body: str, jd: float) -> HeliocentricPosition:
    """Heliocentric ecliptic position of date for ``body`` from its elements."""

    t = julian_centuries(jd)
    a, e, inc, mean_lon, peri, node = elements_for(body).at(t)

    mean_anomaly = math.radians(normalize_degrees(mean_lon - peri))
    ecc = solve_kepler(mean_anomaly, e)
    true_anomaly = 2.0 * math.atan(math.sqrt((1.0 + e) / (1.0 - e)) * math.tan(ecc / 2.0))
    radius = a * (1.0 - e * math.cos(ecc))

    # argument of latitude: angle from the ascending node along the orbit
    u = math.radians(peri - node) + true_anomaly
    i = math.radians(inc)
    om = math.radians(node)
    x = radius * (math.cos(om) * math.cos(u) - math.sin(om) * math.sin(u) * math.cos(i))
    y = radius * (math.sin(om) * math.cos(u) + math.cos(om) * math.sin(u) * math.cos(i))
    z = radius * math.sin(u) * math.sin(i)

    lon = math.degrees(math.atan2(y, x)) + _precession_in_longitude(t)
    lat = math.degrees(math.asin(max(-1.0, min(1.0, z / radius))))
    return HeliocentricPosition(longitude=normalize_degrees(lon), latitude=lat, radius=radius)
