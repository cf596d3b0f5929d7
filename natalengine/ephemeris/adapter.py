"""Geocentric body positions with the series → elements precision ladder."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ..core.angles import normalize_degrees, signed_delta
from ..core.bodies import MINOR_BODIES, SUPPORTED_BODIES, canonical_name
from ..core.errors import EphemerisDataUnavailable, UnknownBody
from ..core.time import local_sidereal_time
from ..observability.metrics import EPHEMERIS_FALLBACKS
from .elements import heliocentric_from_elements
from .frames import (
    GeocentricPosition,
    heliocentric_to_geocentric,
    mean_obliquity,
    nutation,
    topocentric_moon,
)
from .lunar import moon_position
from .runtime import EphemerisContext, init_ephemeris
from .solar import sun_position

LOG = logging.getLogger(__name__)

__all__ = ["BodyPosition", "EphemerisAdapter", "positions_to_dict"]

# Bodies whose preferred source is the periodic series.
_SERIES_PREFERRED = frozenset(
    {"Mercury", "Venus", "Mars", "Jupiter", "Saturn", "Uranus", "Neptune"}
)


@dataclass(frozen=True, slots=True)
class BodyPosition:
    """Geocentric ecliptic position of one body at one instant.

    ``speed_longitude`` is the shortest-path longitude change over the
    following day; ``retrograde`` is derived from its sign. ``source`` names
    the ladder rung that produced the value (``series``, ``elements``,
    ``lunar``, ``analytic``, ``topocentric`` or ``derived``) and
    ``estimated`` is set whenever a lower rung than the body's preferred
    one was used, or the body only has an element-based estimate.
    """

    body: str
    julian_day: float
    longitude: float
    latitude: float
    distance_au: float | None
    speed_longitude: float
    source: str
    estimated: bool = False

    @property
    def retrograde(self) -> bool:
        return self.speed_longitude < 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "body": self.body,
            "julian_day": self.julian_day,
            "longitude": self.longitude,
            "latitude": self.latitude,
            "distance_au": self.distance_au,
            "speed_longitude": self.speed_longitude,
            "retrograde": self.retrograde,
            "source": self.source,
            "estimated": self.estimated,
        }


class EphemerisAdapter:
    """Compute apparent geocentric positions from an :class:`EphemerisContext`.

    Longitudes include nutation in longitude but no aberration or light-time
    correction.
    """

    def __init__(self, context: EphemerisContext | None = None, *, apparent: bool = True) -> None:
        self.context = context or init_ephemeris()
        self.apparent = apparent

    # -- raw positions -------------------------------------------------

    def _heliocentric(self, body: str, jd: float):
        """Return ``(position, source)`` for a heliocentric body."""

        if body in _SERIES_PREFERRED or body == "Earth":
            try:
                return self.context.table(body).position(jd), "series"
            except EphemerisDataUnavailable as exc:
                LOG.debug("Series unavailable for %s: %s", body, exc)
        return heliocentric_from_elements(body, jd), "elements"

    def geocentric(self, body: str, jd: float) -> tuple[GeocentricPosition, str]:
        """Geometric geocentric position of ``body`` plus the source label.

        Raises
        ------
        UnknownBody
            When ``body`` is outside :data:`SUPPORTED_BODIES`.
        EphemerisDataUnavailable
            When neither series nor elements cover ``body``.
        """

        name = canonical_name(body)
        if name not in SUPPORTED_BODIES:
            raise UnknownBody(body, SUPPORTED_BODIES)

        if name == "Moon":
            moon = moon_position(jd)
            return GeocentricPosition(moon.longitude, moon.latitude, moon.distance_au), "lunar"

        if name == "Sun":
            if self.context.series_available:
                earth = self.context.table("Earth").position(jd)
                sun_lon = normalize_degrees(earth.longitude + 180.0)
                return GeocentricPosition(sun_lon, 0.0, earth.radius), "series"
            sun = sun_position(jd)
            return GeocentricPosition(sun.longitude, 0.0, sun.distance_au), "analytic"

        earth, _ = self._heliocentric("Earth", jd)
        helio, source = self._heliocentric(name, jd)
        return heliocentric_to_geocentric(helio, earth), source

    def _apparent_longitude(self, longitude: float, jd: float) -> float:
        if not self.apparent:
            return longitude
        return normalize_degrees(longitude + nutation(jd).longitude)

    # -- public API ----------------------------------------------------

    def body_position(self, body: str, jd: float) -> BodyPosition:
        """Return the position of ``body`` at ``jd`` with its retrograde state."""

        name = canonical_name(body)
        current, source = self.geocentric(name, jd)
        following, _ = self.geocentric(name, jd + 1.0)
        lon = self._apparent_longitude(current.longitude, jd)
        lon_next = self._apparent_longitude(following.longitude, jd + 1.0)

        estimated = source == "elements" and (name in _SERIES_PREFERRED or name in MINOR_BODIES)
        if source == "elements" and name in _SERIES_PREFERRED:
            LOG.info(
                "Using Keplerian elements for %s",
                name,
                extra={"err_code": "EPHEMERIS_FALLBACK"},
            )
            EPHEMERIS_FALLBACKS.labels(body=name, source=source).inc()

        return BodyPosition(
            body=name,
            julian_day=float(jd),
            longitude=lon,
            latitude=current.latitude,
            distance_au=current.distance,
            speed_longitude=signed_delta(lon, lon_next),
            source=source,
            estimated=estimated,
        )

    def body_positions(self, jd: float, bodies: Iterable[str]) -> dict[str, BodyPosition]:
        """Positions for several bodies; errors propagate to the caller."""

        return {canonical_name(body): self.body_position(body, jd) for body in bodies}

    def topocentric_moon(self, jd: float, latitude: float, longitude: float) -> BodyPosition:
        """Moon position corrected for an observer at ``latitude``/``longitude``."""

        def _shifted(at: float) -> GeocentricPosition:
            moon = moon_position(at)
            eps = mean_obliquity(at) + nutation(at).obliquity
            return topocentric_moon(
                moon.longitude,
                moon.latitude,
                moon.distance_au,
                local_sidereal_time=local_sidereal_time(at, longitude),
                observer_latitude=latitude,
                obliquity=eps,
            )

        current = _shifted(jd)
        following = _shifted(jd + 1.0)
        lon = self._apparent_longitude(current.longitude, jd)
        lon_next = self._apparent_longitude(following.longitude, jd + 1.0)
        return BodyPosition(
            body="Moon",
            julian_day=float(jd),
            longitude=lon,
            latitude=current.latitude,
            distance_au=current.distance,
            speed_longitude=signed_delta(lon, lon_next),
            source="topocentric",
        )

    @staticmethod
    def point(name: str, longitude: float, jd: float, speed_longitude: float = 0.0) -> BodyPosition:
        """Longitude-only record for a derived point (nodes, Lilith, lots)."""

        return BodyPosition(
            body=name,
            julian_day=float(jd),
            longitude=normalize_degrees(longitude),
            latitude=0.0,
            distance_au=None,
            speed_longitude=float(speed_longitude),
            source="derived",
        )


def positions_to_dict(positions: Mapping[str, BodyPosition]) -> dict[str, dict[str, Any]]:
    return {name: pos.to_dict() for name, pos in positions.items()}
