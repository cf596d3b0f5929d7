"""Natal chart assembly."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Final

from ..core.angles import normalize_degrees, signed_delta
from ..core.bodies import MINOR_BODIES, PLANETARY_BODIES, SUPPORTED_BODIES, canonical_name
from ..core.errors import EphemerisDataUnavailable, UnknownBody
from ..core.time import ensure_utc, julian_day_from_datetime, local_sidereal_time
from ..ephemeris.adapter import BodyPosition, EphemerisAdapter
from ..ephemeris.frames import mean_obliquity, nutation
from ..ephemeris.house_systems import (
    ChartAngles,
    HouseCusps,
    compute_angles,
    house_of,
    houses_with_fallback,
)
from ..ephemeris.lunar import mean_lunar_apogee, mean_lunar_node, true_lunar_node
from ..observability.metrics import CHART_COMPUTE_DURATION
from ..scoring.orb import OrbCalculator
from .aspects import Aspect, find_aspects
from .config import ChartConfig

LOG = logging.getLogger(__name__)

__all__ = [
    "ANGLE_TARGETS",
    "ChartLocation",
    "DEFAULT_BODIES",
    "LUNAR_PHASE_NAMES",
    "NatalChart",
    "compute_natal_chart",
    "compute_chart_at",
    "lunar_phase_name",
    "part_of_fortune",
]

DEFAULT_BODIES: Final[tuple[str, ...]] = PLANETARY_BODIES + MINOR_BODIES

# Chart angles that take part in aspect detection.
ANGLE_TARGETS: Final[tuple[str, ...]] = ("Ascendant", "Midheaven")

LUNAR_PHASE_NAMES: Final[tuple[str, ...]] = (
    "New Moon",
    "Waxing Crescent",
    "First Quarter",
    "Waxing Gibbous",
    "Full Moon",
    "Waning Gibbous",
    "Last Quarter",
    "Waning Crescent",
)


@dataclass(frozen=True)
class ChartLocation:
    """Geographic latitude/longitude in decimal degrees (east positive)."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        lat = float(self.latitude)
        lon = float(self.longitude)
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"latitude {lat} outside -90..90")
        if not -180.0 <= lon <= 360.0:
            raise ValueError(f"longitude {lon} outside -180..360")
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", signed_delta(0.0, lon) if lon > 180.0 else lon)


def part_of_fortune(ascendant: float, moon: float, sun: float) -> float:
    """Part of Fortune: ``normalize(Ascendant + Moon − Sun)``."""

    return normalize_degrees(ascendant + moon - sun)


def lunar_phase_name(phase_angle: float) -> str:
    """Name of the lunar phase for a Moon−Sun elongation in degrees."""

    return LUNAR_PHASE_NAMES[int(normalize_degrees(phase_angle) // 45.0) % 8]


@dataclass(frozen=True)
class NatalChart:
    """Immutable result of one chart assembly."""

    moment: datetime | None
    julian_day: float
    location: ChartLocation
    sidereal_time: float
    obliquity: float
    positions: Mapping[str, BodyPosition]
    angles: ChartAngles
    houses: Mapping[str, HouseCusps]
    points: Mapping[str, BodyPosition]
    lunar_phase: float
    aspects: tuple[Aspect, ...]
    house_placements: Mapping[str, int]
    unavailable: Mapping[str, str] = field(default_factory=dict)
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def primary_houses(self) -> HouseCusps:
        return next(iter(self.houses.values()))

    @property
    def lunar_phase_name(self) -> str:
        return lunar_phase_name(self.lunar_phase)

    @property
    def north_node(self) -> BodyPosition:
        return self.points["North Node"]

    @property
    def south_node(self) -> BodyPosition:
        return self.points["South Node"]

    @property
    def lilith(self) -> BodyPosition:
        return self.points["Lilith"]

    @property
    def part_of_fortune(self) -> BodyPosition:
        return self.points["Part of Fortune"]

    @property
    def chiron(self) -> BodyPosition | None:
        return self.positions.get("Chiron")

    @property
    def degraded(self) -> bool:
        """True when any rung below the preferred precision was used."""

        return (
            bool(self.unavailable)
            or any(cusps.degraded for cusps in self.houses.values())
            or any(pos.estimated for pos in self.positions.values())
        )

    def longitudes(self) -> dict[str, float]:
        return {name: pos.longitude for name, pos in self.positions.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "moment": self.moment.isoformat() if self.moment else None,
            "julian_day": self.julian_day,
            "location": {"latitude": self.location.latitude, "longitude": self.location.longitude},
            "sidereal_time": self.sidereal_time,
            "obliquity": self.obliquity,
            "positions": {name: pos.to_dict() for name, pos in self.positions.items()},
            "angles": self.angles.to_dict(),
            "houses": {name: cusps.to_dict() for name, cusps in self.houses.items()},
            "points": {name: pos.to_dict() for name, pos in self.points.items()},
            "lunar_phase": {"angle": self.lunar_phase, "name": self.lunar_phase_name},
            "aspects": [aspect.to_dict() for aspect in self.aspects],
            "house_placements": dict(self.house_placements),
            "unavailable": dict(self.unavailable),
            "degraded": self.degraded,
            "metadata": dict(self.metadata),
        }


def _resolve_bodies(bodies: Iterable[str] | None, config: ChartConfig) -> tuple[str, ...]:
    if bodies is None:
        return DEFAULT_BODIES if config.include_minor_bodies else PLANETARY_BODIES
    resolved: list[str] = []
    for body in bodies:
        name = canonical_name(body)
        if name not in SUPPORTED_BODIES:
            raise UnknownBody(body, SUPPORTED_BODIES)
        if name not in resolved:
            resolved.append(name)
    return tuple(resolved)


_NODE_FUNCTIONS = {"mean": mean_lunar_node, "true": true_lunar_node}


def _derived_points(
    adapter: EphemerisAdapter,
    jd: float,
    ascendant: float,
    sun: float,
    moon: float,
    nodes_variant: str = "mean",
) -> dict[str, BodyPosition]:
    dpsi = nutation(jd).longitude
    dpsi_next = nutation(jd + 1.0).longitude
    lunar_node = _NODE_FUNCTIONS[nodes_variant]
    node = normalize_degrees(lunar_node(jd) + dpsi)
    node_next = normalize_degrees(lunar_node(jd + 1.0) + dpsi_next)
    node_speed = signed_delta(node, node_next)
    apogee = normalize_degrees(mean_lunar_apogee(jd) + dpsi)
    apogee_next = normalize_degrees(mean_lunar_apogee(jd + 1.0) + dpsi_next)
    return {
        "North Node": adapter.point("North Node", node, jd, node_speed),
        "South Node": adapter.point("South Node", node + 180.0, jd, node_speed),
        "Lilith": adapter.point("Lilith", apogee, jd, signed_delta(apogee, apogee_next)),
        "Part of Fortune": adapter.point("Part of Fortune", part_of_fortune(ascendant, moon, sun), jd),
    }


def compute_chart_at(
    jd: float,
    location: ChartLocation,
    *,
    config: ChartConfig | None = None,
    bodies: Sequence[str] | None = None,
    adapter: EphemerisAdapter | None = None,
    orb_calculator: OrbCalculator | None = None,
    moment: datetime | None = None,
    angles: ChartAngles | None = None,
    houses: Mapping[str, HouseCusps] | None = None,
) -> NatalChart:
    """Assemble a chart for a UT Julian day.

    ``angles`` and ``houses`` replace the values derived from sidereal time;
    solar-arc progressions use them to carry the natal framework forward.
    """

    config = config or ChartConfig()
    adapter = adapter or EphemerisAdapter()
    orb_calculator = orb_calculator or OrbCalculator(orb_overrides=config.orb_overrides)
    roster = _resolve_bodies(bodies, config)

    positions: dict[str, BodyPosition] = {}
    unavailable: dict[str, str] = {}
    for name in roster:
        try:
            positions[name] = adapter.body_position(name, jd)
        except EphemerisDataUnavailable as exc:
            LOG.warning(
                "Skipping %s: %s",
                name,
                exc,
                extra={"err_code": "BODY_UNAVAILABLE"},
            )
            unavailable[name] = str(exc)

    sun = positions.get("Sun") or adapter.body_position("Sun", jd)
    moon = positions.get("Moon") or adapter.body_position("Moon", jd)

    lst = local_sidereal_time(jd, location.longitude)
    eps = mean_obliquity(jd) + nutation(jd).obliquity
    chart_angles = angles or compute_angles(lst, location.latitude, eps)

    if houses is None:
        houses = {
            system.value: houses_with_fallback(
                system, lst=lst, latitude=location.latitude, obliquity=eps, angles=chart_angles
            )
            for system in config.house_systems
        }
    primary = next(iter(houses.values()))

    points = _derived_points(
        adapter,
        jd,
        chart_angles.ascendant,
        sun.longitude,
        moon.longitude,
        nodes_variant=config.nodes_variant,
    )
    points["Vertex"] = adapter.point("Vertex", chart_angles.vertex, jd)

    aspect_longitudes = {name: pos.longitude for name, pos in positions.items()}
    aspect_longitudes["North Node"] = points["North Node"].longitude
    aspect_longitudes["Lilith"] = points["Lilith"].longitude
    aspects = find_aspects(
        aspect_longitudes,
        angles={
            "Ascendant": chart_angles.ascendant,
            "Midheaven": chart_angles.midheaven,
        },
        aspects=orb_calculator.aspects,
    )

    placements = {
        name: house_of(pos.longitude, primary.cusps)
        for name, pos in {**positions, **points}.items()
    }

    metadata = {
        "ephemeris_mode": adapter.context.mode,
        "ephemeris_source": adapter.context.source,
        "house_systems": [system.value for system in config.house_systems],
        "primary_house_system": primary.system.value,
        "nodes_variant": config.nodes_variant,
    }

    return NatalChart(
        moment=moment,
        julian_day=float(jd),
        location=location,
        sidereal_time=lst,
        obliquity=eps,
        positions=MappingProxyType(positions),
        angles=chart_angles,
        houses=MappingProxyType(dict(houses)),
        points=MappingProxyType(points),
        lunar_phase=normalize_degrees(moon.longitude - sun.longitude),
        aspects=tuple(aspects),
        house_placements=MappingProxyType(placements),
        unavailable=MappingProxyType(unavailable),
        metadata=MappingProxyType(metadata),
    )


def compute_natal_chart(
    moment: datetime,
    location: ChartLocation,
    *,
    config: ChartConfig | None = None,
    bodies: Sequence[str] | None = None,
    adapter: EphemerisAdapter | None = None,
    orb_calculator: OrbCalculator | None = None,
) -> NatalChart:
    """Compute a natal chart for ``moment`` (naive datetimes are UTC).

    Raises
    ------
    UnknownBody
        When ``bodies`` names something outside the supported roster.
    InvalidDateError
        When ``moment`` cannot be expressed as a Julian day.
    """

    utc_moment = ensure_utc(moment)
    jd = julian_day_from_datetime(utc_moment)
    with CHART_COMPUTE_DURATION.labels(kind="natal").time():
        return compute_chart_at(
            jd,
            location,
            config=config,
            bodies=bodies,
            adapter=adapter,
            orb_calculator=orb_calculator,
            moment=utc_moment,
        )
