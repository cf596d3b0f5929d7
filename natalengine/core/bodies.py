"""Body roster, classification and name canonicalisation."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, Final, Tuple

from .errors import UnknownBody

__all__ = [
    "DERIVED_POINTS",
    "MINOR_BODIES",
    "PLANETARY_BODIES",
    "SUPPORTED_BODIES",
    "TRANSIT_BODIES",
    "body_class",
    "canonical_name",
    "transit_class",
]


PLANETARY_BODIES: Final[Tuple[str, ...]] = (
    "Sun",
    "Moon",
    "Mercury",
    "Venus",
    "Mars",
    "Jupiter",
    "Saturn",
    "Uranus",
    "Neptune",
    "Pluto",
)

MINOR_BODIES: Final[Tuple[str, ...]] = (
    "Chiron",
    "Ceres",
    "Pallas",
    "Juno",
    "Vesta",
    "Pholus",
)

# Longitude-only points derived from other positions; never requested from
# the ephemeris directly.
DERIVED_POINTS: Final[Tuple[str, ...]] = (
    "North Node",
    "South Node",
    "Lilith",
    "Part of Fortune",
    "Vertex",
)

SUPPORTED_BODIES: Final[Tuple[str, ...]] = PLANETARY_BODIES + MINOR_BODIES

TRANSIT_BODIES: Final[Tuple[str, ...]] = PLANETARY_BODIES + ("Chiron",)


_BODY_CLASS: Dict[str, str] = {
    "Sun": "luminary",
    "Moon": "luminary",
    "Mercury": "personal",
    "Venus": "personal",
    "Mars": "personal",
    "Jupiter": "social",
    "Saturn": "social",
    "Uranus": "outer",
    "Neptune": "outer",
    "Pluto": "outer",
    "Chiron": "centaur",
    "Pholus": "centaur",
    "Ceres": "asteroid",
    "Pallas": "asteroid",
    "Juno": "asteroid",
    "Vesta": "asteroid",
    "North Node": "point",
    "South Node": "point",
    "Lilith": "point",
    "Part of Fortune": "point",
    "Vertex": "point",
}

_BODY_ALIASES: Dict[str, str] = {
    "node": "North Node",
    "nn": "North Node",
    "mean_node": "North Node",
    "north_node": "North Node",
    "sn": "South Node",
    "south_node": "South Node",
    "black_moon_lilith": "Lilith",
    "mean_lilith": "Lilith",
    "fortune": "Part of Fortune",
    "part_of_fortune": "Part of Fortune",
    "pof": "Part of Fortune",
}

_BY_LOWER: Dict[str, str] = {name.lower(): name for name in _BODY_CLASS}


@lru_cache(maxsize=None)
def canonical_name(name: str) -> str:
    """Return the roster spelling for ``name``.

    Matching is case-insensitive and accepts the common aliases used in
    configuration files (``nn``, ``pof``, ``mean_lilith`` and so on).

    Raises
    ------
    UnknownBody
        When ``name`` does not denote a supported body or derived point.
    """

    lowered = (name or "").strip().lower()
    key = lowered.replace(" ", "_")
    if key in _BODY_ALIASES:
        return _BODY_ALIASES[key]
    if lowered in _BY_LOWER:
        return _BY_LOWER[lowered]
    raise UnknownBody(str(name), SUPPORTED_BODIES + DERIVED_POINTS)


def body_class(name: str) -> str:
    """Return the orb class (luminary, personal, social, outer, centaur, asteroid, point)."""

    return _BODY_CLASS[canonical_name(name)]


_TRANSIT_CLASS: Dict[str, str] = {
    "luminary": "regular",
    "personal": "regular",
    "social": "regular",
    "outer": "long_term",
    "centaur": "long_term",
}


def transit_class(name: str) -> str:
    """Group a transiting body as ``short_term``, ``regular`` or ``long_term``."""

    canonical = canonical_name(name)
    if canonical == "Moon":
        return "short_term"
    return _TRANSIT_CLASS.get(_BODY_CLASS[canonical], "long_term")
