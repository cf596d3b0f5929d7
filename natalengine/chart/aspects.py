"""Aspect detection between ecliptic longitudes."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from itertools import combinations
from typing import Any

from ..core.angles import angular_separation
from ..scoring.orb import DEFAULT_ASPECTS, AspectDefinition

__all__ = ["Aspect", "AspectMatch", "find_aspects", "match_aspect"]


@dataclass(frozen=True)
class AspectMatch:
    """Classification of one separation against the aspect table."""

    aspect: str
    angle: float
    separation: float
    orb: float
    orb_allow: float


@dataclass(frozen=True)
class Aspect:
    """An aspect between two bodies (or a body and a chart angle)."""

    body_a: str
    body_b: str
    aspect: str
    angle: float
    separation: float
    orb: float
    orb_allow: float

    @property
    def exactness(self) -> float:
        """1.0 when exact, falling linearly to 0.0 at the edge of the orb."""

        if self.orb_allow <= 0.0:
            return 1.0
        return max(0.0, 1.0 - self.orb / self.orb_allow)

    def involves(self, name: str) -> bool:
        return name in (self.body_a, self.body_b)

    def to_dict(self) -> dict[str, Any]:
        return {
            "body_a": self.body_a,
            "body_b": self.body_b,
            "aspect": self.aspect,
            "angle": self.angle,
            "separation": self.separation,
            "orb": self.orb,
            "orb_allow": self.orb_allow,
            "exactness": self.exactness,
        }


def match_aspect(
    lon_a: float,
    lon_b: float,
    aspects: Sequence[AspectDefinition] = DEFAULT_ASPECTS,
    *,
    max_orb: float | None = None,
) -> AspectMatch | None:
    """Return the tightest aspect formed by ``lon_a`` and ``lon_b``, if any.

    The separation is the shorter arc, so the result does not depend on
    argument order. Ties go to the smaller exact angle. ``max_orb`` caps every
    aspect's own orb.
    """

    separation = angular_separation(lon_a, lon_b)
    best: AspectMatch | None = None
    for row in aspects:
        allow = row.orb if max_orb is None else min(row.orb, max_orb)
        deviation = abs(separation - row.angle)
        if deviation > allow:
            continue
        if best is None or deviation < best.orb:
            best = AspectMatch(row.name, row.angle, separation, deviation, allow)
    return best


def find_aspects(
    longitudes: Mapping[str, float],
    *,
    angles: Mapping[str, float] | None = None,
    aspects: Sequence[AspectDefinition] = DEFAULT_ASPECTS,
    skip: Iterable[tuple[str, str]] = (),
) -> list[Aspect]:
    """All body↔body and body↔angle aspects, tightest first.

    Angle↔angle pairs are not reported since their relation is fixed by the
    house geometry.
    """

    skipped = {frozenset(pair) for pair in skip}
    hits: list[Aspect] = []
    names = list(longitudes)
    for name_a, name_b in combinations(names, 2):
        if frozenset((name_a, name_b)) in skipped:
            continue
        match = match_aspect(longitudes[name_a], longitudes[name_b], aspects)
        if match is not None:
            hits.append(_hit(name_a, name_b, match))
    for body in names:
        for angle_name, angle_lon in (angles or {}).items():
            match = match_aspect(longitudes[body], angle_lon, aspects)
            if match is not None:
                hits.append(_hit(body, angle_name, match))
    hits.sort(key=lambda hit: (hit.orb, hit.body_a, hit.body_b))
    return hits


def _hit(body_a: str, body_b: str, match: AspectMatch) -> Aspect:
    return Aspect(
        body_a=body_a,
        body_b=body_b,
        aspect=match.aspect,
        angle=match.angle,
        separation=match.separation,
        orb=match.orb,
        orb_allow=match.orb_allow,
    )
