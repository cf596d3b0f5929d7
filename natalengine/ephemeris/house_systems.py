"""Chart angles and house cusps (Placidus, Equal, Whole Sign)."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final

from ..core.angles import normalize_degrees, signed_delta
from ..core.errors import HouseSystemUnavailable
from ..observability.metrics import HOUSE_FALLBACKS

LOG = logging.getLogger(__name__)

__all__ = [
    "ChartAngles",
    "HOUSE_ALIASES",
    "HouseCusps",
    "HouseSystem",
    "PLACIDUS_MAX_ITERATIONS",
    "compute_angles",
    "compute_house_cusps",
    "equal_cusps",
    "house_of",
    "houses_with_fallback",
    "placidus_cusps",
    "resolve_house_system",
    "whole_sign_cusps",
]

PLACIDUS_MAX_ITERATIONS: Final[int] = 50
_PLACIDUS_TOLERANCE: Final[float] = 1e-9


class HouseSystem(StrEnum):
    """Supported house division methods."""

    PLACIDUS = "placidus"
    EQUAL = "equal"
    WHOLE_SIGN = "whole_sign"


HOUSE_ALIASES: Mapping[str, HouseSystem] = {
    "p": HouseSystem.PLACIDUS,
    "e": HouseSystem.EQUAL,
    "a": HouseSystem.EQUAL,
    "w": HouseSystem.WHOLE_SIGN,
    "ws": HouseSystem.WHOLE_SIGN,
    "whole": HouseSystem.WHOLE_SIGN,
    "wholesign": HouseSystem.WHOLE_SIGN,
    "whole sign": HouseSystem.WHOLE_SIGN,
    "whole-sign": HouseSystem.WHOLE_SIGN,
}


def resolve_house_system(name: str | HouseSystem) -> HouseSystem:
    """Return the :class:`HouseSystem` for a name, code or alias."""

    if isinstance(name, HouseSystem):
        return name
    token = (name or "").strip().lower()
    if token in HOUSE_ALIASES:
        return HOUSE_ALIASES[token]
    try:
        return HouseSystem(token)
    except ValueError:
        raise ValueError(
            f"Unsupported house system '{name}'. Valid options: "
            f"{sorted(member.value for member in HouseSystem)}"
        ) from None


@dataclass(frozen=True)
class ChartAngles:
    """The four chart angles plus the Vertex axis, in degrees."""

    ascendant: float
    midheaven: float
    descendant: float
    imum_coeli: float
    vertex: float
    antivertex: float

    def to_dict(self) -> dict[str, float]:
        return {
            "ascendant": self.ascendant,
            "midheaven": self.midheaven,
            "descendant": self.descendant,
            "imum_coeli": self.imum_coeli,
            "vertex": self.vertex,
            "antivertex": self.antivertex,
        }

    def shifted(self, arc: float) -> "ChartAngles":
        """Return every angle advanced by ``arc`` degrees."""

        return ChartAngles(
            *(normalize_degrees(value + arc) for value in self.to_dict().values())
        )


@dataclass(frozen=True)
class HouseCusps:
    """Twelve cusp longitudes for one house system.

    When the requested system could not be computed, ``system`` names the
    system actually used and ``fallback_from``/``fallback_reason`` explain why.
    """

    system: HouseSystem
    cusps: tuple[float, ...]
    requested_system: HouseSystem | None = None
    fallback_from: HouseSystem | None = None
    fallback_reason: str | None = None

    @property
    def degraded(self) -> bool:
        return self.fallback_from is not None

    def house_of(self, longitude: float) -> int:
        return house_of(longitude, self.cusps)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "system": self.system.value,
            "cusps": list(self.cusps),
            "degraded": self.degraded,
        }
        if self.requested_system is not None:
            payload["requested_system"] = self.requested_system.value
        if self.fallback_from is not None:
            payload["fallback_from"] = self.fallback_from.value
        if self.fallback_reason is not None:
            payload["fallback_reason"] = self.fallback_reason
        return payload


def _ascendant(lst: float, latitude: float, obliquity: float) -> float:
    theta = math.radians(lst)
    eps = math.radians(obliquity)
    phi = math.radians(latitude)
    # tan(Asc) = -cos(LST) / (sin ε tan φ + cos ε sin LST); atan2 keeps the
    # eastern intersection in every quadrant.
    denominator = math.sin(eps) * math.tan(phi) + math.cos(eps) * math.sin(theta)
    return normalize_degrees(math.degrees(math.atan2(math.cos(theta), -denominator)))


def _midheaven(lst: float, obliquity: float) -> float:
    theta = math.radians(lst)
    eps = math.radians(obliquity)
    return normalize_degrees(math.degrees(math.atan2(math.sin(theta), math.cos(theta) * math.cos(eps))))


def compute_angles(lst: float, latitude: float, obliquity: float) -> ChartAngles:
    """Ascendant, Midheaven and their opposites from LST, latitude and ε.

    The Vertex is the Ascendant formula evaluated at the IC's sidereal time
    for the co-latitude.
    """

    asc = _ascendant(lst, latitude, obliquity)
    mc = _midheaven(lst, obliquity)
    vertex = _ascendant(lst + 180.0, 90.0 - latitude, obliquity)
    return ChartAngles(
        ascendant=asc,
        midheaven=mc,
        descendant=normalize_degrees(asc + 180.0),
        imum_coeli=normalize_degrees(mc + 180.0),
        vertex=vertex,
        antivertex=normalize_degrees(vertex + 180.0),
    )


def equal_cusps(ascendant: float) -> tuple[float, ...]:
    return tuple(normalize_degrees(ascendant + 30.0 * index) for index in range(12))


def whole_sign_cusps(ascendant: float) -> tuple[float, ...]:
    start = math.floor(normalize_degrees(ascendant) / 30.0) * 30.0
    return tuple(normalize_degrees(start + 30.0 * index) for index in range(12))


def _longitude_for_ra(ra: float, eps_rad: float) -> float:
    alpha = math.radians(ra)
    return normalize_degrees(math.degrees(math.atan2(math.sin(alpha), math.cos(alpha) * math.cos(eps_rad))))


def _placidus_cusp(
    lst: float, phi_tan: float, eps_rad: float, fraction: float, above_horizon: bool, latitude: float
) -> float:
    """Solve one intermediate cusp on the eastern half of the chart.

    Above the horizon the cusp's hour angle east of the meridian is
    ``fraction`` of its semi-diurnal arc; below, its distance from the IC is
    ``fraction`` of the semi-nocturnal arc.
    """

    if above_horizon:
        ra = lst + 90.0 * fraction
    else:
        ra = lst + 180.0 - 90.0 * fraction
    for _ in range(PLACIDUS_MAX_ITERATIONS):
        lon = _longitude_for_ra(ra, eps_rad)
        dec = math.asin(math.sin(eps_rad) * math.sin(math.radians(lon)))
        x = phi_tan * math.tan(dec)
        if not -1.0 <= x <= 1.0:
            raise HouseSystemUnavailable(
                HouseSystem.PLACIDUS.value, latitude, "semi-arc undefined (circumpolar cusp)"
            )
        ascensional_difference = math.degrees(math.asin(x))
        if above_horizon:
            target = lst + fraction * (90.0 + ascensional_difference)
        else:
            target = lst + 180.0 - fraction * (90.0 - ascensional_difference)
        step = signed_delta(ra, target)
        ra = target
        if abs(step) < _PLACIDUS_TOLERANCE:
            break
    return _longitude_for_ra(ra, eps_rad)


def placidus_cusps(
    lst: float, latitude: float, obliquity: float, angles: ChartAngles | None = None
) -> tuple[float, ...]:
    """Placidus cusps by semi-arc trisection.

    Raises
    ------
    HouseSystemUnavailable
        Inside the polar circles, where some ecliptic degrees never rise or
        set and the semi-arcs are undefined.
    """

    if abs(latitude) >= 90.0 - abs(obliquity):
        raise HouseSystemUnavailable(
            HouseSystem.PLACIDUS.value, latitude, "observer inside the polar circle"
        )
    angles = angles or compute_angles(lst, latitude, obliquity)
    eps_rad = math.radians(obliquity)
    phi_tan = math.tan(math.radians(latitude))

    c11 = _placidus_cusp(lst, phi_tan, eps_rad, 1.0 / 3.0, True, latitude)
    c12 = _placidus_cusp(lst, phi_tan, eps_rad, 2.0 / 3.0, True, latitude)
    c2 = _placidus_cusp(lst, phi_tan, eps_rad, 2.0 / 3.0, False, latitude)
    c3 = _placidus_cusp(lst, phi_tan, eps_rad, 1.0 / 3.0, False, latitude)

    cusps = [0.0] * 12
    cusps[0] = angles.ascendant
    cusps[1] = c2
    cusps[2] = c3
    cusps[3] = angles.imum_coeli
    cusps[4] = normalize_degrees(c11 + 180.0)
    cusps[5] = normalize_degrees(c12 + 180.0)
    cusps[6] = angles.descendant
    cusps[7] = normalize_degrees(c2 + 180.0)
    cusps[8] = normalize_degrees(c3 + 180.0)
    cusps[9] = angles.midheaven
    cusps[10] = c11
    cusps[11] = c12
    return tuple(cusps)


def compute_house_cusps(
    system: str | HouseSystem,
    *,
    lst: float,
    latitude: float,
    obliquity: float,
    angles: ChartAngles | None = None,
) -> HouseCusps:
    """Cusps for ``system``; Placidus may raise :class:`HouseSystemUnavailable`."""

    resolved = resolve_house_system(system)
    angles = angles or compute_angles(lst, latitude, obliquity)
    if resolved is HouseSystem.EQUAL:
        cusps = equal_cusps(angles.ascendant)
    elif resolved is HouseSystem.WHOLE_SIGN:
        cusps = whole_sign_cusps(angles.ascendant)
    else:
        cusps = placidus_cusps(lst, latitude, obliquity, angles)
    return HouseCusps(system=resolved, cusps=cusps, requested_system=resolved)


def houses_with_fallback(
    system: str | HouseSystem,
    *,
    lst: float,
    latitude: float,
    obliquity: float,
    angles: ChartAngles | None = None,
) -> HouseCusps:
    """Like :func:`compute_house_cusps` but degrades to Equal houses."""

    resolved = resolve_house_system(system)
    angles = angles or compute_angles(lst, latitude, obliquity)
    try:
        return compute_house_cusps(
            resolved, lst=lst, latitude=latitude, obliquity=obliquity, angles=angles
        )
    except HouseSystemUnavailable as exc:
        LOG.warning(
            "%s; using equal houses",
            exc,
            extra={"err_code": "HOUSE_FALLBACK"},
        )
        HOUSE_FALLBACKS.labels(system=resolved.value).inc()
        return HouseCusps(
            system=HouseSystem.EQUAL,
            cusps=equal_cusps(angles.ascendant),
            requested_system=resolved,
            fallback_from=resolved,
            fallback_reason=str(exc),
        )


def house_of(longitude: float, cusps: Sequence[float]) -> int:
    """Return the 1-based house whose arc contains ``longitude``."""

    if len(cusps) != 12:
        raise ValueError(f"expected 12 cusps, got {len(cusps)}")
    lon = normalize_degrees(longitude)
    for index in range(12):
        start = cusps[index]
        arc = normalize_degrees(cusps[(index + 1) % 12] - start)
        if normalize_degrees(lon - start) < arc:
            return index + 1
    # Only reachable when every arc is empty.
    return 1
