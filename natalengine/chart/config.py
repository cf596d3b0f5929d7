"""Runtime configuration for chart computations."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

from ..ephemeris.house_systems import HOUSE_ALIASES, HouseSystem, resolve_house_system

__all__ = [
    "ChartConfig",
    "HOUSE_SYSTEM_CHOICES",
    "PROGRESSION_METHOD_CHOICES",
    "ProgressionMethod",
    "VALID_NODE_VARIANTS",
]


class ProgressionMethod(StrEnum):
    """How a progressed chart advances the natal chart."""

    NAIVE_DATE = "naive_date"
    SOLAR_ARC = "solar_arc"


HOUSE_SYSTEM_CHOICES = sorted({*(member.value for member in HouseSystem), *HOUSE_ALIASES})
PROGRESSION_METHOD_CHOICES = sorted(member.value for member in ProgressionMethod)

_PROGRESSION_ALIASES = {
    "naive": ProgressionMethod.NAIVE_DATE,
    "naive-date": ProgressionMethod.NAIVE_DATE,
    "secondary": ProgressionMethod.NAIVE_DATE,
    "solar-arc": ProgressionMethod.SOLAR_ARC,
    "solararc": ProgressionMethod.SOLAR_ARC,
}

VALID_NODE_VARIANTS = {"mean", "true"}


@dataclass(frozen=True)
class ChartConfig:
    """House systems, progression method and body/orb options for a chart.

    The first entry of ``house_systems`` is the primary system used for
    per-body house placement.
    """

    house_systems: Sequence[str | HouseSystem] = (HouseSystem.PLACIDUS,)
    progression_method: str | ProgressionMethod = ProgressionMethod.SOLAR_ARC
    nodes_variant: str = "mean"
    include_minor_bodies: bool = True
    orb_overrides: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        systems = self.house_systems
        if isinstance(systems, (str, HouseSystem)):
            systems = (systems,)
        resolved: list[HouseSystem] = []
        for system in systems:
            try:
                house = resolve_house_system(system)
            except ValueError:
                options = ", ".join(HOUSE_SYSTEM_CHOICES)
                raise ValueError(
                    f"Unknown house system '{system}'. Valid options: {options}"
                ) from None
            if house not in resolved:
                resolved.append(house)
        if not resolved:
            raise ValueError("At least one house system is required")
        object.__setattr__(self, "house_systems", tuple(resolved))

        method = self.progression_method
        if not isinstance(method, ProgressionMethod):
            token = str(method or "").strip().lower()
            try:
                method = _PROGRESSION_ALIASES.get(token) or ProgressionMethod(token)
            except ValueError:
                options = ", ".join(PROGRESSION_METHOD_CHOICES)
                raise ValueError(
                    f"Unknown progression method '{self.progression_method}'. "
                    f"Valid options: {options}"
                ) from None
        object.__setattr__(self, "progression_method", method)

        nodes_variant = (self.nodes_variant or "mean").lower()
        if nodes_variant not in VALID_NODE_VARIANTS:
            options = ", ".join(sorted(VALID_NODE_VARIANTS))
            raise ValueError(
                f"Unknown nodes variant '{self.nodes_variant}'. Valid options: {options}"
            )
        object.__setattr__(self, "nodes_variant", nodes_variant)

        overrides = {str(k).strip().lower(): float(v) for k, v in dict(self.orb_overrides).items()}
        object.__setattr__(self, "orb_overrides", MappingProxyType(overrides))

    @property
    def primary_house_system(self) -> HouseSystem:
        return self.house_systems[0]  # type: ignore[return-value]
