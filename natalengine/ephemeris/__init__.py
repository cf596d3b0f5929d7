"""Ephemeris layer: series, elements, lunar theory, frames and houses."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "BodyPosition",
    "ChartAngles",
    "EphemerisAdapter",
    "EphemerisContext",
    "HouseCusps",
    "HouseSystem",
    "compute_angles",
    "compute_house_cusps",
    "house_of",
    "houses_with_fallback",
    "init_ephemeris",
    "resolve_house_system",
]


if TYPE_CHECKING:
    from .adapter import BodyPosition, EphemerisAdapter
    from .house_systems import (
        ChartAngles,
        HouseCusps,
        HouseSystem,
        compute_angles,
        compute_house_cusps,
        house_of,
        houses_with_fallback,
        resolve_house_system,
    )
    from .runtime import EphemerisContext, init_ephemeris

_LAZY_SUBMODULES: dict[str, tuple[str, ...]] = {
    "adapter": ("BodyPosition", "EphemerisAdapter"),
    "house_systems": (
        "ChartAngles",
        "HouseCusps",
        "HouseSystem",
        "compute_angles",
        "compute_house_cusps",
        "house_of",
        "houses_with_fallback",
        "resolve_house_system",
    ),
    "runtime": ("EphemerisContext", "init_ephemeris"),
}

_LAZY_ATTRS: dict[str, tuple[str, str]] = {}
for _module, _names in _LAZY_SUBMODULES.items():
    for _name in _names:
        _LAZY_ATTRS[_name] = (_module, _name)


def __getattr__(name: str) -> Any:
    try:
        module_name, attr_name = _LAZY_ATTRS[name]
    except KeyError as exc:
        raise AttributeError(name) from exc
    module = import_module(f".{module_name}", __name__)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(__all__) | set(_LAZY_ATTRS) | set(globals().keys()))
