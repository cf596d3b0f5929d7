"""Chart computation entry points for :mod:`natalengine`."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__all__ = [
    "Aspect",
    "ChartConfig",
    "ChartLocation",
    "NatalChart",
    "ProgressedChart",
    "ProgressionMethod",
    "TransitContact",
    "TransitScanner",
    "TransitSnapshot",
    "compute_natal_chart",
    "compute_progressed_chart",
    "find_aspects",
    "match_aspect",
]


if TYPE_CHECKING:
    from .aspects import Aspect, find_aspects, match_aspect
    from .config import ChartConfig, ProgressionMethod
    from .natal import ChartLocation, NatalChart, compute_natal_chart
    from .progressions import ProgressedChart, compute_progressed_chart
    from .transits import TransitContact, TransitScanner, TransitSnapshot

_LAZY_SUBMODULES: dict[str, tuple[str, ...]] = {
    "aspects": ("Aspect", "find_aspects", "match_aspect"),
    "config": ("ChartConfig", "ProgressionMethod"),
    "natal": ("ChartLocation", "NatalChart", "compute_natal_chart"),
    "progressions": ("ProgressedChart", "compute_progressed_chart"),
    "transits": ("TransitContact", "TransitScanner", "TransitSnapshot"),
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
