"""natalengine: ephemeris and natal chart engine."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

__all__ = [
    "ChartConfig",
    "ChartLocation",
    "EphemerisAdapter",
    "NatalChart",
    "TransitScanner",
    "__version__",
    "compute_natal_chart",
    "compute_progressed_chart",
    "init_ephemeris",
]

if TYPE_CHECKING:
    from .chart.config import ChartConfig
    from .chart.natal import ChartLocation, NatalChart, compute_natal_chart
    from .chart.progressions import compute_progressed_chart
    from .chart.transits import TransitScanner
    from .ephemeris.adapter import EphemerisAdapter
    from .ephemeris.runtime import init_ephemeris

_LAZY_ATTRS: dict[str, tuple[str, str]] = {
    "ChartConfig": ("chart.config", "ChartConfig"),
    "ChartLocation": ("chart.natal", "ChartLocation"),
    "NatalChart": ("chart.natal", "NatalChart"),
    "compute_natal_chart": ("chart.natal", "compute_natal_chart"),
    "compute_progressed_chart": ("chart.progressions", "compute_progressed_chart"),
    "TransitScanner": ("chart.transits", "TransitScanner"),
    "EphemerisAdapter": ("ephemeris.adapter", "EphemerisAdapter"),
    "init_ephemeris": ("ephemeris.runtime", "init_ephemeris"),
}


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
    return sorted(set(__all__) | set(globals().keys()))
