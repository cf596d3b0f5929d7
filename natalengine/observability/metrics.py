"""Prometheus metric definitions shared across natalengine components."""

from __future__ import annotations

from collections.abc import Iterable

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

__all__ = [
    "CHART_COMPUTE_DURATION",
    "EPHEMERIS_FALLBACKS",
    "HOUSE_FALLBACKS",
    "ensure_metrics_registered",
]


CHART_COMPUTE_DURATION = Histogram(
    "natalengine_chart_compute_duration_seconds",
    "Duration of natal, transit and progressed chart assembly.",
    ("kind",),
    registry=None,
)

EPHEMERIS_FALLBACKS = Counter(
    "natalengine_ephemeris_fallbacks_total",
    "Body positions served by a lower rung of the precision ladder.",
    ("body", "source"),
    registry=None,
)

HOUSE_FALLBACKS = Counter(
    "natalengine_house_fallbacks_total",
    "House computations that fell back to Equal houses.",
    ("system",),
    registry=None,
)


def _iter_metrics() -> Iterable[Counter | Histogram]:
    yield CHART_COMPUTE_DURATION
    yield EPHEMERIS_FALLBACKS
    yield HOUSE_FALLBACKS


def ensure_metrics_registered(
    registry: CollectorRegistry | None = None,
) -> None:
    """Register shared metrics with ``registry`` if not already present."""

    target = registry or REGISTRY
    for metric in _iter_metrics():
        try:
            target.register(metric)
        except ValueError:
            # Prometheus raises on duplicate names within one registry.
            continue
