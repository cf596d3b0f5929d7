"""Observability helpers (Prometheus metrics)."""

from .metrics import (
    CHART_COMPUTE_DURATION,
    EPHEMERIS_FALLBACKS,
    HOUSE_FALLBACKS,
    ensure_metrics_registered,
)

__all__ = [
    "CHART_COMPUTE_DURATION",
    "EPHEMERIS_FALLBACKS",
    "HOUSE_FALLBACKS",
    "ensure_metrics_registered",
]
