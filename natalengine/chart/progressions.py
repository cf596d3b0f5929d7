"""Progressed chart helpers (naive-date and solar-arc)."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from ..core.angles import normalize_degrees
from ..core.time import ensure_utc, jd_to_datetime, julian_day_from_datetime
from ..ephemeris.adapter import EphemerisAdapter
from ..ephemeris.house_systems import HouseCusps
from ..observability.metrics import CHART_COMPUTE_DURATION
from ..scoring.orb import OrbCalculator
from .config import ChartConfig, ProgressionMethod
from .natal import NatalChart, compute_chart_at

__all__ = ["ProgressedChart", "YEAR_DAYS", "compute_progressed_chart", "progressed_julian_day"]

# One day of ephemeris motion stands for one tropical year of life.
YEAR_DAYS = 365.2422


@dataclass(frozen=True)
class ProgressedChart:
    """Container for a progressed chart and associated metadata."""

    target_moment: datetime
    progressed_julian_day: float
    progressed_moment: datetime | None
    method: ProgressionMethod
    solar_arc: float | None
    chart: NatalChart

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_moment": self.target_moment.isoformat(),
            "progressed_julian_day": self.progressed_julian_day,
            "progressed_moment": (
                self.progressed_moment.isoformat() if self.progressed_moment else None
            ),
            "method": self.method.value,
            "solar_arc": self.solar_arc,
            "chart": self.chart.to_dict(),
        }


def progressed_julian_day(natal_jd: float, target_jd: float) -> float:
    """Day-for-a-year progressed instant for ``target_jd``."""

    return natal_jd + (target_jd - natal_jd) / YEAR_DAYS


def _solar_arc(natal_sun: float, progressed_sun: float, forward: bool) -> float:
    arc = normalize_degrees(progressed_sun - natal_sun)
    return arc if forward or arc == 0.0 else arc - 360.0


def _shift_houses(cusps: HouseCusps, arc: float) -> HouseCusps:
    return replace(cusps, cusps=tuple(normalize_degrees(c + arc) for c in cusps.cusps))


def compute_progressed_chart(
    natal_chart: NatalChart,
    target_moment: datetime,
    *,
    method: str | ProgressionMethod | None = None,
    config: ChartConfig | None = None,
    bodies: Sequence[str] | None = None,
    adapter: EphemerisAdapter | None = None,
    orb_calculator: OrbCalculator | None = None,
) -> ProgressedChart:
    """Progress ``natal_chart`` to ``target_moment``.

    ``naive_date`` recomputes everything, angles included, for the
    progressed instant at the birth location. ``solar_arc`` (the default)
    keeps the natal angles and house cusps and advances them by the Sun's
    travel between the natal and progressed instants.
    """

    if method is not None:
        config = replace(config or ChartConfig(), progression_method=method)
    config = config or ChartConfig()
    adapter = adapter or EphemerisAdapter()
    roster = tuple(bodies) if bodies is not None else tuple(natal_chart.positions)

    target = ensure_utc(target_moment)
    target_jd = julian_day_from_datetime(target)
    progressed_jd = progressed_julian_day(natal_chart.julian_day, target_jd)
    try:
        progressed_moment: datetime | None = jd_to_datetime(progressed_jd)
    except ValueError:
        progressed_moment = None

    with CHART_COMPUTE_DURATION.labels(kind="progressed").time():
        if config.progression_method is ProgressionMethod.NAIVE_DATE:
            chart = compute_chart_at(
                progressed_jd,
                natal_chart.location,
                config=config,
                bodies=roster,
                adapter=adapter,
                orb_calculator=orb_calculator,
                moment=progressed_moment,
            )
            arc = None
        else:
            natal_sun = natal_chart.positions.get("Sun") or adapter.body_position(
                "Sun", natal_chart.julian_day
            )
            progressed_sun = adapter.body_position("Sun", progressed_jd)
            arc = _solar_arc(
                natal_sun.longitude, progressed_sun.longitude, progressed_jd >= natal_chart.julian_day
            )
            chart = compute_chart_at(
                progressed_jd,
                natal_chart.location,
                config=config,
                bodies=roster,
                adapter=adapter,
                orb_calculator=orb_calculator,
                moment=progressed_moment,
                angles=natal_chart.angles.shifted(arc),
                houses={
                    name: _shift_houses(cusps, arc) for name, cusps in natal_chart.houses.items()
                },
            )

    return ProgressedChart(
        target_moment=target,
        progressed_julian_day=progressed_jd,
        progressed_moment=progressed_moment,
        method=config.progression_method,  # type: ignore[arg-type]
        solar_arc=arc,
        chart=chart,
    )
