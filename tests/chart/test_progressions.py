from __future__ import annotations

from datetime import UTC, datetime

import pytest

from natalengine.chart.config import ChartConfig, ProgressionMethod
from natalengine.chart.natal import ChartLocation, NatalChart, compute_natal_chart
from natalengine.chart.progressions import (
    YEAR_DAYS,
    compute_progressed_chart,
    progressed_julian_day,
)
from natalengine.core.angles import normalize_degrees, signed_delta
from natalengine.core.time import local_sidereal_time
from natalengine.ephemeris.adapter import EphemerisAdapter
from natalengine.ephemeris.frames import mean_obliquity, nutation
from natalengine.ephemeris.house_systems import compute_angles

BIRTH = datetime(1990, 1, 1, 0, 0, tzinfo=UTC)
TARGET = datetime(2020, 1, 1, 0, 0, tzinfo=UTC)
BODIES = ["Sun", "Moon", "Mercury", "Venus", "Mars"]


@pytest.fixture(scope="module")
def natal(elements_adapter: EphemerisAdapter) -> NatalChart:
    return compute_natal_chart(
        BIRTH, ChartLocation(51.5072, -0.1276), bodies=BODIES, adapter=elements_adapter
    )


def test_progressed_julian_day() -> None:
    assert progressed_julian_day(2447892.5, 2447892.5 + YEAR_DAYS * 30) == pytest.approx(
        2447892.5 + 30.0
    )
    assert progressed_julian_day(2447892.5, 2447892.5 - YEAR_DAYS) == pytest.approx(2447891.5)


def test_solar_arc_is_default(natal: NatalChart, elements_adapter: EphemerisAdapter) -> None:
    progressed = compute_progressed_chart(natal, TARGET, adapter=elements_adapter)
    assert progressed.method is ProgressionMethod.SOLAR_ARC
    assert progressed.solar_arc is not None
    # about a degree per year of life
    assert 29.0 < progressed.solar_arc < 32.0

    sun_travel = normalize_degrees(
        progressed.chart.positions["Sun"].longitude - natal.positions["Sun"].longitude
    )
    assert progressed.solar_arc == pytest.approx(sun_travel)

    angles = progressed.chart.angles
    assert signed_delta(natal.angles.ascendant + progressed.solar_arc, angles.ascendant) == pytest.approx(0.0, abs=1e-9)
    assert signed_delta(natal.angles.midheaven + progressed.solar_arc, angles.midheaven) == pytest.approx(0.0, abs=1e-9)
    assert normalize_degrees(angles.descendant - angles.ascendant) == pytest.approx(180.0)
    assert normalize_degrees(angles.imum_coeli - angles.midheaven) == pytest.approx(180.0)

    natal_cusps = natal.primary_houses.cusps
    progressed_cusps = progressed.chart.primary_houses.cusps
    for before, after in zip(natal_cusps, progressed_cusps):
        assert signed_delta(before + progressed.solar_arc, after) == pytest.approx(0.0, abs=1e-9)


def test_progressed_moment(natal: NatalChart, elements_adapter: EphemerisAdapter) -> None:
    progressed = compute_progressed_chart(natal, TARGET, adapter=elements_adapter)
    assert progressed.progressed_moment is not None
    assert progressed.progressed_moment.date() == datetime(1990, 1, 31).date()
    assert progressed.target_moment == TARGET
    assert set(progressed.chart.positions) == set(BODIES)
    assert progressed.to_dict()["method"] == "solar_arc"


def test_naive_date_recomputes_angles(natal: NatalChart, elements_adapter: EphemerisAdapter) -> None:
    naive = compute_progressed_chart(
        natal, TARGET, method="naive_date", adapter=elements_adapter
    )
    solar = compute_progressed_chart(natal, TARGET, adapter=elements_adapter)
    assert naive.method is ProgressionMethod.NAIVE_DATE
    assert naive.solar_arc is None
    assert naive.chart.positions["Sun"].longitude == pytest.approx(
        solar.chart.positions["Sun"].longitude
    )
    lst = local_sidereal_time(naive.progressed_julian_day, natal.location.longitude)
    eps = mean_obliquity(naive.progressed_julian_day) + nutation(naive.progressed_julian_day).obliquity
    expected = compute_angles(lst, natal.location.latitude, eps)
    assert naive.chart.angles.midheaven == pytest.approx(expected.midheaven)
    assert naive.chart.angles.ascendant == pytest.approx(expected.ascendant)


def test_config_selects_method(natal: NatalChart, elements_adapter: EphemerisAdapter) -> None:
    config = ChartConfig(progression_method="naive")
    progressed = compute_progressed_chart(natal, TARGET, config=config, adapter=elements_adapter)
    assert progressed.method is ProgressionMethod.NAIVE_DATE


def test_backward_target_gives_negative_arc(natal: NatalChart, elements_adapter: EphemerisAdapter) -> None:
    progressed = compute_progressed_chart(
        natal, datetime(1960, 1, 1, tzinfo=UTC), adapter=elements_adapter
    )
    assert progressed.solar_arc is not None
    assert -32.0 < progressed.solar_arc < -29.0
