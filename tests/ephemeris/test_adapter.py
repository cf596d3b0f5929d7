from __future__ import annotations

import pytest

from natalengine.core.angles import angular_separation, signed_delta
from natalengine.core.errors import UnknownBody
from natalengine.core.time import julian_day
from natalengine.ephemeris.adapter import EphemerisAdapter, positions_to_dict
from natalengine.ephemeris.solar import sun_position

JD_1990 = 2447892.5
JD_MERCURY_RETRO = julian_day(2023, 5, 1)
JD_MERCURY_DIRECT = julian_day(2023, 6, 15)


@pytest.mark.parametrize("body", ["Vulcan", "Lilith", "North Node"])
def test_unknown_bodies_rejected(elements_adapter: EphemerisAdapter, body: str) -> None:
    with pytest.raises(UnknownBody):
        elements_adapter.body_position(body, JD_1990)


def test_elements_context_flags_estimates(elements_adapter: EphemerisAdapter) -> None:
    mars = elements_adapter.body_position("mars", JD_1990)
    assert mars.body == "Mars"
    assert mars.source == "elements"
    assert mars.estimated

    sun = elements_adapter.body_position("Sun", JD_1990)
    assert sun.source == "analytic"
    assert not sun.estimated

    moon = elements_adapter.body_position("Moon", JD_1990)
    assert moon.source == "lunar"


def test_series_context_sources(series_adapter: EphemerisAdapter) -> None:
    mars = series_adapter.body_position("Mars", JD_1990)
    assert mars.source == "series"
    assert not mars.estimated
    pluto = series_adapter.body_position("Pluto", JD_1990)
    assert pluto.source == "elements"
    assert series_adapter.body_position("Sun", JD_1990).source == "series"


def test_series_sun_agrees_with_solar_theory(series_adapter: EphemerisAdapter) -> None:
    geo, _ = series_adapter.geocentric("Sun", 2448908.5)
    assert angular_separation(geo.longitude, sun_position(2448908.5).longitude) < 0.01


def test_series_and_elements_agree(series_adapter, elements_adapter) -> None:
    for body in ("Mercury", "Venus", "Mars", "Jupiter", "Saturn"):
        series = series_adapter.body_position(body, JD_1990)
        estimate = elements_adapter.body_position(body, JD_1990)
        assert angular_separation(series.longitude, estimate.longitude) < 0.5, body


@pytest.mark.parametrize("adapter_name", ["elements_adapter", "series_adapter"])
def test_mercury_retrograde_station(request, adapter_name: str) -> None:
    adapter = request.getfixturevalue(adapter_name)
    assert adapter.body_position("Mercury", JD_MERCURY_RETRO).retrograde
    assert not adapter.body_position("Mercury", JD_MERCURY_DIRECT).retrograde


@pytest.mark.parametrize("body", ["Sun", "Moon", "Mars", "Saturn", "Pluto", "Chiron", "Ceres"])
def test_retrograde_matches_daily_motion(elements_adapter: EphemerisAdapter, body: str) -> None:
    now = elements_adapter.body_position(body, JD_1990)
    tomorrow = elements_adapter.body_position(body, JD_1990 + 1.0)
    delta = signed_delta(now.longitude, tomorrow.longitude)
    assert now.speed_longitude == pytest.approx(delta)
    assert now.retrograde is (delta < 0.0)
    assert 0.0 <= now.longitude < 360.0
    assert -90.0 <= now.latitude <= 90.0


def test_sun_and_moon_never_retrograde(elements_adapter: EphemerisAdapter) -> None:
    for offset in range(0, 360, 30):
        jd = JD_1990 + offset
        assert not elements_adapter.body_position("Sun", jd).retrograde
        assert not elements_adapter.body_position("Moon", jd).retrograde


def test_apparent_longitude_includes_nutation(elements_adapter: EphemerisAdapter) -> None:
    geometric = EphemerisAdapter(elements_adapter.context, apparent=False)
    apparent = elements_adapter.body_position("Sun", JD_1990).longitude
    plain = geometric.body_position("Sun", JD_1990).longitude
    assert 0.0 < angular_separation(apparent, plain) < 0.006


def test_topocentric_moon_differs_by_parallax(elements_adapter: EphemerisAdapter) -> None:
    geocentric = elements_adapter.body_position("Moon", JD_1990)
    topocentric = elements_adapter.topocentric_moon(JD_1990, 51.5072, -0.1276)
    assert topocentric.source == "topocentric"
    assert angular_separation(geocentric.longitude, topocentric.longitude) < 1.1
    assert topocentric.distance_au < geocentric.distance_au + 1e-4


def test_body_positions_and_dict(elements_adapter: EphemerisAdapter) -> None:
    positions = elements_adapter.body_positions(JD_1990, ["sun", "Moon", "Venus"])
    assert list(positions) == ["Sun", "Moon", "Venus"]
    payload = positions_to_dict(positions)
    assert payload["Venus"]["retrograde"] == positions["Venus"].retrograde
    assert payload["Moon"]["source"] == "lunar"


def test_point_records() -> None:
    point = EphemerisAdapter.point("North Node", -10.0, JD_1990, speed_longitude=-0.05)
    assert point.longitude == pytest.approx(350.0)
    assert point.retrograde
    assert point.source == "derived"
    assert point.distance_au is None
