from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import pytest

from natalengine.chart.natal import ChartLocation, NatalChart, compute_natal_chart
from natalengine.chart.transits import TRANSIT_GROUPS, TransitScanner
from natalengine.core.angles import angular_separation, normalize_degrees
from natalengine.core.errors import EphemerisDataUnavailable
from natalengine.ephemeris.adapter import BodyPosition, EphemerisAdapter
from natalengine.ephemeris.frames import ecliptic_to_equatorial

BIRTH = datetime(1990, 1, 1, 0, 0, tzinfo=UTC)
NOW = datetime(2024, 3, 20, 12, 0, tzinfo=UTC)
LONDON = ChartLocation(51.5072, -0.1276)


class StubAdapter:
    """Serve fixed longitudes so contacts can be asserted exactly."""

    def __init__(self, longitudes: dict[str, float], speeds: dict[str, float] | None = None) -> None:
        self.longitudes = longitudes
        self.speeds = speeds or {}

    def body_position(self, body, jd):
        if body not in self.longitudes:
            raise EphemerisDataUnavailable(body, "stub")
        return BodyPosition(
            body=body,
            julian_day=jd,
            longitude=normalize_degrees(self.longitudes[body]),
            latitude=0.0,
            distance_au=1.0,
            speed_longitude=self.speeds.get(body, 0.5),
            source="stub",
        )

    def topocentric_moon(self, jd, latitude, longitude):
        return BodyPosition("Moon", jd, normalize_degrees(self.longitudes["Moon"] + 0.9), 0.0, 0.0025, 13.0, "topocentric")


@pytest.fixture(scope="module")
def natal(elements_adapter: EphemerisAdapter) -> NatalChart:
    return compute_natal_chart(
        BIRTH, LONDON, bodies=["Sun", "Moon", "Mars", "Saturn"], adapter=elements_adapter
    )


def _contacts(snapshot, transiting: str, natal_body: str):
    return [
        contact
        for contact in snapshot.contacts
        if contact.transiting_body == transiting and contact.natal_body == natal_body
    ]


def test_contacts_follow_policy(natal: NatalChart) -> None:
    sun = natal.positions["Sun"].longitude
    moon = natal.positions["Moon"].longitude
    adapter = StubAdapter(
        {
            "Sun": sun + 1.0,
            "Moon": moon + 0.5,
            "Mars": sun + 92.4,
            "Saturn": sun + 92.4,
            "Pluto": moon + 120.5,
        },
        speeds={"Pluto": -0.01},
    )
    scanner = TransitScanner(adapter=adapter, bodies=["Sun", "Moon", "Mars", "Saturn", "Pluto"])
    snapshot = scanner.scan(natal, NOW)

    (sun_sun,) = _contacts(snapshot, "Sun", "Sun")
    assert sun_sun.aspect == "conjunction"
    assert sun_sun.orb == pytest.approx(1.0)
    assert sun_sun.orb_allow == pytest.approx(3.0)
    assert sun_sun.transit_class == "regular"

    assert _contacts(snapshot, "Moon", "Moon") == []
    assert _contacts(snapshot, "Mars", "Sun") == []

    (saturn,) = _contacts(snapshot, "Saturn", "Sun")
    assert saturn.aspect == "square"
    assert saturn.orb_allow == pytest.approx(2.5)
    assert saturn.applying

    (pluto,) = _contacts(snapshot, "Pluto", "Moon")
    assert pluto.aspect == "trine"
    assert not pluto.applying
    assert pluto.transit_class == "long_term"
    assert pluto.window_days == pytest.approx(45.0)
    assert pluto.window_start == NOW - timedelta(days=45)
    assert pluto.window_end == NOW + timedelta(days=45)

    order = [TRANSIT_GROUPS.index(contact.transit_class) for contact in snapshot.contacts]
    assert order == sorted(order)
    assert not snapshot.topocentric
    assert snapshot.angles is None
    assert not any(c.transiting_body in ("Ascendant", "Midheaven") for c in snapshot.contacts)


def test_contacts_against_natal_angles(natal: NatalChart) -> None:
    adapter = StubAdapter({"Jupiter": natal.angles.midheaven + 0.4})
    snapshot = TransitScanner(adapter=adapter, bodies=["Jupiter"]).scan(natal, NOW)
    (contact,) = _contacts(snapshot, "Jupiter", "Midheaven")
    assert contact.aspect == "conjunction"


def test_grouped(natal: NatalChart) -> None:
    moon = natal.positions["Moon"].longitude
    adapter = StubAdapter({"Moon": natal.positions["Sun"].longitude, "Pluto": moon})
    snapshot = TransitScanner(adapter=adapter, bodies=["Moon", "Pluto"]).scan(natal, NOW)
    groups = snapshot.grouped()
    assert list(groups) == list(TRANSIT_GROUPS)
    assert all(c.transiting_body == "Moon" for c in groups["short_term"])
    assert any(c.natal_body == "Sun" for c in groups["short_term"])
    assert any(c.natal_body == "Moon" for c in groups["long_term"])
    assert snapshot.to_dict()["contacts"][0]["motion_estimate"] == "approximate"


def test_observer_uses_topocentric_moon(natal: NatalChart) -> None:
    adapter = StubAdapter({"Moon": 10.0})
    snapshot = TransitScanner(adapter=adapter, bodies=["Moon"]).scan(natal, NOW, observer=LONDON)
    assert snapshot.topocentric
    assert snapshot.positions["Moon"].source == "topocentric"
    assert snapshot.positions["Moon"].longitude == pytest.approx(10.9)
    assert snapshot.angles is not None


def test_real_scan(natal: NatalChart, elements_adapter: EphemerisAdapter) -> None:
    scanner = TransitScanner(adapter=elements_adapter)
    snapshot = scanner.scan(natal, NOW, observer=LONDON)
    assert "Chiron" in snapshot.positions
    assert snapshot.positions["Moon"].source == "topocentric"
    for contact in snapshot.contacts:
        assert contact.orb <= contact.orb_allow
        assert contact.orb_allow <= scanner.orb_calculator.transit_orb(contact.transiting_body)
    payload = snapshot.to_dict()
    assert payload["observer"] == {"latitude": 51.5072, "longitude": -0.1276}


def test_default_moment_is_now(natal: NatalChart) -> None:
    adapter = StubAdapter({"Sun": 0.0})
    snapshot = TransitScanner(adapter=adapter, bodies=["Sun"]).scan(natal)
    assert abs((snapshot.moment - datetime.now(UTC)).total_seconds()) < 60.0


def test_observer_angles_at_birth_moment(natal: NatalChart) -> None:
    adapter = StubAdapter({"Sun": natal.positions["Sun"].longitude + 200.0})
    snapshot = TransitScanner(adapter=adapter, bodies=["Sun"]).scan(natal, BIRTH, observer=LONDON)
    assert snapshot.angles.ascendant == pytest.approx(natal.angles.ascendant, abs=1e-9)
    assert snapshot.angles.midheaven == pytest.approx(natal.angles.midheaven, abs=1e-9)
    assert _contacts(snapshot, "Ascendant", "Ascendant") == []
    assert _contacts(snapshot, "Midheaven", "Midheaven") == []
    for contact in snapshot.contacts:
        if contact.transiting_body in ("Ascendant", "Midheaven"):
            assert contact.orb <= 1.0


def test_observer_midheaven_aspects_natal_body(natal: NatalChart) -> None:
    natal_sun = natal.positions["Sun"].longitude
    ra, _ = ecliptic_to_equatorial(natal_sun, 0.0, natal.obliquity)
    # Sidereal time advances 360.9856° per UT day.
    delta = normalize_degrees(ra - natal.sidereal_time)
    moment = BIRTH + timedelta(days=delta / 360.98564736629)

    adapter = StubAdapter({"Saturn": natal_sun + 45.0})
    snapshot = TransitScanner(adapter=adapter, bodies=["Saturn"]).scan(
        natal, moment, observer=LONDON
    )
    assert angular_separation(snapshot.angles.midheaven, natal_sun) < 0.01

    (contact,) = _contacts(snapshot, "Midheaven", "Sun")
    assert contact.aspect == "conjunction"
    assert contact.orb < 0.01
    assert contact.orb_allow == pytest.approx(1.0)
    assert contact.transit_class == "short_term"
    assert contact.applying
    assert contact.window_days == pytest.approx(0.25)
    assert contact in snapshot.grouped()["short_term"]


def test_unavailable_body_does_not_fail_snapshot(natal: NatalChart, caplog) -> None:
    adapter = StubAdapter({"Sun": natal.positions["Sun"].longitude})
    scanner = TransitScanner(adapter=adapter, bodies=["Sun", "Pholus"])
    with caplog.at_level(logging.WARNING, logger="natalengine.chart.transits"):
        snapshot = scanner.scan(natal, NOW)

    assert list(snapshot.positions) == ["Sun"]
    assert list(snapshot.unavailable) == ["Pholus"]
    assert snapshot.degraded
    assert _contacts(snapshot, "Sun", "Sun")
    assert snapshot.to_dict()["unavailable"] == {"Pholus": snapshot.unavailable["Pholus"]}
    assert any(getattr(r, "err_code", None) == "BODY_UNAVAILABLE" for r in caplog.records)
