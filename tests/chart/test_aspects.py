from __future__ import annotations

import pytest

from natalengine.chart.aspects import find_aspects, match_aspect
from natalengine.scoring.orb import DEFAULT_ASPECTS, OrbCalculator


@pytest.mark.parametrize(
    ("lon_a", "lon_b", "aspect", "orb"),
    [
        (10.0, 12.0, "conjunction", 2.0),
        (355.0, 3.0, "conjunction", 8.0),
        (0.0, 92.5, "square", 2.5),
        (100.0, 221.0, "trine", 1.0),
        (0.0, 178.0, "opposition", 2.0),
        (0.0, 61.0, "sextile", 1.0),
        (0.0, 149.0, "quincunx", 1.0),
        (0.0, 45.5, "semisquare", 0.5),
    ],
)
def test_match_aspect(lon_a: float, lon_b: float, aspect: str, orb: float) -> None:
    match = match_aspect(lon_a, lon_b)
    assert match is not None
    assert match.aspect == aspect
    assert match.orb == pytest.approx(orb)


def test_no_aspect_outside_orb() -> None:
    assert match_aspect(0.0, 20.0) is None
    assert match_aspect(0.0, 103.0) is None


def test_tightest_aspect_wins() -> None:
    # 66 is 6 from both sextile and quintile; only the sextile orb reaches.
    match = match_aspect(0.0, 66.0)
    assert match is not None and match.aspect == "sextile"
    # 126 is inside the trine orb only.
    match = match_aspect(0.0, 126.0)
    assert match is not None and match.aspect == "trine"
    # 134 is 1 from sesquiquadrate and outside the trine orb.
    match = match_aspect(0.0, 134.0)
    assert match is not None and match.aspect == "sesquiquadrate"


def test_max_orb_caps_allowance() -> None:
    assert match_aspect(0.0, 93.0, max_orb=2.0) is None
    capped = match_aspect(0.0, 91.5, max_orb=2.0)
    assert capped is not None
    assert capped.orb_allow == pytest.approx(2.0)


def test_symmetry() -> None:
    forward = match_aspect(12.3, 250.1)
    backward = match_aspect(250.1, 12.3)
    assert forward == backward


def test_find_aspects_includes_angles_and_sorts() -> None:
    hits = find_aspects(
        {"Sun": 10.0, "Moon": 131.0, "Mars": 190.5},
        angles={"Ascendant": 100.5, "Midheaven": 10.2},
    )
    pairs = {(hit.body_a, hit.body_b, hit.aspect) for hit in hits}
    assert ("Sun", "Moon", "trine") in pairs
    assert ("Sun", "Mars", "opposition") in pairs
    assert ("Sun", "Midheaven", "conjunction") in pairs
    assert ("Mars", "Ascendant", "square") in pairs
    assert [hit.orb for hit in hits] == sorted(hit.orb for hit in hits)
    assert all(not (hit.body_a in {"Ascendant", "Midheaven"} and hit.body_b in {"Ascendant", "Midheaven"}) for hit in hits)


def test_find_aspects_skip() -> None:
    hits = find_aspects({"Sun": 0.0, "Moon": 1.0}, skip=[("Moon", "Sun")])
    assert hits == []


def test_exactness() -> None:
    (hit,) = find_aspects({"Sun": 0.0, "Moon": 4.0})
    assert hit.exactness == pytest.approx(0.5)
    assert hit.involves("Moon")
    assert hit.to_dict()["aspect"] == "conjunction"


def test_orb_overrides() -> None:
    calculator = OrbCalculator(orb_overrides={"Square": 1.0})
    assert calculator.natal_orb("square") == pytest.approx(1.0)
    assert calculator.natal_orb("trine") == pytest.approx(8.0)
    assert match_aspect(0.0, 92.0, calculator.aspects) is None
    with pytest.raises(ValueError, match="Valid options"):
        calculator.natal_orb("septile")


def test_transit_policy() -> None:
    calculator = OrbCalculator()
    assert calculator.transit_orb("Sun") == pytest.approx(3.0)
    assert calculator.transit_orb("Mars") == pytest.approx(2.0)
    assert calculator.transit_orb("Saturn") == pytest.approx(2.5)
    assert calculator.transit_orb("Chiron") == pytest.approx(2.5)
    assert calculator.transit_window_days("Moon") == pytest.approx(0.25)
    assert calculator.transit_window_days("Pluto") == pytest.approx(45.0)
    assert calculator.transit_window_days("Vesta") == pytest.approx(7.0)
    assert calculator.transit_angles == ("Ascendant", "Midheaven")
    assert calculator.transit_orb("Ascendant") == pytest.approx(1.0)
    assert calculator.transit_window_days("Midheaven") == pytest.approx(0.25)


def test_default_table_sorted() -> None:
    angles = [row.angle for row in DEFAULT_ASPECTS]
    assert angles == sorted(angles)
    assert {row.name for row in DEFAULT_ASPECTS if row.major} == {
        "conjunction",
        "sextile",
        "square",
        "trine",
        "opposition",
    }
