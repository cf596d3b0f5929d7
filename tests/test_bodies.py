from __future__ import annotations

import pytest

from natalengine.core.bodies import (
    SUPPORTED_BODIES,
    TRANSIT_BODIES,
    body_class,
    canonical_name,
    transit_class,
)
from natalengine.core.errors import UnknownBody


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("sun", "Sun"),
        ("  MARS ", "Mars"),
        ("nn", "North Node"),
        ("north node", "North Node"),
        ("mean_lilith", "Lilith"),
        ("pof", "Part of Fortune"),
        ("chiron", "Chiron"),
    ],
)
def test_canonical_name(raw: str, expected: str) -> None:
    assert canonical_name(raw) == expected


def test_unknown_body_lists_valid_options() -> None:
    with pytest.raises(UnknownBody) as excinfo:
        canonical_name("Vulcan")
    message = str(excinfo.value)
    assert "Vulcan" in message
    assert "Valid options" in message
    assert excinfo.value.body == "Vulcan"
    assert "Pluto" in excinfo.value.supported


def test_unknown_body_is_key_error() -> None:
    with pytest.raises(KeyError):
        canonical_name("")


def test_rosters() -> None:
    assert SUPPORTED_BODIES[:2] == ("Sun", "Moon")
    assert "Chiron" in TRANSIT_BODIES
    assert "Ceres" not in TRANSIT_BODIES


@pytest.mark.parametrize(
    ("body", "orb_class", "group"),
    [
        ("Sun", "luminary", "regular"),
        ("Moon", "luminary", "short_term"),
        ("Venus", "personal", "regular"),
        ("Saturn", "social", "regular"),
        ("Pluto", "outer", "long_term"),
        ("Chiron", "centaur", "long_term"),
        ("Vesta", "asteroid", "long_term"),
    ],
)
def test_classes(body: str, orb_class: str, group: str) -> None:
    assert body_class(body) == orb_class
    assert transit_class(body) == group
