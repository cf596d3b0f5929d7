"""Angular utilities shared across ephemeris, house and aspect code.

Longitudes are compared constantly near the 0°/360° seam. These helpers
keep the wrap-around arithmetic in one place so every component agrees on
normalisation and on the sign of a shortest-path delta.
"""

from __future__ import annotations

import math
from typing import Final

__all__ = [
    "EPSILON_DEG",
    "SIGN_NAMES",
    "angular_separation",
    "normalize_degrees",
    "sign_index",
    "signed_delta",
]


EPSILON_DEG: Final[float] = 1e-9

SIGN_NAMES: Final[tuple[str, ...]] = (
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
)


def normalize_degrees(angle: float) -> float:
    """Return ``angle`` normalised to the ``[0, 360)`` interval.

    Parameters
    ----------
    angle:
        Value in **degrees**. Inputs outside the canonical range are
        wrapped by multiples of 360°.

    Returns
    -------
    float
        A degree value in ``[0, 360)``. Values within ``1e-9`` of ``360``
        are coerced to ``0`` so that callers never observe ``360.0``.
    """

    wrapped = math.fmod(float(angle), 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    if wrapped >= 360.0 - EPSILON_DEG:
        wrapped = 0.0
    return wrapped


def signed_delta(start: float, end: float) -> float:
    """Shortest signed delta from ``start`` to ``end`` in ``(-180, 180]``.

    An exact half-turn is ambiguous; the tie keeps antisymmetry by returning
    the float just below 180 in the forward direction and its negation in
    the reverse direction.
    """

    raw = float(end) - float(start)
    delta = (raw + 180.0) % 360.0 - 180.0
    if delta == -180.0:
        tie = math.nextafter(180.0, 0.0)
        return tie if raw >= 0.0 else -tie
    return delta


def angular_separation(a: float, b: float) -> float:
    """Return the unsigned shorter arc between ``a`` and ``b`` in ``[0, 180]``."""

    diff = abs(normalize_degrees(a) - normalize_degrees(b))
    return 360.0 - diff if diff > 180.0 else diff


def sign_index(longitude: float) -> int:
    """Zero-based zodiac sign index for ``longitude``."""

    return int(normalize_degrees(longitude) // 30.0) % 12
