"""Core calendar, angle and roster primitives."""

from .angles import angular_separation, normalize_degrees, signed_delta
from .bodies import SUPPORTED_BODIES, canonical_name
from .errors import (
    EphemerisDataUnavailable,
    HouseSystemUnavailable,
    InvalidDateError,
    NatalEngineError,
    UnknownBody,
)
from .time import jd_to_civil, julian_day, local_sidereal_time

__all__ = [
    "EphemerisDataUnavailable",
    "HouseSystemUnavailable",
    "InvalidDateError",
    "NatalEngineError",
    "SUPPORTED_BODIES",
    "UnknownBody",
    "angular_separation",
    "canonical_name",
    "jd_to_civil",
    "julian_day",
    "local_sidereal_time",
    "normalize_degrees",
    "signed_delta",
]
