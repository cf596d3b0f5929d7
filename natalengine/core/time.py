"""Calendar arithmetic: civil dates, Julian days and sidereal time.

Every downstream component works on a Julian day in the UT scale. The
conversion follows Meeus' algorithm: dates on or after 1582-10-15 receive
the Gregorian correction term, earlier dates are interpreted on the
proleptic Julian calendar. The ten days removed by the reform
(1582-10-05 through 1582-10-14) do not exist and are rejected.
"""

from __future__ import annotations

import datetime as _dt
import math
from dataclasses import dataclass
from typing import Final

from .angles import normalize_degrees
from .errors import InvalidDateError

__all__ = [
    "CivilDate",
    "J2000_JD",
    "DAYS_PER_CENTURY",
    "SECONDS_PER_DAY",
    "ensure_utc",
    "greenwich_mean_sidereal_time",
    "jd_to_civil",
    "jd_to_datetime",
    "julian_centuries",
    "julian_day",
    "julian_day_from_datetime",
    "julian_millennia",
    "local_sidereal_time",
]


J2000_JD: Final[float] = 2451545.0
DAYS_PER_CENTURY: Final[float] = 36525.0
SECONDS_PER_DAY: Final[float] = 86_400.0
_MICROS_PER_DAY: Final[int] = 86_400_000_000
_GREGORIAN_START: Final[tuple[int, int, int]] = (1582, 10, 15)
_GREGORIAN_START_JDN: Final[int] = 2299161
_DAYS_IN_MONTH: Final[tuple[int, ...]] = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


@dataclass(frozen=True)
class CivilDate:
    """Calendar components of a Julian day, expressed in UTC.

    Dates before the Gregorian reform are on the Julian calendar, which is
    why this is not a :class:`datetime.datetime` (Python's calendar is
    proleptic Gregorian).
    """

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: float

    def to_datetime(self) -> _dt.datetime:
        """Return an aware UTC datetime; only valid for Gregorian dates."""

        if (self.year, self.month, self.day) < _GREGORIAN_START:
            raise InvalidDateError(
                f"{self.year:04d}-{self.month:02d}-{self.day:02d} is a Julian calendar date"
            )
        whole = int(self.second)
        micro = int(round((self.second - whole) * 1e6))
        if micro >= 1_000_000:
            whole += 1
            micro -= 1_000_000
        base = _dt.datetime(self.year, self.month, self.day, tzinfo=_dt.UTC)
        return base + _dt.timedelta(
            hours=self.hour, minutes=self.minute, seconds=whole, microseconds=micro
        )


def _as_int(name: str, value: object) -> int:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidDateError(f"{name} must be numeric, got {value!r}") from exc
    if not math.isfinite(number) or number != int(number):
        raise InvalidDateError(f"{name} must be a whole number, got {value!r}")
    return int(number)


def _is_gregorian(year: int, month: int, day: int) -> bool:
    return (year, month, day) >= _GREGORIAN_START


def _days_in_month(year: int, month: int) -> int:
    if month != 2:
        return _DAYS_IN_MONTH[month - 1]
    if year < _GREGORIAN_START[0]:
        leap = year % 4 == 0
    else:
        leap = (year % 4 == 0 and year % 100 != 0) or year % 400 == 0
    return 29 if leap else 28


def _validate(
    year: int, month: int, day: int, hour: int, minute: int, second: float, utc_offset: float
) -> None:
    if not 1 <= month <= 12:
        raise InvalidDateError(f"month {month} outside 1..12")
    limit = _days_in_month(year, month)
    if not 1 <= day <= limit:
        raise InvalidDateError(f"day {day} outside 1..{limit} for {year:04d}-{month:02d}")
    if year == 1582 and month == 10 and 5 <= day <= 14:
        raise InvalidDateError("1582-10-05..1582-10-14 were skipped by the Gregorian reform")
    if not 0 <= hour <= 23:
        raise InvalidDateError(f"hour {hour} outside 0..23")
    if not 0 <= minute <= 59:
        raise InvalidDateError(f"minute {minute} outside 0..59")
    if not math.isfinite(second) or not 0.0 <= second < 60.0:
        raise InvalidDateError(f"second {second} outside [0, 60)")
    if not math.isfinite(utc_offset) or not -14.0 <= utc_offset <= 14.0:
        raise InvalidDateError(f"UTC offset {utc_offset} outside -14..14 hours")


def julian_day(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: float = 0.0,
    utc_offset_hours: float = 0.0,
) -> float:
    """Return the UT Julian day for civil components at ``utc_offset_hours``.

    Raises
    ------
    InvalidDateError
        When the components do not form a real calendar date and time.
    """

    year = _as_int("year", year)
    month = _as_int("month", month)
    day = _as_int("day", day)
    hour = _as_int("hour", hour)
    minute = _as_int("minute", minute)
    try:
        second = float(second)
        utc_offset_hours = float(utc_offset_hours)
    except (TypeError, ValueError) as exc:
        raise InvalidDateError(f"invalid time components: {exc}") from exc
    _validate(year, month, day, hour, minute, second, utc_offset_hours)

    gregorian = _is_gregorian(year, month, day)
    y, m = year, month
    if m <= 2:
        y -= 1
        m += 12
    if gregorian:
        a = math.floor(y / 100)
        b = 2 - a + math.floor(a / 4)
    else:
        b = 0

    jd = math.floor(365.25 * (y + 4716)) + math.floor(30.6001 * (m + 1)) + day + b - 1524.5
    frac = (hour - utc_offset_hours + minute / 60.0 + second / 3600.0) / 24.0
    return jd + frac


def ensure_utc(moment: _dt.datetime) -> _dt.datetime:
    """Return ``moment`` converted to UTC; naive values are assumed UTC."""

    if moment.tzinfo is None:
        return moment.replace(tzinfo=_dt.UTC)
    return moment.astimezone(_dt.UTC)


def julian_day_from_datetime(moment: _dt.datetime) -> float:
    """Return the UT Julian day for a ``datetime`` (naive means UTC)."""

    moment = ensure_utc(moment)
    return julian_day(
        moment.year,
        moment.month,
        moment.day,
        moment.hour,
        moment.minute,
        moment.second + moment.microsecond / 1e6,
    )


def jd_to_civil(jd: float) -> CivilDate:
    """Invert :func:`julian_day` for a UT Julian day (``jd >= 0``)."""

    jd = float(jd)
    if not math.isfinite(jd) or jd < 0.0:
        raise InvalidDateError(f"Julian day {jd!r} outside the supported range")

    z = math.floor(jd + 0.5)
    micros = int(round((jd + 0.5 - z) * _MICROS_PER_DAY))
    if micros >= _MICROS_PER_DAY:
        z += 1
        micros -= _MICROS_PER_DAY

    if z < _GREGORIAN_START_JDN:
        a = z
    else:
        alpha = math.floor((z - 1867216.25) / 36524.25)
        a = z + 1 + alpha - math.floor(alpha / 4)
    b = a + 1524
    c = math.floor((b - 122.1) / 365.25)
    d = math.floor(365.25 * c)
    e = math.floor((b - d) / 30.6001)

    day = int(b - d - math.floor(30.6001 * e))
    month = int(e - 1 if e < 14 else e - 13)
    year = int(c - 4716 if month > 2 else c - 4715)

    hours, rem = divmod(micros, 3_600_000_000)
    minutes, rem = divmod(rem, 60_000_000)
    return CivilDate(year, month, day, int(hours), int(minutes), rem / 1e6)


def jd_to_datetime(jd: float) -> _dt.datetime:
    """Return the aware UTC datetime for a Gregorian-era Julian day."""

    return jd_to_civil(jd).to_datetime()


def julian_centuries(jd: float) -> float:
    """Julian centuries elapsed since J2000.0."""

    return (float(jd) - J2000_JD) / DAYS_PER_CENTURY


def julian_millennia(jd: float) -> float:
    """Julian millennia elapsed since J2000.0 (the VSOP87 time argument)."""

    return julian_centuries(jd) / 10.0


def greenwich_mean_sidereal_time(jd: float) -> float:
    """Greenwich mean sidereal time in degrees, ``[0, 360)``."""

    t = julian_centuries(jd)
    gmst = (
        280.46061837
        + 360.98564736629 * (float(jd) - J2000_JD)
        + 0.000387933 * t * t
        - t * t * t / 38_710_000.0
    )
    return normalize_degrees(gmst)


def local_sidereal_time(jd: float, longitude_deg: float) -> float:
    """Local mean sidereal time for an east-positive ``longitude_deg``."""

    return normalize_degrees(greenwich_mean_sidereal_time(jd) + float(longitude_deg))
