"""Time and angle helpers: Julian day, sidereal time and obliquity."""

from __future__ import annotations

import calendar
import math
from datetime import datetime, timezone
from typing import NamedTuple, Optional

DEG = math.pi / 180.0
RAD = 180.0 / math.pi

J2000 = 2451545.0
DAYS_PER_CENTURY = 36525.0


class CalendarParts(NamedTuple):
    year: int
    month: int
    day: int
    hour: int
    minute: int

    @classmethod
    def from_datetime(cls, dt: datetime) -> "CalendarParts":
        dt = utc_naive(dt)
        return cls(dt.year, dt.month, dt.day, dt.hour, dt.minute)

    @property
    def fractional_hour(self) -> float:
        return self.hour + self.minute / 60


def utc_naive(dt: Optional[datetime] = None) -> datetime:
    """Naive UTC instant; now when ``dt`` is omitted.

    Aware datetimes are converted to UTC. Naive ones are returned unchanged.
    """

    if dt is None:
        return datetime.now(timezone.utc).replace(tzinfo=None)
    if dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def normalize_angle(a: float) -> float:
    """Wrap an angle into [0, 360)."""

    a = math.fmod(a, 360.0)
    if a < 0:
        a += 360.0
    return a


def normalize_lon(a: float) -> float:
    """Wrap a longitude into [-180, 180]."""

    while a > 180:
        a -= 360
    while a < -180:
        a += 360
    return a


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def julian_day(year: int, month: int, day: int, hour: float) -> float:
    """Gregorian calendar date to Julian day.

    January and February count as months 13 and 14 of the previous year.
    """

    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    return (
        math.floor(365.25 * (year + 4716))
        + math.floor(30.6001 * (month + 1))
        + day
        + hour / 24
        + b
        - 1524.5
    )


def centuries_since_j2000(jd: float) -> float:
    return (jd - J2000) / DAYS_PER_CENTURY


def greenwich_sidereal_time(jd: float) -> float:
    """Greenwich mean sidereal time in degrees, wrapped into [0, 360)."""

    t = centuries_since_j2000(jd)
    gst = (
        280.46061837
        + 360.98564736629 * (jd - J2000)
        + 0.000387933 * t * t
        - (t * t * t) / 38710000.0
    )
    return normalize_angle(gst)


def obliquity_of_ecliptic(t: float) -> float:
    return 23.439291 - 0.0130042 * t - 1.64e-7 * t * t + 5.04e-7 * t * t * t


def estimate_timezone_offset(longitude: float) -> int:
    """Whole-hour UTC offset guessed from longitude (15° per hour).

    No timezone database is consulted; the timing of every derived aspect is
    calibrated against this approximation.
    """

    return round_half_up(longitude / 15)


def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def local_to_utc(
    year: int, month: int, day: int, hour: int, minute: int, tz_offset: int
) -> CalendarParts:
    """Shift a local wall-clock time by ``tz_offset`` hours, rolling the date once."""

    utc_hour = hour - tz_offset
    utc_day, utc_month, utc_year = day, month, year

    if utc_hour >= 24:
        utc_hour -= 24
        utc_day += 1
        if utc_day > _days_in_month(utc_year, utc_month):
            utc_day = 1
            utc_month += 1
            if utc_month > 12:
                utc_month = 1
                utc_year += 1
    elif utc_hour < 0:
        utc_hour += 24
        utc_day -= 1
        if utc_day < 1:
            utc_month -= 1
            if utc_month < 1:
                utc_month = 12
                utc_year -= 1
            utc_day = _days_in_month(utc_year, utc_month)

    return CalendarParts(utc_year, utc_month, utc_day, utc_hour, minute)


def to_utc_parts(
    parts: CalendarParts, birth_longitude: Optional[float] = None
) -> CalendarParts:
    """Apply the longitude-based offset when a birth longitude is supplied."""

    if birth_longitude is None:
        return parts
    offset = estimate_timezone_offset(birth_longitude)
    return local_to_utc(*parts, offset)


def julian_day_for(parts: CalendarParts, birth_longitude: Optional[float] = None) -> float:
    utc = to_utc_parts(parts, birth_longitude)
    return julian_day(utc.year, utc.month, utc.day, utc.fractional_hour)


def gst_at(instant: datetime, birth_longitude: Optional[float] = None) -> float:
    """Greenwich sidereal time for a calendar instant.

    With ``birth_longitude`` the instant is read as local time and converted
    with :func:`estimate_timezone_offset`; otherwise it is taken as UTC.
    """

    jd = julian_day_for(CalendarParts.from_datetime(instant), birth_longitude)
    return greenwich_sidereal_time(jd)


__all__ = [
    "CalendarParts",
    "DEG",
    "RAD",
    "centuries_since_j2000",
    "estimate_timezone_offset",
    "greenwich_sidereal_time",
    "gst_at",
    "julian_day",
    "julian_day_for",
    "local_to_utc",
    "normalize_angle",
    "normalize_lon",
    "obliquity_of_ecliptic",
    "round_half_up",
    "to_utc_parts",
    "utc_naive",
]
