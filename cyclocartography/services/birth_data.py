from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from typing import List, Tuple

from .errors import InputParseError


@dataclass(frozen=True)
class BirthData:
    """Birth calendar parts as entered, in local wall-clock time."""

    year: int
    month: int
    day: int
    hour: int
    minute: int
    latitude: float
    longitude: float

    @property
    def birth_date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def local_instant(self) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour, self.minute)


def _split_ints(raw: str, sep: str, count: int, what: str) -> List[int]:
    parts = (raw or "").strip().split(sep)
    if len(parts) < count:
        raise InputParseError(f"Malformed {what}: {raw!r}")
    try:
        return [int(p) for p in parts[:count]]
    except ValueError as exc:
        raise InputParseError(f"Malformed {what}: {raw!r}") from exc


def parse_date_parts(date_str: str) -> Tuple[int, int, int]:
    """Split ``YYYY-MM-DD`` into integers."""

    year, month, day = _split_ints(date_str, "-", 3, "date")
    return year, month, day


def parse_time_parts(time_str: str) -> Tuple[int, int]:
    """Split ``HH:MM`` (seconds ignored) into integers."""

    hour, minute = _split_ints(time_str, ":", 2, "time")
    return hour, minute


@lru_cache(maxsize=256)
def parse_birth(date_str: str, time_str: str, latitude: float, longitude: float) -> BirthData:
    year, month, day = parse_date_parts(date_str)
    hour, minute = parse_time_parts(time_str)
    try:
        date(year, month, day)
    except ValueError as exc:
        raise InputParseError(f"Invalid calendar date: {date_str!r}") from exc
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise InputParseError(f"Invalid clock time: {time_str!r}")
    return BirthData(year, month, day, hour, minute, float(latitude), float(longitude))


__all__ = ["BirthData", "parse_birth", "parse_date_parts", "parse_time_parts"]
