"""Secondary progressions: one day after birth stands for one year of life."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from .birth_data import BirthData
from .ephemeris import PlanetPosition, positions_at
from .sidereal import utc_naive

DAYS_PER_YEAR = 365.25


def years_elapsed(birth_date: date, target: datetime) -> float:
    """Years from local midnight of the birth date to ``target``.

    An aware ``target`` is read in UTC.
    """

    start = datetime(birth_date.year, birth_date.month, birth_date.day)
    return (utc_naive(target) - start).total_seconds() / 86400.0 / DAYS_PER_YEAR


def progressed_date(birth_date: date, target: datetime) -> date:
    """Calendar date whose chart stands in for ``target``.

    Only whole days are added: the day of month plus the elapsed years is
    truncated toward zero, so targets before birth step back a full day. The
    progressed chart is then cast at the birth clock time.
    """

    years = years_elapsed(birth_date, target)
    if birth_date.day + years > 0:
        days = math.floor(years)
    else:
        days = int(years)
    return birth_date + timedelta(days=days)


def progressed_positions(
    birth: BirthData,
    target: datetime,
    bodies: Optional[Iterable[object]] = None,
) -> List[PlanetPosition]:
    prog = progressed_date(birth.birth_date, target)
    instant = datetime(prog.year, prog.month, prog.day, birth.hour, birth.minute)
    return positions_at(instant, birth.longitude, bodies)


__all__ = ["progressed_date", "progressed_positions", "years_elapsed"]
