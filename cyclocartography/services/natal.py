"""Natal chart helpers shared by the scanners and scoring engine."""

from __future__ import annotations

from typing import List, Optional

from .birth_data import BirthData
from .ephemeris import PlanetPosition, positions_at
from .lines import AstroLine, generate_lines
from .sidereal import gst_at


def natal_positions(birth: BirthData) -> List[PlanetPosition]:
    return positions_at(birth.local_instant, birth.longitude)


def natal_gst(birth: BirthData) -> float:
    return gst_at(birth.local_instant, birth.longitude)


def natal_lines(birth: BirthData, source_id: Optional[str] = None) -> List[AstroLine]:
    return generate_lines(natal_positions(birth), natal_gst(birth), source_id)


__all__ = ["natal_gst", "natal_lines", "natal_positions"]
