"""Astrocartography line projection.

For each body the meridian lines (MC/IC) are meridians of constant longitude;
the horizon lines (ASC/DSC) follow the hour angle at which the body rises or
sets at each latitude. Horizon polylines are split wherever they wrap across
the antimeridian so that no stored segment jumps by more than 180° between
consecutive points.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .bodies import CelestialBody, LineType, filter_minor_bodies
from .ephemeris import PlanetPosition
from .sidereal import DEG, RAD, normalize_lon

Point = Tuple[float, float]  # (latitude, longitude)

MERIDIAN_LAT_START = -89
MERIDIAN_LAT_END = 89
MERIDIAN_LAT_STEP = 2

HORIZON_LAT_START = -89.0
HORIZON_LAT_END = 89.0
POLAR_LAT_THRESHOLD = 60.0
HORIZON_COS_TOLERANCE = 1.000001


@dataclass(frozen=True)
class AstroLine:
    body: CelestialBody
    line_type: LineType
    points: Tuple[Point, ...]
    source_id: Optional[str] = None


def _round_tenth(x: float) -> float:
    return math.floor(x * 10 + 0.5) / 10


def meridian_points(longitude: float) -> List[Point]:
    return [
        (float(lat), longitude)
        for lat in range(MERIDIAN_LAT_START, MERIDIAN_LAT_END + 1, MERIDIAN_LAT_STEP)
    ]


def horizon_points(ra: float, dec: float, gst: float) -> Tuple[List[Point], List[Point]]:
    """Rising (ASC) and setting (DSC) samples for one body.

    Latitudes where the body never crosses the horizon are skipped.
    """

    asc: List[Point] = []
    dsc: List[Point] = []
    tan_dec = math.tan(dec * DEG)

    lat = HORIZON_LAT_START
    while lat <= HORIZON_LAT_END:
        cos_h = -(math.tan(lat * DEG) * tan_dec)
        if abs(cos_h) <= HORIZON_COS_TOLERANCE:
            h = math.acos(max(-1.0, min(1.0, cos_h))) * RAD
            asc.append((lat, normalize_lon(ra - gst - h)))
            dsc.append((lat, normalize_lon(ra - gst + h)))

        # finer steps near the poles where the curves bend sharply
        step = 0.5 if abs(lat) > POLAR_LAT_THRESHOLD else 1.0
        lat = _round_tenth(lat + step)

    return asc, dsc


def split_at_dateline(points: Sequence[Point]) -> List[List[Point]]:
    """Break a polyline wherever consecutive longitudes differ by more than 180°.

    A trailing single-point remainder is dropped.
    """

    segments: List[List[Point]] = []
    current: List[Point] = []
    for pt in points:
        if current and abs(pt[1] - current[-1][1]) > 180:
            segments.append(current)
            current = [pt]
        else:
            current.append(pt)

    if len(current) > 1:
        segments.append(current)
    return segments


def lines_for_position(
    position: PlanetPosition, gst: float, source_id: Optional[str] = None
) -> List[AstroLine]:
    mc_lon = normalize_lon(position.ra - gst)
    ic_lon = normalize_lon(mc_lon + 180)

    out = [
        AstroLine(position.body, LineType.MC, tuple(meridian_points(mc_lon)), source_id),
        AstroLine(position.body, LineType.IC, tuple(meridian_points(ic_lon)), source_id),
    ]

    asc, dsc = horizon_points(position.ra, position.dec, gst)
    for line_type, pts in ((LineType.ASC, asc), (LineType.DSC, dsc)):
        if len(pts) <= 2:
            continue
        for segment in split_at_dateline(pts):
            out.append(AstroLine(position.body, line_type, tuple(segment), source_id))
    return out


def generate_lines(
    positions: Iterable[PlanetPosition],
    gst: float,
    source_id: Optional[str] = None,
) -> List[AstroLine]:
    """Project every position onto MC, IC, ASC and DSC lines for sidereal time ``gst``."""

    lines: List[AstroLine] = []
    for position in positions:
        lines.extend(lines_for_position(position, gst, source_id))
    return lines


def filter_minor_lines(lines: Iterable[AstroLine], include_minor: bool) -> List[AstroLine]:
    return filter_minor_bodies(lines, include_minor)


__all__ = [
    "AstroLine",
    "filter_minor_lines",
    "generate_lines",
    "horizon_points",
    "lines_for_position",
    "meridian_points",
    "split_at_dateline",
]
