"""Nearest-line queries against a geographic point."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple, TypeVar

from .bodies import CelestialBody, LineType
from .lines import AstroLine
from .sidereal import DEG

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111
ON_LINE_KM = 30.0

INFLUENCE_BANDS = (
    (150.0, "very strong"),
    (400.0, "strong"),
    (800.0, "moderate"),
)

IMPACT_ORDER = {
    "negligible": 0,
    "mild": 1,
    "moderate": 2,
    "strong": 3,
    "very strong": 4,
}


@dataclass(frozen=True)
class NearbyLine:
    body: CelestialBody
    line_type: LineType
    distance_km: float
    influence: str
    side: str  # "on" | "east" | "west"


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    d_lat = (lat2 - lat1) * DEG
    d_lon = (lon2 - lon1) * DEG
    a = math.sin(d_lat / 2) * math.sin(d_lat / 2) + math.cos(lat1 * DEG) * math.cos(
        lat2 * DEG
    ) * math.sin(d_lon / 2) * math.sin(d_lon / 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def influence_for(distance_km: float) -> str:
    for limit, label in INFLUENCE_BANDS:
        if distance_km < limit:
            return label
    return "mild"


def side_of_line(point_lon: float, line_lon: float, distance_km: float) -> str:
    if distance_km < ON_LINE_KM:
        return "on"
    diff = point_lon - line_lon
    if diff > 180:
        diff -= 360
    if diff < -180:
        diff += 360
    return "east" if diff > 0 else "west"


def _closest_point(points: Sequence[Tuple[float, float]], lat: float, lon: float) -> Tuple[float, float]:
    min_dist = math.inf
    nearest_lon = 0.0
    for pt_lat, pt_lon in points:
        d = haversine_km(lat, lon, pt_lat, pt_lon)
        if d < min_dist:
            min_dist = d
            nearest_lon = pt_lon
    return min_dist, nearest_lon


def find_nearest_lines(
    lines: Iterable[AstroLine],
    lat: float,
    lon: float,
    max_distance_deg: float = 15,
) -> List[NearbyLine]:
    """Closest approach of each (body, line type) to the point, nearest first.

    Segments of the same line are merged; a line is reported when its closest
    sample lies within ``max_distance_deg`` (≈111 km per degree).
    """

    best: Dict[Tuple[CelestialBody, LineType], Tuple[float, float]] = {}
    for line in lines:
        dist, nearest_lon = _closest_point(line.points, lat, lon)
        key = (line.body, line.line_type)
        if key not in best or dist < best[key][0]:
            best[key] = (dist, nearest_lon)

    limit = max_distance_deg * KM_PER_DEGREE
    results = [
        NearbyLine(
            body=body,
            line_type=line_type,
            distance_km=dist,
            influence=influence_for(dist),
            side=side_of_line(lon, nearest_lon, dist),
        )
        for (body, line_type), (dist, nearest_lon) in best.items()
        if dist <= limit
    ]
    return sorted(results, key=lambda r: r.distance_km)


T = TypeVar("T")


def filter_nearby_by_impact(items: Iterable[T], hide_mild_impacts: bool) -> List[T]:
    """Drop mild and negligible influences when ``hide_mild_impacts`` is set."""

    if not hide_mild_impacts:
        return list(items)
    threshold = IMPACT_ORDER["moderate"]
    return [i for i in items if IMPACT_ORDER.get(getattr(i, "influence", ""), 0) >= threshold]


__all__ = [
    "NearbyLine",
    "filter_nearby_by_impact",
    "find_nearest_lines",
    "haversine_km",
    "influence_for",
    "side_of_line",
]
