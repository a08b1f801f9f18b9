"""Relationship charts for two people.

Synastry lays both natal maps side by side and reports where the same body's
same line runs close together for both people. The composite chart is the
midpoint chart of the two, projected onto its own lines.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .bodies import CelestialBody, LineType
from .birth_data import BirthData
from .ephemeris import PlanetPosition, composite_positions
from .line_sentiment import LineSentimentClassifier, classify_line
from .lines import AstroLine, Point, filter_minor_lines, generate_lines
from .natal import natal_gst, natal_lines, natal_positions

logger = logging.getLogger(__name__)

USER = "user"
PARTNER = "partner"

OVERLAP_THRESHOLD_DEG = 10.0
HORIZON_SAMPLE_LATS = (-60, -40, -20, 0, 20, 40, 60)

_OVERLAP_LABELS: Dict[Tuple[str, str], str] = {
    ("positive", "positive"): "harmonious",
    ("difficult", "difficult"): "challenging",
    ("difficult", "positive"): "tension",
    ("neutral", "positive"): "slightly_positive",
    ("difficult", "neutral"): "slightly_challenging",
}
NEUTRAL_OVERLAP = "neutral_overlap"


@dataclass(frozen=True)
class SynastryOverlap:
    body: CelestialBody
    line_type: LineType
    classification: str
    user_sentiment: str
    partner_sentiment: str
    proximity_deg: float


@dataclass(frozen=True)
class CompositeChart:
    positions: List[PlanetPosition]
    gst: float
    lines: List[AstroLine]


def lon_distance(a: float, b: float) -> float:
    diff = abs(a - b)
    if diff > 180:
        diff = 360 - diff
    return diff


def classify_overlap(user_sentiment: str, partner_sentiment: str) -> str:
    pair = tuple(sorted((user_sentiment, partner_sentiment)))
    return _OVERLAP_LABELS.get(pair, NEUTRAL_OVERLAP)


def _nearest_to_lat(points: Sequence[Point], lat: float) -> Optional[Point]:
    if not points:
        return None
    return min(points, key=lambda p: abs(p[0] - lat))


def line_proximity(user_segments: Sequence[AstroLine], partner_segments: Sequence[AstroLine]) -> float:
    """Smallest longitude gap in degrees between two versions of one line.

    Meridian lines compare their constant longitude. Horizon curves are
    compared at a fixed set of sample latitudes.
    """

    best = math.inf
    meridian = user_segments[0].line_type in (LineType.MC, LineType.IC)
    for u in user_segments:
        for p in partner_segments:
            if meridian:
                u_lon = u.points[0][1] if u.points else 0.0
                p_lon = p.points[0][1] if p.points else 0.0
                best = min(best, lon_distance(u_lon, p_lon))
                continue
            for lat in HORIZON_SAMPLE_LATS:
                u_pt = _nearest_to_lat(u.points, lat)
                p_pt = _nearest_to_lat(p.points, lat)
                if u_pt is not None and p_pt is not None:
                    best = min(best, lon_distance(u_pt[1], p_pt[1]))
    return best


def _group(lines: Iterable[AstroLine], source_id: str) -> Dict[Tuple[CelestialBody, LineType], List[AstroLine]]:
    groups: Dict[Tuple[CelestialBody, LineType], List[AstroLine]] = {}
    for line in lines:
        if line.source_id == source_id:
            groups.setdefault((line.body, line.line_type), []).append(line)
    return groups


def find_overlaps(
    lines: Iterable[AstroLine],
    classifier: LineSentimentClassifier = classify_line,
    threshold_deg: float = OVERLAP_THRESHOLD_DEG,
) -> List[SynastryOverlap]:
    """Pair ``"user"`` and ``"partner"`` lines of the same body and line type.

    A pair is kept when its proximity is within ``threshold_deg``. Results are
    ordered closest first.
    """

    lines = list(lines)
    user_groups = _group(lines, USER)
    partner_groups = _group(lines, PARTNER)

    overlaps: List[SynastryOverlap] = []
    for (body, line_type), user_segments in user_groups.items():
        partner_segments = partner_groups.get((body, line_type))
        if not partner_segments:
            continue
        proximity = line_proximity(user_segments, partner_segments)
        if proximity > threshold_deg:
            continue
        user_sentiment = classifier(body, line_type)
        partner_sentiment = classifier(body, line_type)
        overlaps.append(
            SynastryOverlap(
                body=body,
                line_type=line_type,
                classification=classify_overlap(user_sentiment, partner_sentiment),
                user_sentiment=user_sentiment,
                partner_sentiment=partner_sentiment,
                proximity_deg=proximity,
            )
        )

    overlaps.sort(key=lambda o: o.proximity_deg)
    logger.debug("synastry_overlaps", extra={"pairs": len(user_groups), "overlaps": len(overlaps)})
    return overlaps


def synastry_lines(user: BirthData, partner: BirthData, include_minor: bool = True) -> List[AstroLine]:
    """Both natal maps, tagged ``"user"`` and ``"partner"``."""

    return filter_minor_lines(natal_lines(user, USER), include_minor) + filter_minor_lines(
        natal_lines(partner, PARTNER), include_minor
    )


def composite_chart(user: BirthData, partner: BirthData, include_minor: bool = True) -> CompositeChart:
    positions, gst = composite_positions(
        natal_positions(user), natal_positions(partner), natal_gst(user), natal_gst(partner)
    )
    lines = filter_minor_lines(generate_lines(positions, gst), include_minor)
    return CompositeChart(positions=positions, gst=gst, lines=lines)


__all__ = [
    "CompositeChart",
    "NEUTRAL_OVERLAP",
    "OVERLAP_THRESHOLD_DEG",
    "PARTNER",
    "SynastryOverlap",
    "USER",
    "classify_overlap",
    "composite_chart",
    "find_overlaps",
    "line_proximity",
    "lon_distance",
    "synastry_lines",
]
