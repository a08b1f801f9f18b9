"""Default positive / difficult / neutral tone for each natal line.

Scoring takes the classifier as an injected callable; this table is what is
used when the caller does not supply one.
"""

from __future__ import annotations

from typing import Callable, Dict, FrozenSet

from .bodies import CelestialBody, LineType

LineSentimentClassifier = Callable[[CelestialBody, LineType], str]

POSITIVE = "positive"
DIFFICULT = "difficult"
NEUTRAL = "neutral"

B = CelestialBody
L = LineType
_ALL: FrozenSet[LineType] = frozenset(L)

# body -> (positive line types, difficult line types); anything else is neutral
_TABLE: Dict[CelestialBody, tuple] = {
    B.VENUS: (_ALL, frozenset()),
    B.JUPITER: (_ALL, frozenset()),
    B.SATURN: (frozenset(), frozenset({L.IC, L.ASC, L.DSC})),
    B.PLUTO: (frozenset(), frozenset({L.ASC, L.DSC})),
    B.SUN: (frozenset({L.MC, L.ASC}), frozenset()),
    B.MOON: (frozenset({L.IC, L.ASC}), frozenset()),
    B.MARS: (frozenset(), frozenset({L.ASC, L.DSC, L.MC})),
    B.NEPTUNE: (frozenset(), frozenset({L.ASC, L.IC})),
    B.NORTH_NODE: (_ALL, frozenset()),
}


def classify_line(body: CelestialBody, line_type: LineType) -> str:
    positive, difficult = _TABLE.get(body, (frozenset(), frozenset()))
    if line_type in positive:
        return POSITIVE
    if line_type in difficult:
        return DIFFICULT
    return NEUTRAL


def sentiment_score(sentiment: str) -> int:
    if sentiment == POSITIVE:
        return 1
    if sentiment == DIFFICULT:
        return -1
    return 0


__all__ = [
    "DIFFICULT",
    "LineSentimentClassifier",
    "NEUTRAL",
    "POSITIVE",
    "classify_line",
    "sentiment_score",
]
