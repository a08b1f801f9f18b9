"""Activation window scanning.

A date range is sampled at a fixed step. At each sample the transiting outer
bodies and the progressed inner bodies are compared with the natal chart, and
every hit is filed under its (moving body, natal body, aspect, source) key.
Each key's hit dates are then cut into windows wherever two consecutive hits
are more than 2.5 steps apart, so a retrograde pass that leaves orb and comes
back shows up as separate windows.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from .aspects import (
    PROGRESSION,
    PROGRESSION_BODIES,
    TRANSIT,
    TRANSIT_BODIES,
    TransitAspect,
    find_aspects,
)
from .bodies import ALL_LINE_TYPES, CelestialBody, LineType
from .birth_data import BirthData
from .config import CHALLENGING_ASPECTS, HARMONIOUS_ASPECTS, ScoringConfig, get_config
from .ephemeris import PlanetPosition, positions_at
from .errors import ScanCancelled
from .natal import natal_positions
from .progressions import progressed_positions
from .sidereal import utc_naive

logger = logging.getLogger(__name__)

WINDOW_GAP_FACTOR = 2.5

INTENSITY_ORDER = {"exact": 0, "strong": 1, "moderate": 2, "fading": 3}

ASPECT_SYMBOLS = {
    "conjunction": "☌",
    "opposition": "☍",
    "trine": "△",
    "square": "□",
    "sextile": "⚹",
}

BENEFIC_BODIES = frozenset({CelestialBody.JUPITER, CelestialBody.VENUS})
HEAVY_BODIES = frozenset(
    {CelestialBody.SATURN, CelestialBody.PLUTO, CelestialBody.URANUS, CelestialBody.MARS}
)

EVOLUTIONARY_LABELS = {
    CelestialBody.SATURN: "Structure Phase",
    CelestialBody.PLUTO: "Deep Transformation",
    CelestialBody.URANUS: "Sudden Pivot",
    CelestialBody.MARS: "Action Phase",
}

HitKey = Tuple[CelestialBody, CelestialBody, str, str]


@dataclass(frozen=True)
class ActivationWindow:
    natal_body: CelestialBody
    moving_body: CelestialBody
    aspect: str
    source: str
    start_date: date
    end_date: date
    exact_date: date
    description: str
    window_type: str  # "benefic" | "evolutionary" | "neutral"
    short_label: str
    line_types: Tuple[LineType, ...] = ALL_LINE_TYPES


def intensity(orb: float, max_orb: float) -> str:
    ratio = orb / max(max_orb, 0.5)
    if ratio < 0.1:
        return "exact"
    if ratio < 0.4:
        return "strong"
    if ratio < 0.7:
        return "moderate"
    return "fading"


def aspect_quality(aspect: str) -> str:
    if aspect in HARMONIOUS_ASPECTS:
        return "harmonious"
    if aspect in CHALLENGING_ASPECTS:
        return "challenging"
    return "neutral"


def source_label(source: str) -> str:
    return "Progressed" if source == PROGRESSION else "Transiting"


def classify_window(moving_body: CelestialBody, aspect: str) -> Tuple[str, str]:
    """Window type and short label for a moving body and aspect."""

    harmonious = aspect in HARMONIOUS_ASPECTS
    if moving_body in BENEFIC_BODIES and (harmonious or aspect == "conjunction"):
        return "benefic", "Abundance Peak" if harmonious else "Optimal Window for Flow"
    if moving_body in EVOLUTIONARY_LABELS:
        return "evolutionary", EVOLUTIONARY_LABELS[moving_body]
    return "neutral", "Activation Window"


def sample_dates(start: datetime, end: datetime, step_days: int) -> List[datetime]:
    out = []
    cur = start
    while cur <= end:
        out.append(cur)
        cur = cur + timedelta(days=step_days)
    return out


def aspects_at(
    birth: BirthData,
    natal: Sequence[PlanetPosition],
    target: datetime,
    config: ScoringConfig,
) -> List[TransitAspect]:
    """Transit hits followed by progression hits for one instant."""

    transits = find_aspects(positions_at(target), natal, TRANSIT, TRANSIT_BODIES, config)
    progressed = find_aspects(
        progressed_positions(birth, target), natal, PROGRESSION, PROGRESSION_BODIES, config
    )
    return transits + progressed


def _check_cancel(
    deadline: Optional[float],
    cancel_event: Optional[threading.Event],
    completed: int,
    total: int,
) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ScanCancelled("cancelled", completed, total)
    if deadline is not None and time.monotonic() > deadline:
        raise ScanCancelled("deadline", completed, total)


def merge_hits(key: HitKey, hits: List[Tuple[datetime, float]], step_days: int) -> List[ActivationWindow]:
    """Cut one key's (sample date, orb) hits into windows.

    A gap longer than 2.5 steps closes the open window. Within a window the
    first minimum-orb sample is the exact date.
    """

    moving, natal_body, aspect, source = key
    window_type, short_label = classify_window(moving, aspect)
    symbol = ASPECT_SYMBOLS.get(aspect, aspect)

    def close(start: datetime, end: datetime, exact: datetime) -> ActivationWindow:
        exact_iso = exact.date().isoformat()
        return ActivationWindow(
            natal_body=natal_body,
            moving_body=moving,
            aspect=aspect,
            source=source,
            start_date=start.date(),
            end_date=end.date(),
            exact_date=exact.date(),
            description=(
                f"{source_label(source)} {moving.label} {symbol} natal {natal_body.label}"
                f" (exact {exact_iso})"
            ),
            window_type=window_type,
            short_label=short_label,
        )

    ordered = sorted(hits, key=lambda h: h[0])
    windows: List[ActivationWindow] = []
    start, min_orb = ordered[0]
    prev = exact = start
    max_gap = step_days * WINDOW_GAP_FACTOR

    for when, orb in ordered[1:]:
        gap = (when - prev).total_seconds() / 86400.0
        if gap > max_gap:
            windows.append(close(start, prev, exact))
            start, exact, min_orb = when, when, orb
        elif orb < min_orb:
            min_orb, exact = orb, when
        prev = when
    windows.append(close(start, prev, exact))
    return windows


def find_activation_windows(
    birth: BirthData,
    start: datetime,
    end: datetime,
    step_days: int = 7,
    *,
    config: Optional[ScoringConfig] = None,
    max_workers: Optional[int] = None,
    deadline: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
) -> List[ActivationWindow]:
    """Scan ``start``..``end`` for transit and progression activation windows.

    Args:
        birth: Parsed birth data.
        start: First sample instant.
        end: Last instant that may be sampled (inclusive).
        step_days: Sampling cadence in days (7 for timelines, 14 for scoring).
        config: Orb table; defaults to the process-wide config.
        max_workers: When > 1, samples are computed on a thread pool.
        deadline: ``time.monotonic()`` value after which the scan stops.
        cancel_event: Event that stops the scan when set.

    Returns:
        Windows ordered by start date.

    Raises:
        ScanCancelled: When the deadline passes or the event is set.
    """

    config = config or get_config()
    natal = natal_positions(birth)
    samples = sample_dates(utc_naive(start), utc_naive(end), step_days)
    total = len(samples)

    def run(indexed: Tuple[int, datetime]) -> List[TransitAspect]:
        idx, when = indexed
        _check_cancel(deadline, cancel_event, idx, total)
        return aspects_at(birth, natal, when, config)

    t0 = time.perf_counter()
    if max_workers and max_workers > 1 and total > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            per_sample = list(pool.map(run, enumerate(samples)))
    else:
        per_sample = [run(item) for item in enumerate(samples)]

    grouped: Dict[HitKey, List[Tuple[datetime, float]]] = {}
    for when, hits in zip(samples, per_sample):
        for a in hits:
            key = (a.moving_body, a.natal_body, a.aspect, a.source)
            grouped.setdefault(key, []).append((when, a.orb))

    windows: List[ActivationWindow] = []
    for key, hits in grouped.items():
        windows.extend(merge_hits(key, hits, step_days))

    logger.debug(
        "activation_scan_complete",
        extra={
            "samples": total,
            "step_days": step_days,
            "windows": len(windows),
            "elapsed_ms": round((time.perf_counter() - t0) * 1000, 2),
        },
    )
    return sorted(windows, key=lambda w: w.start_date)


__all__ = [
    "ASPECT_SYMBOLS",
    "ActivationWindow",
    "BENEFIC_BODIES",
    "HEAVY_BODIES",
    "INTENSITY_ORDER",
    "aspect_quality",
    "aspects_at",
    "classify_window",
    "find_activation_windows",
    "intensity",
    "merge_hits",
    "sample_dates",
    "source_label",
]
