"""Location-level views of the activation engine.

Combines natal line proximity with current aspect hits and scanned activation
windows to answer three questions: what is active right now, what is active
for one city (and when to visit), and which cities light up over a range.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .activation_windows import (
    ASPECT_SYMBOLS,
    BENEFIC_BODIES,
    HEAVY_BODIES,
    INTENSITY_ORDER,
    ActivationWindow,
    aspect_quality,
    aspects_at,
    find_activation_windows,
    intensity,
    source_label,
)
from .aspects import TransitAspect
from .bodies import ALL_LINE_TYPES, CelestialBody, LineType
from .birth_data import BirthData
from .config import ScoringConfig, get_config
from .errors import ScanCancelled
from .line_sentiment import LineSentimentClassifier, classify_line, sentiment_score
from .lines import AstroLine
from .natal import natal_lines, natal_positions
from .proximity import NearbyLine, filter_nearby_by_impact, find_nearest_lines
from .sidereal import utc_naive

logger = logging.getLogger(__name__)

CITY_RADIUS_DEG = 15
IMPORTANT_CITY_RADIUS_DEG = 10
CITY_LOOKAHEAD_DAYS = 365
SCORING_STEP_DAYS = 14
TIMELINE_STEP_DAYS = 7

SYNTHESIS_RANGES = {"1m": 31, "3m": 92, "1y": 365}
BENEFIC_ASPECTS = frozenset({"trine", "sextile", "conjunction"})

QUALITY_PHRASES = {
    "harmonious": "supportive, flowing energy",
    "challenging": "activating tension and growth",
    "neutral": "powerful focus and intensity",
}


@dataclass(frozen=True)
class Location:
    name: str
    country: str
    lat: float
    lon: float


@dataclass(frozen=True)
class LineActivation:
    natal_body: CelestialBody
    moving_body: CelestialBody
    aspect: str
    source: str
    orb: float
    applying: bool
    intensity: str
    summary: str
    line_types: Tuple[LineType, ...] = ALL_LINE_TYPES


@dataclass(frozen=True)
class CityActivation:
    city_name: str
    active_aspects: List[LineActivation]
    next_window: Optional[ActivationWindow]
    overall_strength: str  # "peak" | "active" | "building" | "quiet"
    best_visit_window: Optional[ActivationWindow]
    nearby_lines: List[NearbyLine] = field(default_factory=list)


@dataclass(frozen=True)
class SynthesisCity:
    name: str
    country: str
    lat: float
    lon: float
    score: float
    top_window: Optional[ActivationWindow]
    window_count: int


@dataclass(frozen=True)
class TransitSynthesis:
    optimal: List[SynthesisCity]
    intense: List[SynthesisCity]


@dataclass(frozen=True)
class ImportantDate:
    date: date
    title: str
    description: str
    affected_cities: List[str]
    significance: str  # "major" | "moderate" | "minor"
    category: str  # "love" | "career" | "growth" | "caution" | "travel"


def activation_summary(a: TransitAspect) -> str:
    phase = "applying" if a.applying else "separating"
    quality = QUALITY_PHRASES[aspect_quality(a.aspect)]
    symbol = ASPECT_SYMBOLS.get(a.aspect, a.aspect)
    return (
        f"{source_label(a.source)} {a.moving_body.label} {symbol} your natal "
        f"{a.natal_body.label}: {quality} ({phase}, orb {a.orb:.1f}°)"
    )


def _activation_from(a: TransitAspect, config: ScoringConfig) -> LineActivation:
    return LineActivation(
        natal_body=a.natal_body,
        moving_body=a.moving_body,
        aspect=a.aspect,
        source=a.source,
        orb=a.orb,
        applying=a.applying,
        intensity=intensity(a.orb, config.effective_max_orb(a.moving_body, a.source)),
        summary=activation_summary(a),
    )


def get_current_activations(
    birth: BirthData,
    target: datetime,
    config: Optional[ScoringConfig] = None,
) -> List[LineActivation]:
    """Transit and progression hits active at ``target``, strongest first.

    One entry per (moving body, natal body, aspect, source), ordered by
    intensity band and then by orb.
    """

    config = config or get_config()
    hits = aspects_at(birth, natal_positions(birth), target, config)

    seen: Set[Tuple[CelestialBody, CelestialBody, str, str]] = set()
    activations: List[LineActivation] = []
    for a in hits:
        key = (a.moving_body, a.natal_body, a.aspect, a.source)
        if key in seen:
            continue
        seen.add(key)
        activations.append(_activation_from(a, config))

    return sorted(activations, key=lambda x: (INTENSITY_ORDER[x.intensity], x.orb))


def overall_strength(activations: Sequence[LineActivation]) -> str:
    if any(a.intensity == "exact" for a in activations):
        return "peak"
    if any(a.intensity == "strong" for a in activations):
        return "active"
    if activations:
        return "building"
    return "quiet"


def local_sentiment(
    nearby: Iterable[NearbyLine], sentiment: LineSentimentClassifier
) -> Dict[CelestialBody, int]:
    """Strongest-magnitude line tone per natal body among the nearby lines."""

    out: Dict[CelestialBody, int] = {}
    for line in nearby:
        score = sentiment_score(sentiment(line.body, line.line_type))
        prev = out.get(line.body)
        if prev is None or abs(score) > abs(prev):
            out[line.body] = score
    return out


def visit_score(
    window: ActivationWindow,
    natal_tone: Dict[CelestialBody, int],
    config: ScoringConfig,
) -> float:
    score = (
        natal_tone.get(window.natal_body, 0)
        + config.transit_favorability.get(window.moving_body, 0)
        + config.aspect_favorability.get(window.aspect, 0)
    )
    if window.source == "progression":
        score += config.progression_bonus
    return score


def best_visit_window(
    windows: Sequence[ActivationWindow],
    natal_tone: Dict[CelestialBody, int],
    config: ScoringConfig,
) -> Optional[ActivationWindow]:
    """Highest-scoring window, or ``None`` when nothing clears the threshold."""

    scored = sorted(
        ((visit_score(w, natal_tone, config), w) for w in windows),
        key=lambda pair: pair[0],
        reverse=True,
    )
    for score, window in scored:
        if score >= config.best_visit_threshold:
            return window
    return None


def get_city_activation(
    city_name: str,
    city_lat: float,
    city_lon: float,
    birth: BirthData,
    target: datetime,
    *,
    sentiment: LineSentimentClassifier = classify_line,
    hide_mild_impacts: bool = False,
    config: Optional[ScoringConfig] = None,
    lines: Optional[Sequence[AstroLine]] = None,
    max_workers: Optional[int] = None,
    deadline: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
) -> CityActivation:
    """Activation state of one city for ``target`` and the following year.

    Args:
        city_name: Display name echoed back.
        city_lat: City latitude.
        city_lon: City longitude.
        birth: Parsed birth data.
        target: Query instant.
        sentiment: Line tone lookup used for the visit recommendation.
        hide_mild_impacts: Ignore lines whose influence is only mild.
        config: Tuning tables; defaults to the process-wide config.
        lines: Precomputed natal lines, recomputed when omitted.

    Returns:
        A :class:`CityActivation`; ``best_visit_window`` is ``None`` unless a
        window scores at least the configured threshold.
    """

    config = config or get_config()
    natal = list(lines) if lines is not None else natal_lines(birth)
    nearby = filter_nearby_by_impact(
        find_nearest_lines(natal, city_lat, city_lon, CITY_RADIUS_DEG), hide_mild_impacts
    )
    nearby_bodies = {line.body for line in nearby}
    tone = local_sentiment(nearby, sentiment)

    active = [
        a for a in get_current_activations(birth, target, config) if a.natal_body in nearby_bodies
    ]

    windows = find_activation_windows(
        birth,
        target,
        target + timedelta(days=CITY_LOOKAHEAD_DAYS),
        SCORING_STEP_DAYS,
        config=config,
        max_workers=max_workers,
        deadline=deadline,
        cancel_event=cancel_event,
    )
    city_windows = [w for w in windows if w.natal_body in nearby_bodies]

    result = CityActivation(
        city_name=city_name,
        active_aspects=active,
        next_window=city_windows[0] if city_windows else None,
        overall_strength=overall_strength(active),
        best_visit_window=best_visit_window(city_windows, tone, config),
        nearby_lines=nearby,
    )
    logger.info(
        "city_activation_scored",
        extra={
            "city": city_name,
            "nearby_lines": len(nearby),
            "active": len(active),
            "windows": len(city_windows),
            "strength": result.overall_strength,
        },
    )
    return result


def proximity_factor(distance_km: float, config: ScoringConfig) -> float:
    return math.exp(-config.proximity_decay * distance_km / config.proximity_half_distance_km)


@dataclass
class _CityScore:
    score: float = 0.0
    best: Optional[ActivationWindow] = None
    best_score: float = 0.0
    count: int = 0

    def add(self, s: float, window: ActivationWindow) -> None:
        self.score += s
        self.count += 1
        if s > self.best_score:
            self.best_score = s
            self.best = window


def score_city(
    city: Location,
    windows: Sequence[ActivationWindow],
    lines: Sequence[AstroLine],
    config: ScoringConfig,
    hide_mild_impacts: bool = False,
) -> Tuple[Optional[SynthesisCity], Optional[SynthesisCity]]:
    """Optimal and intense aggregate scores for one city (``None`` when zero)."""

    nearby = filter_nearby_by_impact(
        find_nearest_lines(lines, city.lat, city.lon, CITY_RADIUS_DEG), hide_mild_impacts
    )
    # nearby is sorted by distance, so the first hit per body is its closest line
    closest: Dict[CelestialBody, float] = {}
    for line in nearby:
        closest.setdefault(line.body, line.distance_km)

    benefic, heavy = _CityScore(), _CityScore()
    for w in windows:
        if w.natal_body not in closest:
            continue
        proximity = proximity_factor(closest[w.natal_body], config)
        transit_weight = config.transit_favorability.get(w.moving_body, 0)
        aspect_weight = config.aspect_favorability.get(w.aspect, 0)

        if w.moving_body in BENEFIC_BODIES and w.aspect in BENEFIC_ASPECTS:
            benefic.add((transit_weight + aspect_weight + 1) * proximity, w)
        if w.moving_body in HEAVY_BODIES:
            heavy.add((abs(transit_weight) + abs(aspect_weight) + 1) * proximity, w)

    def to_city(agg: _CityScore) -> Optional[SynthesisCity]:
        if agg.score <= 0:
            return None
        return SynthesisCity(
            name=city.name,
            country=city.country,
            lat=city.lat,
            lon=city.lon,
            score=agg.score,
            top_window=agg.best,
            window_count=agg.count,
        )

    return to_city(benefic), to_city(heavy)


def get_transit_synthesis(
    birth: BirthData,
    range_key: str,
    cities: Sequence[Location],
    *,
    start: Optional[datetime] = None,
    hide_mild_impacts: bool = False,
    config: Optional[ScoringConfig] = None,
    max_workers: Optional[int] = None,
    deadline: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
) -> TransitSynthesis:
    """Rank cities for benefic ("optimal") and heavy ("intense") activity.

    Windows are scanned over ``range_key`` ("1m", "3m" or "1y") from ``start``
    (now when omitted) at a 14-day step. Each list holds at most the
    configured top N cities, highest score first.
    """

    if range_key not in SYNTHESIS_RANGES:
        raise ValueError(f"Unknown synthesis range: {range_key!r}")
    config = config or get_config()
    start = utc_naive(start)
    end = start + timedelta(days=SYNTHESIS_RANGES[range_key])

    windows = find_activation_windows(
        birth,
        start,
        end,
        SCORING_STEP_DAYS,
        config=config,
        max_workers=max_workers,
        deadline=deadline,
        cancel_event=cancel_event,
    )
    lines = natal_lines(birth)

    def run(city: Location) -> Tuple[Optional[SynthesisCity], Optional[SynthesisCity]]:
        if cancel_event is not None and cancel_event.is_set():
            raise ScanCancelled("cancelled")
        if deadline is not None and time.monotonic() > deadline:
            raise ScanCancelled("deadline")
        return score_city(city, windows, lines, config, hide_mild_impacts)

    if max_workers and max_workers > 1 and len(cities) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            scored = list(pool.map(run, cities))
    else:
        scored = [run(c) for c in cities]

    optimal = [o for o, _ in scored if o is not None]
    intense = [i for _, i in scored if i is not None]
    top_n = config.synthesis_top_n

    logger.info(
        "transit_synthesis_complete",
        extra={
            "range": range_key,
            "cities": len(cities),
            "windows": len(windows),
            "optimal": len(optimal),
            "intense": len(intense),
        },
    )
    return TransitSynthesis(
        optimal=sorted(optimal, key=lambda c: c.score, reverse=True)[:top_n],
        intense=sorted(intense, key=lambda c: c.score, reverse=True)[:top_n],
    )


SIGNIFICANT_ASPECTS = frozenset({"conjunction", "opposition", "trine"})
MAJOR_TRANSITS = frozenset(
    {
        CelestialBody.JUPITER,
        CelestialBody.SATURN,
        CelestialBody.URANUS,
        CelestialBody.NEPTUNE,
        CelestialBody.PLUTO,
    }
)
MAX_DATES_PER_MONTH = 3
MAX_AFFECTED_CITIES = 5


def _date_category(window: ActivationWindow, quality: str) -> str:
    category = "growth"
    if window.natal_body in (CelestialBody.VENUS, CelestialBody.MOON):
        category = "love"
    if window.natal_body in (CelestialBody.SUN, CelestialBody.JUPITER, CelestialBody.SATURN):
        category = "career"
    if quality == "challenging":
        category = "caution"
    if window.natal_body == CelestialBody.JUPITER and quality == "harmonious":
        category = "travel"
    return category


def _date_significance(window: ActivationWindow) -> str:
    if window.aspect == "conjunction":
        return "major"
    if window.aspect == "opposition" or window.moving_body in MAJOR_TRANSITS:
        return "moderate"
    return "minor"


def _date_copy(window: ActivationWindow, quality: str) -> Tuple[str, str]:
    moving = window.moving_body.label
    natal = window.natal_body.label
    theme = natal.lower()
    if quality == "harmonious":
        title = f"{moving} activates your {natal} lines: opportunity window"
        tail = f"This is a favorable period for activities related to your {theme} energy."
    elif quality == "challenging":
        title = f"{moving} challenges your {natal} lines: growth period"
        tail = f"Expect some friction in {theme}-related areas, but this tension drives meaningful growth."
    else:
        title = f"{moving} conjuncts your {natal} lines: intense focus"
        tail = f"A concentrated period of {theme} themes. Pay close attention to what comes up."
    description = (
        f"From {window.start_date.isoformat()} to {window.end_date.isoformat()}, "
        f"{window.description}. {tail}"
    )
    return title, description


def find_important_dates(
    birth: BirthData,
    start: datetime,
    end: datetime,
    cities: Optional[Sequence[Location]] = None,
    *,
    config: Optional[ScoringConfig] = None,
    max_workers: Optional[int] = None,
    deadline: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
) -> List[ImportantDate]:
    """Notable window peaks between ``start`` and ``end``.

    Keeps conjunctions, oppositions and trines (transit windows only from the
    outer bodies) and allows at most three dates per calendar month unless the
    date is major.
    """

    windows = find_activation_windows(
        birth,
        start,
        end,
        TIMELINE_STEP_DAYS,
        config=config,
        max_workers=max_workers,
        deadline=deadline,
        cancel_event=cancel_event,
    )
    lines = natal_lines(birth) if cities else []

    dates: List[ImportantDate] = []
    for w in windows:
        if w.aspect not in SIGNIFICANT_ASPECTS:
            continue
        if w.source == "transit" and w.moving_body not in MAJOR_TRANSITS:
            continue

        quality = aspect_quality(w.aspect)
        affected: List[str] = []
        if cities:
            affected = [
                c.name
                for c in cities
                if any(
                    n.body == w.natal_body
                    for n in find_nearest_lines(lines, c.lat, c.lon, IMPORTANT_CITY_RADIUS_DEG)
                )
            ][:MAX_AFFECTED_CITIES]

        title, description = _date_copy(w, quality)
        dates.append(
            ImportantDate(
                date=w.exact_date,
                title=title,
                description=description,
                affected_cities=affected,
                significance=_date_significance(w),
                category=_date_category(w, quality),
            )
        )

    month_counts: Dict[str, int] = {}
    kept: List[ImportantDate] = []
    for d in dates:
        month = d.date.isoformat()[:7]
        count = month_counts.get(month, 0)
        if d.significance == "major" or count < MAX_DATES_PER_MONTH:
            month_counts[month] = count + 1
            kept.append(d)
    return kept


__all__ = [
    "CityActivation",
    "ImportantDate",
    "LineActivation",
    "Location",
    "SYNTHESIS_RANGES",
    "SynthesisCity",
    "TransitSynthesis",
    "activation_summary",
    "best_visit_window",
    "find_important_dates",
    "get_city_activation",
    "get_current_activations",
    "get_transit_synthesis",
    "local_sentiment",
    "overall_strength",
    "proximity_factor",
    "score_city",
    "visit_score",
]
