"""Tuning tables for aspect detection and location scoring.

The orb multipliers and favourability weights are hand-tuned. They are kept
together in :class:`ScoringConfig` so callers can swap the whole table per
call, or point ``CYCLO_CONFIG_PATH`` at a JSON file of overrides.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from .bodies import CelestialBody, lookup_body

logger = logging.getLogger(__name__)

B = CelestialBody


@dataclass(frozen=True)
class AspectDef:
    name: str
    angle: float
    orb: float
    strength: float


DEFAULT_ASPECTS: Tuple[AspectDef, ...] = (
    AspectDef("conjunction", 0.0, 8.0, 1.0),
    AspectDef("opposition", 180.0, 7.0, 0.9),
    AspectDef("trine", 120.0, 6.0, 0.7),
    AspectDef("square", 90.0, 6.0, 0.85),
    AspectDef("sextile", 60.0, 4.0, 0.5),
)

HARMONIOUS_ASPECTS = frozenset({"trine", "sextile"})
CHALLENGING_ASPECTS = frozenset({"square", "opposition"})


def _frozen(mapping: Mapping[Any, float]) -> Mapping[Any, float]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ScoringConfig:
    aspects: Tuple[AspectDef, ...] = DEFAULT_ASPECTS

    # Slow bodies stay in orb for years, so their orbs are tightened
    transit_orb_multipliers: Mapping[CelestialBody, float] = field(
        default_factory=lambda: _frozen(
            {B.PLUTO: 0.35, B.NEPTUNE: 0.5, B.URANUS: 0.55, B.SATURN: 0.8, B.JUPITER: 1.0}
        )
    )
    transit_default_multiplier: float = 1.0

    # Progressed inner bodies move about a degree a year; the Moon about 13
    progression_orb_multipliers: Mapping[CelestialBody, float] = field(
        default_factory=lambda: _frozen(
            {B.MOON: 0.6, B.SUN: 0.15, B.MERCURY: 0.2, B.VENUS: 0.15, B.MARS: 0.15}
        )
    )
    progression_default_multiplier: float = 0.2

    # Reference orb used for point-in-time intensity (the conjunction orb)
    intensity_reference_orb: float = 8.0

    transit_favorability: Mapping[CelestialBody, float] = field(
        default_factory=lambda: _frozen(
            {
                B.JUPITER: 1.2,
                B.VENUS: 1.0,
                B.SUN: 0.8,
                B.MOON: 0.5,
                B.MERCURY: 0.3,
                B.MARS: -1.0,
                B.SATURN: -0.9,
                B.URANUS: -0.4,
                B.NEPTUNE: -0.3,
                B.PLUTO: -0.6,
            }
        )
    )
    aspect_favorability: Mapping[str, float] = field(
        default_factory=lambda: _frozen(
            {"trine": 1.1, "sextile": 0.9, "conjunction": 0.5, "square": -1.1, "opposition": -0.8}
        )
    )
    progression_bonus: float = 0.15
    best_visit_threshold: float = 1.2

    # Proximity decay: influence halves every ~310 km
    proximity_half_distance_km: float = 310.0
    proximity_decay: float = 0.693
    synthesis_top_n: int = 12

    def orb_multiplier(self, body: CelestialBody, source: str) -> float:
        if source == "progression":
            return self.progression_orb_multipliers.get(body, self.progression_default_multiplier)
        return self.transit_orb_multipliers.get(body, self.transit_default_multiplier)

    def effective_max_orb(self, body: CelestialBody, source: str) -> float:
        return self.intensity_reference_orb * self.orb_multiplier(body, source)

    def aspect_def(self, name: str) -> Optional[AspectDef]:
        for a in self.aspects:
            if a.name == name:
                return a
        return None


DEFAULT_CONFIG = ScoringConfig()

_BODY_TABLES = {
    "transit_orb_multipliers",
    "progression_orb_multipliers",
    "transit_favorability",
}


def _coerce_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(ScoringConfig)}
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            logger.warning("scoring_config_unknown_key", extra={"key": key})
            continue
        if key in _BODY_TABLES:
            table = {}
            for name, weight in dict(value).items():
                body = lookup_body(name)
                if body is None:
                    logger.warning("scoring_config_unknown_body", extra={"key": key, "body": name})
                    continue
                table[body] = float(weight)
            out[key] = _frozen(table)
        elif key == "aspect_favorability":
            out[key] = _frozen({str(k): float(v) for k, v in dict(value).items()})
        elif key == "aspects":
            out[key] = tuple(
                AspectDef(str(a["name"]), float(a["angle"]), float(a["orb"]), float(a.get("strength", 1.0)))
                for a in value
            )
        elif key == "synthesis_top_n":
            out[key] = int(value)
        else:
            out[key] = float(value)
    return out


def config_from_mapping(raw: Mapping[str, Any], base: ScoringConfig = DEFAULT_CONFIG) -> ScoringConfig:
    """Return ``base`` with the given top-level tables replaced."""

    return replace(base, **_coerce_overrides(dict(raw)))


def load_config(path: str | os.PathLike[str]) -> ScoringConfig:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Scoring config not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        data = json.load(f) or {}
    return config_from_mapping(data)


@lru_cache(maxsize=1)
def get_config() -> ScoringConfig:
    """Process-wide config: ``CYCLO_CONFIG_PATH`` overrides, else the defaults."""

    path = os.getenv("CYCLO_CONFIG_PATH")
    if not path:
        return DEFAULT_CONFIG
    logger.info("scoring_config_loaded", extra={"path": path})
    return load_config(path)


def env_int(name: str, default: Optional[int] = None) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def env_float(name: str, default: Optional[float] = None) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


__all__ = [
    "AspectDef",
    "CHALLENGING_ASPECTS",
    "DEFAULT_ASPECTS",
    "DEFAULT_CONFIG",
    "HARMONIOUS_ASPECTS",
    "ScoringConfig",
    "config_from_mapping",
    "env_float",
    "env_int",
    "get_config",
    "load_config",
]
