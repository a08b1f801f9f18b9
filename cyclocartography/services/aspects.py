from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .bodies import CLASSICAL_BODIES, CelestialBody
from .config import DEFAULT_CONFIG, ScoringConfig
from .ephemeris import PlanetPosition
from .sidereal import normalize_angle

TRANSIT = "transit"
PROGRESSION = "progression"

# Slow bodies are followed by transit, fast ones by secondary progression
TRANSIT_BODIES = (
    CelestialBody.JUPITER,
    CelestialBody.SATURN,
    CelestialBody.URANUS,
    CelestialBody.NEPTUNE,
    CelestialBody.PLUTO,
)
PROGRESSION_BODIES = (
    CelestialBody.SUN,
    CelestialBody.MOON,
    CelestialBody.MERCURY,
    CelestialBody.VENUS,
    CelestialBody.MARS,
)
NATAL_TARGETS = CLASSICAL_BODIES


@dataclass(frozen=True)
class TransitAspect:
    moving_body: CelestialBody
    natal_body: CelestialBody
    aspect: str
    source: str
    orb: float
    applying: bool
    moving_lon: float
    natal_lon: float


def signed_delta(a: float, b: float) -> float:
    """Shortest signed difference ``a - b`` in degrees, within [-180, 180]."""

    diff = normalize_angle(a) - normalize_angle(b)
    if diff > 180:
        diff -= 360
    if diff < -180:
        diff += 360
    return diff


def angular_separation(a: float, b: float) -> float:
    """Return the minimal angular distance between two longitudes (0–180)."""

    return abs(signed_delta(a, b))


def is_applying(moving_lon: float, natal_lon: float, aspect_angle: float, max_orb: float) -> bool:
    """Whether the moving body still trails the exact aspect point.

    The exact point is taken as ``natal + angle``; a moving longitude up to
    ``max_orb`` behind it counts as applying.
    """

    exact_lon = normalize_angle(natal_lon + aspect_angle)
    current = signed_delta(moving_lon, exact_lon)
    return -max_orb < current < 0


def find_aspects(
    moving: Iterable[PlanetPosition],
    natal: Sequence[PlanetPosition],
    source: str,
    body_filter: Optional[Iterable[CelestialBody]] = None,
    config: ScoringConfig = DEFAULT_CONFIG,
    natal_targets: Iterable[CelestialBody] = NATAL_TARGETS,
) -> List[TransitAspect]:
    """Aspects between moving (transit or progressed) and natal positions.

    Each moving body's base orbs are scaled by its multiplier for ``source``.
    A progressed body is never compared with its own natal place. Results are
    ordered tightest orb first.
    """

    if body_filter is None:
        body_filter = TRANSIT_BODIES if source == TRANSIT else PROGRESSION_BODIES
    allowed = set(body_filter)
    targets = set(natal_targets)

    res: List[TransitAspect] = []
    for m in moving:
        if m.body not in allowed:
            continue
        multiplier = config.orb_multiplier(m.body, source)

        for n in natal:
            if n.body not in targets:
                continue
            if source == PROGRESSION and m.body == n.body:
                continue

            d = angular_separation(m.ecliptic_lon, n.ecliptic_lon)
            for asp in config.aspects:
                orb = abs(d - asp.angle)
                max_orb = asp.orb * multiplier
                if orb <= max_orb:
                    res.append(
                        TransitAspect(
                            moving_body=m.body,
                            natal_body=n.body,
                            aspect=asp.name,
                            source=source,
                            orb=orb,
                            applying=is_applying(m.ecliptic_lon, n.ecliptic_lon, asp.angle, max_orb),
                            moving_lon=m.ecliptic_lon,
                            natal_lon=n.ecliptic_lon,
                        )
                    )
    return sorted(res, key=lambda x: x.orb)


__all__ = [
    "NATAL_TARGETS",
    "PROGRESSION",
    "PROGRESSION_BODIES",
    "TRANSIT",
    "TRANSIT_BODIES",
    "TransitAspect",
    "angular_separation",
    "find_aspects",
    "is_applying",
    "signed_delta",
]
