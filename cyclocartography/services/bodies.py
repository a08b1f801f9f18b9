from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional, TypeVar

T = TypeVar("T")


class CelestialBody(str, Enum):
    SUN = "sun"
    MOON = "moon"
    MERCURY = "mercury"
    VENUS = "venus"
    MARS = "mars"
    JUPITER = "jupiter"
    SATURN = "saturn"
    URANUS = "uranus"
    NEPTUNE = "neptune"
    PLUTO = "pluto"
    CHIRON = "chiron"
    CERES = "ceres"
    PALLAS = "pallas"
    JUNO = "juno"
    VESTA = "vesta"
    NORTH_NODE = "northnode"
    SOUTH_NODE = "southnode"
    LILITH = "lilith"

    @property
    def label(self) -> str:
        return self.value[:1].upper() + self.value[1:]


class LineType(str, Enum):
    MC = "MC"
    IC = "IC"
    ASC = "ASC"
    DSC = "DSC"


ALL_LINE_TYPES = (LineType.MC, LineType.IC, LineType.ASC, LineType.DSC)

# Chiron, the nodes, Lilith and the asteroids
MINOR_BODIES = frozenset(
    {
        CelestialBody.CHIRON,
        CelestialBody.NORTH_NODE,
        CelestialBody.SOUTH_NODE,
        CelestialBody.LILITH,
        CelestialBody.CERES,
        CelestialBody.PALLAS,
        CelestialBody.JUNO,
        CelestialBody.VESTA,
    }
)

CLASSICAL_BODIES = (
    CelestialBody.SUN,
    CelestialBody.MOON,
    CelestialBody.MERCURY,
    CelestialBody.VENUS,
    CelestialBody.MARS,
    CelestialBody.JUPITER,
    CelestialBody.SATURN,
    CelestialBody.URANUS,
    CelestialBody.NEPTUNE,
    CelestialBody.PLUTO,
)


def lookup_body(name: object) -> Optional[CelestialBody]:
    """Resolve a body name case-insensitively; ``None`` when it is not tracked."""

    if isinstance(name, CelestialBody):
        return name
    key = str(name or "").strip().lower().replace(" ", "").replace("_", "")
    try:
        return CelestialBody(key)
    except ValueError:
        return None


def is_minor(body: CelestialBody) -> bool:
    return body in MINOR_BODIES


def filter_minor_bodies(items: Iterable[T], include_minor: bool) -> List[T]:
    """Drop positions or lines of minor bodies unless ``include_minor`` is set."""

    if include_minor:
        return list(items)
    return [i for i in items if not is_minor(i.body)]


__all__ = [
    "ALL_LINE_TYPES",
    "CLASSICAL_BODIES",
    "CelestialBody",
    "LineType",
    "MINOR_BODIES",
    "filter_minor_bodies",
    "is_minor",
    "lookup_body",
]
