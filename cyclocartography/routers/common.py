"""Shared request plumbing for the routers: parsing, meta, and conversions."""

from __future__ import annotations

import time
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from fastapi import HTTPException

from ..schemas import (
    ActivationWindowOut,
    BirthInput,
    BodyPositionOut,
    LineActivationOut,
    LocationIn,
    MetaOut,
    NearbyLineOut,
)
from ..services.activation_windows import ActivationWindow
from ..services.birth_data import BirthData, parse_birth
from ..services.config import env_float, env_int
from ..services.ephemeris import PlanetPosition
from ..services.errors import InputParseError, ScanCancelled
from ..services.location_scoring import LineActivation, Location
from ..services.proximity import NearbyLine
from ..services.sidereal import estimate_timezone_offset
from ..services.zodiac import fmt_deg, sign_name_from_lon

ENGINE_VERSION = "0.3.0"


def birth_from(req: BirthInput) -> BirthData:
    try:
        return parse_birth(req.date, req.time, req.lat, req.lon)
    except InputParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def parse_day(raw: str, field: str) -> datetime:
    try:
        return datetime.fromisoformat(raw.strip()[:10] + "T12:00:00")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Malformed {field}: {raw!r}") from exc


def meta(lon: Optional[float] = None, warnings: Optional[List[str]] = None) -> MetaOut:
    return MetaOut(
        engine_version=ENGINE_VERSION,
        tz_offset_hours=estimate_timezone_offset(lon) if lon is not None else None,
        warnings=warnings or None,
    )


def scan_limits() -> tuple[Optional[int], Optional[float]]:
    """(max_workers, monotonic deadline) from SCAN_MAX_WORKERS / SCAN_DEADLINE_SECONDS."""

    workers = env_int("SCAN_MAX_WORKERS")
    seconds = env_float("SCAN_DEADLINE_SECONDS")
    deadline = time.monotonic() + seconds if seconds else None
    return workers, deadline


@contextmanager
def scan_errors() -> Iterator[None]:
    try:
        yield
    except ScanCancelled as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def body_out(p: PlanetPosition) -> BodyPositionOut:
    return BodyPositionOut(
        name=p.body.value,
        ra=round(p.ra, 6),
        dec=round(p.dec, 6),
        lon=round(p.ecliptic_lon, 6),
        sign=sign_name_from_lon(p.ecliptic_lon),
        position=fmt_deg(p.ecliptic_lon),
    )


def location_from(loc: LocationIn) -> Location:
    return Location(name=loc.name, country=loc.country, lat=loc.lat, lon=loc.lon)


def window_out(w: Optional[ActivationWindow]) -> Optional[ActivationWindowOut]:
    if w is None:
        return None
    return ActivationWindowOut(
        natal_planet=w.natal_body.value,
        transit_planet=w.moving_body.value,
        aspect=w.aspect,
        source=w.source,
        start_date=w.start_date.isoformat(),
        end_date=w.end_date.isoformat(),
        exact_date=w.exact_date.isoformat(),
        description=w.description,
        window_type=w.window_type,
        short_label=w.short_label,
        line_types=[lt.value for lt in w.line_types],
    )


def activation_out(a: LineActivation) -> LineActivationOut:
    return LineActivationOut(
        natal_planet=a.natal_body.value,
        transit_planet=a.moving_body.value,
        aspect=a.aspect,
        source=a.source,
        orb=round(a.orb, 4),
        applying=a.applying,
        intensity=a.intensity,
        summary=a.summary,
        line_types=[lt.value for lt in a.line_types],
    )


def nearby_out(n: NearbyLine) -> NearbyLineOut:
    return NearbyLineOut(
        planet=n.body.value,
        line_type=n.line_type.value,
        distance_km=round(n.distance_km, 2),
        influence=n.influence,
        side=n.side,
    )

