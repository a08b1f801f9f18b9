from datetime import datetime

from fastapi import APIRouter, HTTPException

from ..schemas import PositionsRequest, PositionsResponse
from ..services import ephemeris as ephem_svc
from ..services.bodies import filter_minor_bodies, lookup_body
from ..services.birth_data import parse_date_parts, parse_time_parts
from ..services.errors import InputParseError
from ..services.sidereal import gst_at
from .common import body_out, meta

router = APIRouter(prefix="/v1/ephemeris", tags=["ephemeris"])


def _instant(date_str: str, time_str: str) -> datetime:
    try:
        year, month, day = parse_date_parts(date_str)
        hour, minute = parse_time_parts(time_str)
        return datetime(year, month, day, hour, minute)
    except (InputParseError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/positions", response_model=PositionsResponse)
def compute_positions(req: PositionsRequest):
    instant = _instant(req.date, req.time)
    positions = filter_minor_bodies(
        ephem_svc.positions_at(instant, req.lon, req.bodies), req.include_minor
    )

    warnings = []
    unknown = [b for b in (req.bodies or []) if lookup_body(b) is None]
    if unknown:
        warnings.append(f"Untracked bodies ignored: {', '.join(unknown)}")

    return PositionsResponse(
        meta=meta(req.lon, warnings),
        gst=round(gst_at(instant, req.lon), 6),
        bodies=[body_out(p) for p in positions],
    )
