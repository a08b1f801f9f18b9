from fastapi import APIRouter
from ..schemas import SynthesisRequest, SynthesisResponse, SynthesisCityOut
from ..services.location_scoring import get_transit_synthesis
from ..services.sidereal import utc_naive
from .common import (
    birth_from,
    location_from,
    meta,
    scan_errors,
    scan_limits,
    window_out,
)

router = APIRouter(prefix="/v1/synthesis", tags=["synthesis"])


def _city_out(c) -> SynthesisCityOut:
    return SynthesisCityOut(
        name=c.name,
        country=c.country,
        lat=c.lat,
        lon=c.lon,
        score=round(c.score, 4),
        top_window=window_out(c.top_window),
        window_count=c.window_count,
    )


@router.post("/compute", response_model=SynthesisResponse)
def compute_synthesis(req: SynthesisRequest):
    birth = birth_from(req.birth)
    workers, deadline = scan_limits()
    start = utc_naive(req.start) if req.start else None
    with scan_errors():
        result = get_transit_synthesis(
            birth,
            req.range,
            [location_from(c) for c in req.cities],
            start=start,
            hide_mild_impacts=req.hide_mild_impacts,
            max_workers=workers,
            deadline=deadline,
        )
    return SynthesisResponse(
        meta=meta(birth.longitude),
        optimal=[_city_out(c) for c in result.optimal],
        intense=[_city_out(c) for c in result.intense],
    )
