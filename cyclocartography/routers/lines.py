from typing import Dict, Optional

from fastapi import APIRouter
from ..schemas import (
    LinesComputeRequest,
    LinesComputeResponse,
    AstroLineOut,
    NearestLinesRequest,
    NearestLinesResponse,
    SynastryRequest,
    SynastryResponse,
    SynastryOverlapOut,
    CompositeChartOut,
)
from ..services.lines import AstroLine, filter_minor_lines
from ..services.natal import natal_gst, natal_lines
from ..services.proximity import filter_nearby_by_impact, find_nearest_lines
from ..services.synastry import composite_chart, find_overlaps, synastry_lines
from .common import birth_from, body_out, meta, nearby_out

router = APIRouter(prefix="/v1/lines", tags=["lines"])


def _line_out(line: AstroLine, overlap: Optional[str] = None) -> AstroLineOut:
    return AstroLineOut(
        planet=line.body.value,
        line_type=line.line_type.value,
        points=[[lat, round(lon, 4)] for lat, lon in line.points],
        source_id=line.source_id,
        overlap=overlap,
    )


@router.post("/compute", response_model=LinesComputeResponse)
def compute_lines(req: LinesComputeRequest):
    birth = birth_from(req.birth)
    lines = filter_minor_lines(natal_lines(birth, req.source_id), req.include_minor)
    return LinesComputeResponse(
        meta=meta(birth.longitude),
        gst=round(natal_gst(birth), 6),
        lines=[_line_out(line) for line in lines],
    )


@router.post("/nearest", response_model=NearestLinesResponse)
def nearest_lines(req: NearestLinesRequest):
    birth = birth_from(req.birth)
    lines = filter_minor_lines(natal_lines(birth), req.include_minor)
    nearby = filter_nearby_by_impact(
        find_nearest_lines(lines, req.lat, req.lon, req.max_distance_deg),
        req.hide_mild_impacts,
    )
    summary = {
        "count": len(nearby),
        "closest_km": round(nearby[0].distance_km, 2) if nearby else None,
        "on_line": [f"{n.body.value}-{n.line_type.value}" for n in nearby if n.side == "on"],
    }
    return NearestLinesResponse(meta=meta(birth.longitude), lines=[nearby_out(n) for n in nearby], summary=summary)


@router.post("/synastry", response_model=SynastryResponse)
def synastry(req: SynastryRequest):
    user = birth_from(req.user)
    partner = birth_from(req.partner)

    lines = synastry_lines(user, partner, req.include_minor)
    overlaps = find_overlaps(lines)
    tags: Dict[tuple, str] = {(o.body, o.line_type): o.classification for o in overlaps}
    composite = composite_chart(user, partner, req.include_minor)

    return SynastryResponse(
        meta=meta(user.longitude),
        overlaps=[
            SynastryOverlapOut(
                planet=o.body.value,
                line_type=o.line_type.value,
                classification=o.classification,
                user_sentiment=o.user_sentiment,
                partner_sentiment=o.partner_sentiment,
                proximity_deg=round(o.proximity_deg, 4),
            )
            for o in overlaps
        ],
        lines=[_line_out(line, tags.get((line.body, line.line_type))) for line in lines],
        composite=CompositeChartOut(
            gst=round(composite.gst, 6),
            bodies=[body_out(p) for p in composite.positions],
            lines=[_line_out(line) for line in composite.lines],
        ),
    )
