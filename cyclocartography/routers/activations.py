from fastapi import APIRouter, HTTPException
from ..schemas import (
    CurrentActivationsRequest,
    CurrentActivationsResponse,
    WindowsRequest,
    WindowsResponse,
    CityActivationRequest,
    CityActivationResponse,
    ImportantDatesRequest,
    ImportantDatesResponse,
    ImportantDateOut,
)
from ..services.activation_windows import find_activation_windows
from ..services.location_scoring import (
    find_important_dates,
    get_city_activation,
    get_current_activations,
)
from ..services.sidereal import utc_naive
from .common import (
    activation_out,
    birth_from,
    location_from,
    meta,
    nearby_out,
    parse_day,
    scan_errors,
    scan_limits,
    window_out,
)

router = APIRouter(prefix="/v1/activations", tags=["activations"])

MAX_SCAN_DAYS = 3 * 366


def _range(from_date: str, to_date: str):
    start = parse_day(from_date, "from_date")
    end = parse_day(to_date, "to_date")
    if end < start:
        raise HTTPException(status_code=400, detail="to_date precedes from_date")
    if (end - start).days > MAX_SCAN_DAYS:
        raise HTTPException(status_code=400, detail="RANGE_TOO_LONG")
    return start, end


@router.post("/current", response_model=CurrentActivationsResponse)
def current_activations(req: CurrentActivationsRequest):
    birth = birth_from(req.birth)
    target = utc_naive(req.target)
    activations = get_current_activations(birth, target)
    return CurrentActivationsResponse(
        meta=meta(birth.longitude),
        activations=[activation_out(a) for a in activations],
    )


@router.post("/windows", response_model=WindowsResponse)
def activation_windows(req: WindowsRequest):
    birth = birth_from(req.birth)
    start, end = _range(req.from_date, req.to_date)
    workers, deadline = scan_limits()
    with scan_errors():
        windows = find_activation_windows(
            birth, start, end, req.step_days, max_workers=workers, deadline=deadline
        )
    return WindowsResponse(meta=meta(birth.longitude), windows=[window_out(w) for w in windows])


@router.post("/city", response_model=CityActivationResponse)
def city_activation(req: CityActivationRequest):
    birth = birth_from(req.birth)
    target = utc_naive(req.target)
    workers, deadline = scan_limits()
    with scan_errors():
        result = get_city_activation(
            req.city.name,
            req.city.lat,
            req.city.lon,
            birth,
            target,
            hide_mild_impacts=req.hide_mild_impacts,
            max_workers=workers,
            deadline=deadline,
        )
    return CityActivationResponse(
        meta=meta(birth.longitude),
        city_name=result.city_name,
        overall_strength=result.overall_strength,
        active_aspects=[activation_out(a) for a in result.active_aspects],
        next_window=window_out(result.next_window),
        best_visit_window=window_out(result.best_visit_window),
        nearby_lines=[nearby_out(n) for n in result.nearby_lines],
    )


@router.post("/important-dates", response_model=ImportantDatesResponse)
def important_dates(req: ImportantDatesRequest):
    birth = birth_from(req.birth)
    start, end = _range(req.from_date, req.to_date)
    cities = [location_from(c) for c in req.cities] if req.cities else None
    workers, deadline = scan_limits()
    with scan_errors():
        dates = find_important_dates(
            birth, start, end, cities, max_workers=workers, deadline=deadline
        )
    return ImportantDatesResponse(
        meta=meta(birth.longitude),
        dates=[
            ImportantDateOut(
                date=d.date.isoformat(),
                title=d.title,
                description=d.description,
                affected_cities=d.affected_cities,
                significance=d.significance,
                category=d.category,
            )
            for d in dates
        ],
    )
