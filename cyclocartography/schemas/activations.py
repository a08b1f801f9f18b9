from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional, List
from .charts import BirthInput, LocationIn, MetaOut, NearbyLineOut


class CurrentActivationsRequest(BaseModel):
    birth: BirthInput
    target: Optional[datetime] = None  # naive UTC; now when omitted


class LineActivationOut(BaseModel):
    natal_planet: str
    transit_planet: str
    aspect: str
    source: str
    orb: float
    applying: bool
    intensity: str
    summary: str
    line_types: List[str]


class CurrentActivationsResponse(BaseModel):
    meta: MetaOut
    activations: List[LineActivationOut]


class WindowsRequest(BaseModel):
    birth: BirthInput
    from_date: str  # YYYY-MM-DD
    to_date: str
    step_days: int = Field(default=7, ge=1, le=60)


class ActivationWindowOut(BaseModel):
    natal_planet: str
    transit_planet: str
    aspect: str
    source: str
    start_date: str
    end_date: str
    exact_date: str
    description: str
    window_type: str
    short_label: str
    line_types: List[str]


class WindowsResponse(BaseModel):
    meta: MetaOut
    windows: List[ActivationWindowOut]


class CityActivationRequest(BaseModel):
    birth: BirthInput
    city: LocationIn
    target: Optional[datetime] = None
    hide_mild_impacts: bool = False


class CityActivationResponse(BaseModel):
    meta: MetaOut
    city_name: str
    overall_strength: str
    active_aspects: List[LineActivationOut]
    next_window: Optional[ActivationWindowOut] = None
    best_visit_window: Optional[ActivationWindowOut] = None
    nearby_lines: List[NearbyLineOut] = []


class ImportantDatesRequest(BaseModel):
    birth: BirthInput
    from_date: str
    to_date: str
    cities: Optional[List[LocationIn]] = None


class ImportantDateOut(BaseModel):
    date: str
    title: str
    description: str
    affected_cities: List[str]
    significance: str
    category: str


class ImportantDatesResponse(BaseModel):
    meta: MetaOut
    dates: List[ImportantDateOut]
