from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class BirthInput(BaseModel):
    date: str  # YYYY-MM-DD, local
    time: str  # HH:MM, local
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class LocationIn(BaseModel):
    name: str
    country: str = ""
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)


class MetaOut(BaseModel):
    engine: str = "cyclocartography"
    engine_version: str
    tz_offset_hours: Optional[int] = None
    warnings: Optional[List[str]] = None


class PositionsRequest(BaseModel):
    date: str  # YYYY-MM-DD
    time: str = "12:00"  # HH:MM
    lon: Optional[float] = None  # when set, date/time are local to this longitude
    bodies: Optional[List[str]] = None  # None = every tracked body
    include_minor: bool = True


class BodyPositionOut(BaseModel):
    name: str
    ra: float
    dec: float
    lon: float
    sign: str
    position: str  # sign, degree and minute


class PositionsResponse(BaseModel):
    meta: MetaOut
    gst: float
    bodies: List[BodyPositionOut]


class LinesComputeRequest(BaseModel):
    birth: BirthInput
    include_minor: bool = True
    source_id: Optional[str] = None


class AstroLineOut(BaseModel):
    planet: str
    line_type: str
    points: List[List[float]]  # [lat, lon]
    source_id: Optional[str] = None
    overlap: Optional[str] = None  # overlap classification on synastry maps


class LinesComputeResponse(BaseModel):
    meta: MetaOut
    gst: float
    lines: List[AstroLineOut]


class NearestLinesRequest(BaseModel):
    birth: BirthInput
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    max_distance_deg: float = 15.0
    include_minor: bool = True
    hide_mild_impacts: bool = False


class NearbyLineOut(BaseModel):
    planet: str
    line_type: str
    distance_km: float
    influence: str
    side: str


class NearestLinesResponse(BaseModel):
    meta: MetaOut
    lines: List[NearbyLineOut]
    summary: Dict[str, Any] = {}


class SynastryRequest(BaseModel):
    user: BirthInput
    partner: BirthInput
    include_minor: bool = True


class SynastryOverlapOut(BaseModel):
    planet: str
    line_type: str
    classification: str
    user_sentiment: str
    partner_sentiment: str
    proximity_deg: float


class CompositeChartOut(BaseModel):
    gst: float
    bodies: List[BodyPositionOut]
    lines: List[AstroLineOut]


class SynastryResponse(BaseModel):
    meta: MetaOut
    overlaps: List[SynastryOverlapOut]
    lines: List[AstroLineOut]
    composite: CompositeChartOut
