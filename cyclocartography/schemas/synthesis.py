from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from .charts import BirthInput, LocationIn, MetaOut
from .activations import ActivationWindowOut

SynthesisRange = Literal["1m", "3m", "1y"]


class SynthesisRequest(BaseModel):
    birth: BirthInput
    range: SynthesisRange = "3m"
    cities: List[LocationIn] = Field(min_length=1)
    start: Optional[datetime] = None
    hide_mild_impacts: bool = False


class SynthesisCityOut(BaseModel):
    name: str
    country: str
    lat: float
    lon: float
    score: float
    top_window: Optional[ActivationWindowOut] = None
    window_count: int


class SynthesisResponse(BaseModel):
    meta: MetaOut
    optimal: List[SynthesisCityOut]
    intense: List[SynthesisCityOut]
