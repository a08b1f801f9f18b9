from .charts import (
    BirthInput,
    LocationIn,
    MetaOut,
    PositionsRequest,
    PositionsResponse,
    BodyPositionOut,
    LinesComputeRequest,
    LinesComputeResponse,
    AstroLineOut,
    NearestLinesRequest,
    NearestLinesResponse,
    NearbyLineOut,
    SynastryRequest,
    SynastryResponse,
    SynastryOverlapOut,
    CompositeChartOut,
)
from .activations import (
    CurrentActivationsRequest,
    CurrentActivationsResponse,
    LineActivationOut,
    WindowsRequest,
    WindowsResponse,
    ActivationWindowOut,
    CityActivationRequest,
    CityActivationResponse,
    ImportantDatesRequest,
    ImportantDatesResponse,
    ImportantDateOut,
)
from .synthesis import SynthesisRequest, SynthesisResponse, SynthesisCityOut
