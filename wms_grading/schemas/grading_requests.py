# wms_grading/schemas/grading_requests.py
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from .common import GeoCoordinate, Location
from .sampling import AreaAverageResult, AreaMaximumResult, PointSampleResult, SampleConfiguration

class LayerQuery(BaseModel):
    url: str = Field(..., description="WMS service endpoint")
    layers: str = Field(..., description="WMS layer name")
    location: Location

class AreaLayerQuery(LayerQuery):
    sampling_config: Optional[SampleConfiguration] = None

class LayerDescriptor(BaseModel):
    layer_id: str
    title: str
    url: str
    layers: str

class GradingRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: str
    layers: list[LayerDescriptor] = Field(..., min_length=1)
    sampling_config: Optional[SampleConfiguration] = None

class LayerGrading(BaseModel):
    layer_id: str
    layer_name: str
    wms_layer_name: str
    point_sample: Optional[PointSampleResult] = None
    average_area_sample: Optional[AreaAverageResult] = None
    max_area_sample: Optional[AreaMaximumResult] = None
    area_stats: Optional[dict[str, Any]] = None
    errors: Optional[list[str]] = None

class GradingStatistics(BaseModel):
    total_layers: int
    successful_layers: int
    failed_layers: int
    total_samples_taken: int

class GradingData(BaseModel):
    location: GeoCoordinate
    address: str
    layers: dict[str, LayerGrading]
    graded_at: datetime
    sampling_config: SampleConfiguration
    statistics: GradingStatistics
