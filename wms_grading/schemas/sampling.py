# wms_grading/schemas/sampling.py
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..core.config import settings
from .common import GeoCoordinate

# -------- configuration objects --------
class SampleConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    area_radius_meters: float = Field(default_factory=lambda: settings.area_radius_meters, gt=0)
    grid_resolution_meters: float = Field(default_factory=lambda: settings.grid_resolution_meters, gt=0)
    # hard cap on grid points sent upstream, whatever radius/resolution produce
    max_samples_per_layer: int = Field(default_factory=lambda: settings.max_samples_per_layer, gt=0)
    meters_per_degree_lat: float = Field(default_factory=lambda: settings.meters_per_degree_lat, gt=0)
    meters_per_degree_lng: float = Field(default_factory=lambda: settings.meters_per_degree_lng, gt=0)

class RequestPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default_factory=lambda: settings.max_retries, ge=0)
    retry_delay_ms: int = Field(default_factory=lambda: settings.retry_delay_ms, ge=0)
    concurrent_requests: int = Field(default_factory=lambda: settings.concurrent_requests, ge=1)
    batch_delay_ms: int = Field(default_factory=lambda: settings.batch_delay_ms, ge=0)
    timeout_s: float = Field(default_factory=lambda: settings.request_timeout_s, gt=0)

class ExtractionRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    numeric_field_priority: tuple[str, ...] = Field(default_factory=lambda: tuple(settings.numeric_field_priority))
    excluded_key_fragments: tuple[str, ...] = Field(default_factory=lambda: tuple(settings.excluded_key_fragments))
    identifier_key_fragments: tuple[str, ...] = Field(default_factory=lambda: tuple(settings.identifier_key_fragments))

# -------- results --------
class PointSampleResult(BaseModel):
    value: Union[float, int, str, None] = None
    raw_attributes: dict[str, Any] = {}
    timestamp: datetime
    coordinate: GeoCoordinate

class AreaAverageResult(BaseModel):
    value: float
    radius_meters: float
    sample_count: int
    grid_resolution_meters: float
    timestamp: datetime
    center: GeoCoordinate
    sample_values: list[float] = []

class AreaMaximumResult(AreaAverageResult):
    # `value` stays the mean so it compares with AreaAverageResult;
    # max_location is where the highest sample was found.
    max_location: GeoCoordinate
    max_value: Optional[float] = None
