# wms_grading/routers/sampling.py
from typing import Optional

from fastapi import APIRouter, Depends

from ..schemas.common import GeoCoordinate
from ..schemas.grading_requests import AreaLayerQuery, GradingData, GradingRequest, LayerQuery
from ..schemas.sampling import AreaAverageResult, AreaMaximumResult, PointSampleResult
from ..services.grading import grade_layers
from ..services.sampler import WMSSampler

router = APIRouter(prefix="/sampling", tags=["sampling"])


def get_sampler() -> WMSSampler:
    return WMSSampler()


@router.post("/point", response_model=Optional[PointSampleResult])
async def point(q: LayerQuery, sampler: WMSSampler = Depends(get_sampler)):
    return await sampler.point_sample(q.url, q.layers, q.location)


@router.post("/average", response_model=Optional[AreaAverageResult])
async def average(q: AreaLayerQuery, sampler: WMSSampler = Depends(get_sampler)):
    return await sampler.average_area_sample(q.url, q.layers, q.location, q.sampling_config)


@router.post("/max", response_model=Optional[AreaMaximumResult])
async def maximum(q: AreaLayerQuery, sampler: WMSSampler = Depends(get_sampler)):
    return await sampler.max_area_sample(q.url, q.layers, q.location, q.sampling_config)


@router.post("/grade", response_model=GradingData)
async def grade(q: GradingRequest, sampler: WMSSampler = Depends(get_sampler)):
    location = GeoCoordinate(lat=q.latitude, lon=q.longitude)
    return await grade_layers(sampler, location, q.address, q.layers, q.sampling_config)
