# wms_grading/services/grading.py
import asyncio
import logging
from typing import Optional, Sequence

from ..schemas.common import GeoCoordinate
from ..schemas.grading_requests import GradingData, GradingStatistics, LayerDescriptor, LayerGrading
from ..schemas.sampling import SampleConfiguration
from ..utils.time import now_utc
from .features import summarize_values
from .sampler import WMSSampler

logger = logging.getLogger(__name__)

ALL_FAILED = "All sampling methods failed - layer may not have data at this location"


async def grade_layer(
    sampler: WMSSampler,
    location: GeoCoordinate,
    layer: LayerDescriptor,
    config: SampleConfiguration,
) -> LayerGrading:
    """Point, average and max samples of one layer, run side by side."""
    point, average, maximum = await asyncio.gather(
        sampler.point_sample(layer.url, layer.layers, location, config),
        sampler.average_area_sample(layer.url, layer.layers, location, config),
        sampler.max_area_sample(layer.url, layer.layers, location, config),
        return_exceptions=True,
    )
    for r in (point, average, maximum):
        if isinstance(r, BaseException) and not isinstance(r, Exception):
            raise r  # cancellation
    raised = [r for r in (point, average, maximum) if isinstance(r, Exception)]
    if raised:
        logger.error("Error grading layer %s: %r", layer.layer_id, raised[0])
        return LayerGrading(
            layer_id=layer.layer_id,
            layer_name=layer.title,
            wms_layer_name=layer.layers,
            errors=[str(e) or type(e).__name__ for e in raised],
        )

    errors = None
    if point is None and average is None and maximum is None:
        errors = [ALL_FAILED]

    return LayerGrading(
        layer_id=layer.layer_id,
        layer_name=layer.title,
        wms_layer_name=layer.layers,
        point_sample=point,
        average_area_sample=average,
        max_area_sample=maximum,
        area_stats=summarize_values(average.sample_values) if average else None,
        errors=errors,
    )


def _has_sample(g: LayerGrading) -> bool:
    return bool(g.point_sample or g.average_area_sample or g.max_area_sample)


def compute_statistics(gradings: Sequence[LayerGrading]) -> GradingStatistics:
    successful = sum(1 for g in gradings if _has_sample(g))
    samples = sum(
        (1 if g.point_sample else 0)
        + (g.average_area_sample.sample_count if g.average_area_sample else 0)
        + (g.max_area_sample.sample_count if g.max_area_sample else 0)
        for g in gradings
    )
    return GradingStatistics(
        total_layers=len(gradings),
        successful_layers=successful,
        failed_layers=len(gradings) - successful,
        total_samples_taken=samples,
    )


async def grade_layers(
    sampler: WMSSampler,
    location: GeoCoordinate,
    address: str,
    layers: Sequence[LayerDescriptor],
    config: Optional[SampleConfiguration] = None,
) -> GradingData:
    cfg = config or sampler.config
    logger.info("Grading %d WMS layers at %s", len(layers), address)

    gradings = await asyncio.gather(*(grade_layer(sampler, location, layer, cfg) for layer in layers))
    statistics = compute_statistics(gradings)

    logger.info(
        "WMS grading complete: %d/%d layers successful",
        statistics.successful_layers, statistics.total_layers,
    )
    return GradingData(
        location=location,
        address=address,
        layers={g.layer_id: g for g in gradings},
        graded_at=now_utc(),
        sampling_config=cfg,
        statistics=statistics,
    )
