# wms_grading/services/sampler.py
"""
Point, area-average and area-maximum sampling of a WMS layer.

Every public coroutine returns a result model or None; nothing raises past
this module under normal operation, so callers only need a None check.
"""
import logging
import math
from typing import Iterable, List, Optional, Tuple

import httpx
import numpy as np

from ..schemas.common import GeoCoordinate
from ..schemas.sampling import (
    AreaAverageResult,
    AreaMaximumResult,
    ExtractionRules,
    PointSampleResult,
    RequestPolicy,
    SampleConfiguration,
)
from ..utils.geo import generate_grid
from ..utils.http import make_client
from ..utils.time import now_utc
from .batching import fetch_in_batches, fetch_in_batches_with_location
from .extraction import extract_value
from .resilience import FetchOutcome, fetch_with_retry

logger = logging.getLogger(__name__)


class WMSSampler:
    def __init__(
        self,
        config: Optional[SampleConfiguration] = None,
        policy: Optional[RequestPolicy] = None,
        rules: Optional[ExtractionRules] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or SampleConfiguration()
        self.policy = policy or RequestPolicy()
        self.rules = rules or ExtractionRules()
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return make_client(timeout=self.policy.timeout_s, transport=self.transport)

    def _grid(self, center: GeoCoordinate, cfg: SampleConfiguration) -> List[GeoCoordinate]:
        grid = generate_grid(
            center,
            cfg.area_radius_meters,
            cfg.grid_resolution_meters,
            cfg.meters_per_degree_lat,
            cfg.meters_per_degree_lng,
            max_points=cfg.max_samples_per_layer,
        )
        logger.debug("Grid of %d points (cap %d)", len(grid), cfg.max_samples_per_layer)
        return [p.coordinate for p in grid]

    def _numeric(self, outcome: FetchOutcome) -> Optional[float]:
        if not outcome.ok:
            return None
        value = extract_value(outcome.attributes, self.rules)
        if isinstance(value, (int, float)) and not math.isnan(value):
            return float(value)
        return None

    # -------- point --------
    async def point_sample(
        self,
        endpoint: str,
        layer_id: str,
        coordinate: GeoCoordinate,
        config: Optional[SampleConfiguration] = None,
    ) -> Optional[PointSampleResult]:
        # config is accepted for a uniform signature; a point sample has no area settings
        try:
            async with self._client() as client:
                outcome = await fetch_with_retry(client, endpoint, layer_id, coordinate, self.policy)
            if not outcome.ok:
                logger.debug("Point sample on %s: %s", layer_id, outcome.status.value)
                return None
            return PointSampleResult(
                value=extract_value(outcome.attributes, self.rules),
                raw_attributes=outcome.attributes,
                timestamp=now_utc(),
                coordinate=coordinate,
            )
        except Exception:
            logger.exception("Point sample error for layer %s", layer_id)
            return None

    # -------- area average --------
    async def average_area_sample(
        self,
        endpoint: str,
        layer_id: str,
        center: GeoCoordinate,
        config: Optional[SampleConfiguration] = None,
    ) -> Optional[AreaAverageResult]:
        cfg = config or self.config
        try:
            points = self._grid(center, cfg)
            async with self._client() as client:
                outcomes = await fetch_in_batches(client, endpoint, layer_id, points, self.policy)

            values = [v for v in (self._numeric(o) for o in outcomes) if v is not None]
            if not values:
                logger.info("Average area sample on %s: no numeric values in %d points", layer_id, len(points))
                return None

            return AreaAverageResult(
                value=float(np.mean(values)),
                radius_meters=cfg.area_radius_meters,
                sample_count=len(values),
                grid_resolution_meters=cfg.grid_resolution_meters,
                timestamp=now_utc(),
                center=center,
                sample_values=values,
            )
        except Exception:
            logger.exception("Average area sample error for layer %s", layer_id)
            return None

    # -------- area maximum --------
    async def max_area_sample(
        self,
        endpoint: str,
        layer_id: str,
        center: GeoCoordinate,
        config: Optional[SampleConfiguration] = None,
    ) -> Optional[AreaMaximumResult]:
        cfg = config or self.config
        try:
            points = self._grid(center, cfg)
            async with self._client() as client:
                located = await fetch_in_batches_with_location(client, endpoint, layer_id, points, self.policy)

            samples: List[Tuple[float, GeoCoordinate]] = []
            for item in located:
                v = self._numeric(item.outcome)
                if v is not None:
                    samples.append((v, item.coordinate))
            if not samples:
                logger.info("Max area sample on %s: no numeric values in %d points", layer_id, len(points))
                return None

            best_value, best_location = _first_maximum(samples)
            values = [v for v, _ in samples]
            return AreaMaximumResult(
                value=float(np.mean(values)),  # mean, not the maximum
                radius_meters=cfg.area_radius_meters,
                sample_count=len(values),
                grid_resolution_meters=cfg.grid_resolution_meters,
                timestamp=now_utc(),
                center=center,
                sample_values=values,
                max_location=best_location,
                max_value=best_value,
            )
        except Exception:
            logger.exception("Max area sample error for layer %s", layer_id)
            return None


def _first_maximum(samples: Iterable[Tuple[float, GeoCoordinate]]) -> Tuple[float, GeoCoordinate]:
    best = None
    for value, location in samples:
        if best is None or value > best[0]:
            best = (value, location)
    return best


# -------- module-level API (default configuration) --------
async def point_sample(endpoint: str, layer_id: str, coordinate: GeoCoordinate,
                       config: Optional[SampleConfiguration] = None) -> Optional[PointSampleResult]:
    return await WMSSampler().point_sample(endpoint, layer_id, coordinate, config)

async def average_area_sample(endpoint: str, layer_id: str, center: GeoCoordinate,
                              config: Optional[SampleConfiguration] = None) -> Optional[AreaAverageResult]:
    return await WMSSampler().average_area_sample(endpoint, layer_id, center, config)

async def max_area_sample(endpoint: str, layer_id: str, center: GeoCoordinate,
                          config: Optional[SampleConfiguration] = None) -> Optional[AreaMaximumResult]:
    return await WMSSampler().max_area_sample(endpoint, layer_id, center, config)
