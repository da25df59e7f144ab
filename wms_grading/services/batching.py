# wms_grading/services/batching.py
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Sequence, TypeVar

import httpx

from ..schemas.common import GeoCoordinate
from ..schemas.sampling import RequestPolicy
from ..utils import time as clock
from .resilience import FetchOutcome, FetchStatus, fetch_with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class LocatedOutcome:
    outcome: FetchOutcome
    coordinate: GeoCoordinate


async def _run_in_batches(
    points: Sequence[GeoCoordinate],
    policy: RequestPolicy,
    job: Callable[[GeoCoordinate], Awaitable[T]],
    on_error: Callable[[GeoCoordinate, BaseException], T],
) -> List[T]:
    # Batches run one after another; inside a batch every job settles before
    # the next batch starts. Results keep the order of `points`.
    results: List[T] = []
    size = policy.concurrent_requests
    for start in range(0, len(points), size):
        batch = points[start:start + size]
        settled = await asyncio.gather(*(job(p) for p in batch), return_exceptions=True)
        for point, res in zip(batch, settled):
            if isinstance(res, asyncio.CancelledError):
                raise res
            if isinstance(res, BaseException):
                logger.error("Sample at (%.6f, %.6f) raised %r", point.lat, point.lon, res)
                results.append(on_error(point, res))
            else:
                results.append(res)
        logger.debug("Batch %d settled (%d/%d points)", start // size + 1, len(results), len(points))

        if start + size < len(points):
            await clock.pause(policy.batch_delay_ms)
    return results


async def fetch_in_batches(
    client: httpx.AsyncClient,
    endpoint: str,
    layer_id: str,
    points: Sequence[GeoCoordinate],
    policy: RequestPolicy,
) -> List[FetchOutcome]:
    """One outcome per point, in point order; failures are kept, never dropped."""
    return await _run_in_batches(
        points,
        policy,
        lambda p: fetch_with_retry(client, endpoint, layer_id, p, policy),
        lambda p, e: FetchOutcome(FetchStatus.FAILED, reason=repr(e)),
    )


async def fetch_in_batches_with_location(
    client: httpx.AsyncClient,
    endpoint: str,
    layer_id: str,
    points: Sequence[GeoCoordinate],
    policy: RequestPolicy,
) -> List[LocatedOutcome]:
    """Like fetch_in_batches, but each outcome carries the coordinate it was sampled at."""
    async def job(p: GeoCoordinate) -> LocatedOutcome:
        return LocatedOutcome(await fetch_with_retry(client, endpoint, layer_id, p, policy), p)

    return await _run_in_batches(
        points,
        policy,
        job,
        lambda p, e: LocatedOutcome(FetchOutcome(FetchStatus.FAILED, reason=repr(e)), p),
    )
