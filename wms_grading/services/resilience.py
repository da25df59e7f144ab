# wms_grading/services/resilience.py
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from ..schemas.common import GeoCoordinate
from ..schemas.sampling import RequestPolicy
from ..utils import time as clock
from .getfeatureinfo import fetch_attributes_at

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (httpx.RequestError, ValueError)
# a bad endpoint fails the same way on every attempt
BAD_ENDPOINT_ERRORS = (httpx.UnsupportedProtocol, httpx.InvalidURL)


class FetchStatus(str, Enum):
    OK = "ok"
    NO_DATA = "no_data"            # HTTP error status or no feature at the point
    UNREACHABLE = "unreachable"    # transport failures outlasted the retries
    FAILED = "failed"              # unexpected exception, captured by the batch scheduler


@dataclass(frozen=True)
class FetchOutcome:
    status: FetchStatus
    attributes: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK


async def fetch_with_retry(
    client: httpx.AsyncClient,
    endpoint: str,
    layer_id: str,
    coordinate: GeoCoordinate,
    policy: RequestPolicy,
    retry_count: int = 0,
) -> FetchOutcome:
    """
    One GetFeatureInfo call with exponential backoff on transport errors
    (retry_delay_ms * 2**retry_count between attempts). "No data" answers
    return at once without using a retry; exhausting the retries degrades to
    UNREACHABLE instead of raising.
    """
    try:
        attributes = await fetch_attributes_at(client, endpoint, layer_id, coordinate)
    except BAD_ENDPOINT_ERRORS as e:
        logger.warning("GetFeatureInfo endpoint %r for layer %s is unusable: %s", endpoint, layer_id, e)
        return FetchOutcome(FetchStatus.NO_DATA, reason=repr(e))
    except RETRYABLE_ERRORS as e:
        if retry_count < policy.max_retries:
            delay_ms = policy.retry_delay_ms * (2 ** retry_count)
            logger.info(
                "GetFeatureInfo attempt %d for layer %s failed (%s); retrying in %d ms",
                retry_count + 1, layer_id, e, delay_ms,
            )
            await clock.pause(delay_ms)
            return await fetch_with_retry(client, endpoint, layer_id, coordinate, policy, retry_count + 1)
        logger.error(
            "GetFeatureInfo failed after %d retries for layer %s at (%.6f, %.6f): %s",
            policy.max_retries, layer_id, coordinate.lat, coordinate.lon, e,
        )
        return FetchOutcome(FetchStatus.UNREACHABLE, reason=repr(e))

    if attributes is None:
        return FetchOutcome(FetchStatus.NO_DATA)
    return FetchOutcome(FetchStatus.OK, attributes=attributes)
