# wms_grading/services/getfeatureinfo.py
import logging
from typing import Any, Dict, Optional

import httpx

from ..schemas.common import GeoCoordinate
from ..utils.geo import point_bbox
from ..utils.http import get_json

logger = logging.getLogger(__name__)

BBOX_HALF_SIZE_DEG = 0.001  # ~100 m around the point at ~52°N
WINDOW_WIDTH = 101
WINDOW_HEIGHT = 101
CENTER_I = 50
CENTER_J = 50


def build_params(layer_id: str, coordinate: GeoCoordinate) -> Dict[str, str]:
    """WMS 1.3.0 GetFeatureInfo query for the center pixel of a small window around `coordinate`."""
    bbox = point_bbox(coordinate.lat, coordinate.lon, BBOX_HALF_SIZE_DEG)
    return {
        "SERVICE": "WMS",
        "VERSION": "1.3.0",
        "REQUEST": "GetFeatureInfo",
        "LAYERS": layer_id,
        "QUERY_LAYERS": layer_id,
        "BBOX": bbox.as_wms_param(),
        "CRS": "EPSG:4326",
        "WIDTH": str(WINDOW_WIDTH),
        "HEIGHT": str(WINDOW_HEIGHT),
        "I": str(CENTER_I),
        "J": str(CENTER_J),
        "INFO_FORMAT": "application/json",
    }


async def fetch_attributes_at(
    client: httpx.AsyncClient,
    endpoint: str,
    layer_id: str,
    coordinate: GeoCoordinate,
) -> Optional[Dict[str, Any]]:
    """
    Properties of the first feature under `coordinate`, or None when the
    service has nothing there.

    Transport problems (httpx.RequestError) and unreadable bodies (ValueError)
    are raised so the caller can retry. HTTP error statuses are not retried:
    they mostly mean the point is outside the layer's extent, so they are
    logged and reported as no data.
    """
    try:
        payload = await get_json(client, endpoint, params=build_params(layer_id, coordinate))
    except httpx.HTTPStatusError as e:
        logger.warning(
            "GetFeatureInfo HTTP error %s %s for layer %s at (%.6f, %.6f)",
            e.response.status_code, e.response.reason_phrase, layer_id, coordinate.lat, coordinate.lon,
        )
        return None

    if not isinstance(payload, dict):
        raise ValueError(f"GetFeatureInfo body is not an object: {type(payload).__name__}")

    features = payload.get("features") or []
    if not isinstance(features, list):
        raise ValueError("GetFeatureInfo 'features' is not a list")
    if not features:
        return None

    first = features[0]
    if not isinstance(first, dict):
        raise ValueError("GetFeatureInfo feature is not an object")
    properties = first.get("properties") or {}
    if not isinstance(properties, dict):
        raise ValueError("GetFeatureInfo feature properties are not an object")
    return properties
