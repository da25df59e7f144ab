from dataclasses import dataclass
from itertools import islice
from math import radians, degrees, cos, sin, sqrt, asin, atan2, floor
from typing import Iterator, Optional

from ..schemas.common import GeoCoordinate

EARTH_RADIUS_M = 6_371_000.0

@dataclass
class BBox:
    west: float
    south: float
    east: float
    north: float

    def as_wms_param(self) -> str:
        # minLng,minLat,maxLng,maxLat
        return f"{self.west},{self.south},{self.east},{self.north}"

def point_bbox(lat: float, lon: float, half_size_deg: float = 0.001) -> BBox:
    return BBox(
        west=lon - half_size_deg,
        south=lat - half_size_deg,
        east=lon + half_size_deg,
        north=lat + half_size_deg
    )

def _haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return EARTH_RADIUS_M * 2 * atan2(sqrt(h), sqrt(1 - h))

def haversine_m(a: GeoCoordinate, b: GeoCoordinate) -> float:
    """Great-circle distance in meters between two coordinates."""
    return _haversine(a.lat, a.lon, b.lat, b.lon)

def _row_half_width_deg(center_lat: float, lat: float, radius_m: float) -> Optional[float]:
    # Longitude half-width (degrees) of the circle on this row, from the
    # haversine formula solved for dlon; None when the row misses the circle.
    p1, p2 = radians(center_lat), radians(lat)
    hav_r = sin(radius_m / EARTH_RADIUS_M / 2) ** 2
    hav_dlat = sin((p2 - p1) / 2) ** 2
    if hav_dlat > hav_r:
        return None
    cc = cos(p1) * cos(p2)
    if cc <= 0:
        return 180.0
    x = (hav_r - hav_dlat) / cc
    if x >= 1:
        return 180.0
    return degrees(2 * asin(sqrt(x)))

@dataclass
class GridPoint:
    coordinate: GeoCoordinate
    distance_from_center_m: float
    within_radius: bool = True

def iter_grid(
    center: GeoCoordinate,
    radius_m: float,
    resolution_m: float,
    meters_per_degree_lat: float = 111_000.0,
    meters_per_degree_lng: float = 69_000.0,
) -> Iterator[GridPoint]:
    """
    Regular grid of sample points inside a circle around `center`, lazily.

    The grid is stepped in degrees using flat-earth degree lengths; the default
    longitude length (69 km) is only right around 52°N, elsewhere the grid gets
    stretched or squashed east-west. The circle itself is cut with the
    haversine distance, so every yielded point is within `radius_m`.

    Points are anchored on the center (which is always included) and come out
    row-major: latitude ascending, then longitude ascending. Each row only
    visits the columns that can reach the circle, so the work follows the
    number of points taken, not the lattice size.
    """
    step_lat = resolution_m / meters_per_degree_lat
    step_lng = resolution_m / meters_per_degree_lng
    # same cell count both axes; tolerance keeps e.g. 500/50 at exactly 10
    n = int(floor(radius_m / resolution_m + 1e-9))

    for i in range(-n, n + 1):
        lat = center.lat + i * step_lat
        half_width = _row_half_width_deg(center.lat, lat, radius_m)
        if half_width is None:
            continue
        # one extra column each side; the haversine check below decides
        m = min(n, int(floor(half_width / step_lng)) + 1)
        for j in range(-m, m + 1):
            lon = center.lon + j * step_lng
            distance = _haversine(center.lat, center.lon, lat, lon)
            if distance <= radius_m:
                yield GridPoint(coordinate=GeoCoordinate(lat=lat, lon=lon), distance_from_center_m=distance)

def generate_grid(
    center: GeoCoordinate,
    radius_m: float,
    resolution_m: float,
    meters_per_degree_lat: float = 111_000.0,
    meters_per_degree_lng: float = 69_000.0,
    max_points: Optional[int] = None,
) -> list[GridPoint]:
    """First `max_points` grid points in row-major order (all of them when None)."""
    points = iter_grid(center, radius_m, resolution_m, meters_per_degree_lat, meters_per_degree_lng)
    return list(islice(points, max_points))
