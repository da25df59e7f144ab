from pydantic import BaseModel, ConfigDict, Field

class GeoCoordinate(BaseModel):
    """Latitude/longitude pair in degrees (WGS84)."""
    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float

class Location(GeoCoordinate):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
