# wms_grading/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from pathlib import Path

class Settings(BaseSettings):
    app_name: str = Field(default="WMS Grading API", alias="APP_NAME")
    app_env: str = Field(default="dev", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Area sampling defaults
    area_radius_meters: float = Field(default=500.0, alias="AREA_RADIUS_METERS")
    grid_resolution_meters: float = Field(default=50.0, alias="GRID_RESOLUTION_METERS")
    max_samples_per_layer: int = Field(default=400, alias="MAX_SAMPLES_PER_LAYER")

    # Flat-earth degree lengths. The longitude value only holds near ~52°N
    # (Netherlands); recalibrate for other latitude bands.
    meters_per_degree_lat: float = Field(default=111_000.0, alias="METERS_PER_DEGREE_LAT")
    meters_per_degree_lng: float = Field(default=69_000.0, alias="METERS_PER_DEGREE_LNG")

    # Upstream request policy
    max_retries: int = Field(default=3, alias="MAX_RETRIES")
    retry_delay_ms: int = Field(default=1000, alias="RETRY_DELAY_MS")
    concurrent_requests: int = Field(default=5, alias="CONCURRENT_REQUESTS")
    batch_delay_ms: int = Field(default=200, alias="BATCH_DELAY_MS")
    request_timeout_s: float = Field(default=30.0, alias="REQUEST_TIMEOUT_S")

    # Value extraction field lists (matched as lowercase substrings of attribute keys)
    numeric_field_priority: list[str] = Field(
        default=[
            "value",
            "waarde",
            "gray_index",
            "pixel_value",
            "concentration",
            "concentratie",
            "percentage",
            "score",
            "niveau",
            "level",
            "aantal",
            "count",
        ],
        alias="NUMERIC_FIELD_PRIORITY",
    )
    excluded_key_fragments: list[str] = Field(default=["id", "name", "naam"], alias="EXCLUDED_KEY_FRAGMENTS")
    identifier_key_fragments: list[str] = Field(default=["id"], alias="IDENTIFIER_KEY_FRAGMENTS")

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[1] / ".env"),  # wms_grading/.env
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

settings = Settings()
