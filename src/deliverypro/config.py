"""Application configuration and settings management."""

from typing import Any

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DELIVERYPRO_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "DeliveryPro Route Engine"
    api_prefix: str = "/api"
    max_deliveries: int = Field(
        default=25,
        ge=1,
        description="Largest number of distinct delivery addresses accepted in one run.",
    )
    default_service_minutes: float = Field(default=5.0, ge=0.0)
    fuel_price_per_liter: float = Field(default=1.5, ge=0.0)
    fallback_base_seconds_per_km: float = Field(
        default=180.0,
        gt=0.0,
        description="Free-flow seconds per km used when no live provider answers (20 km/h).",
    )
    fallback_traffic_seconds_per_km: float = Field(
        default=240.0,
        gt=0.0,
        description="Traffic-adjusted seconds per km for the closed-form estimate.",
    )
    geocode_batch_size: int = Field(default=10, ge=1)
    geocode_call_delay_seconds: float = Field(default=0.05, ge=0.0)
    geocode_batch_delay_seconds: float = Field(default=0.5, ge=0.0)
    geocode_max_workers: int = Field(default=4, ge=1)
    distance_call_delay_seconds: float = Field(default=0.0, ge=0.0)
    matrix_max_workers: int = Field(default=8, ge=1)
    provider_timeout_seconds: float = Field(default=10.0, gt=0.0)
    matrix_deadline_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Overall budget for the live distance matrix; unanswered legs use the haversine estimate.",
    )
    heavy_traffic_delay_minutes: float = Field(default=30.0, ge=0.0)
    large_batch_stop_count: int = Field(default=15, ge=1)
    near_capacity_ratio: float = Field(default=0.9, gt=0.0)
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
