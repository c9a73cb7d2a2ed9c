"""Configuration models for the application."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class FairweatherConfig(BaseSettings):
    """Main configuration for the Fairweather service."""

    # Weather provider (OpenWeatherMap)
    weather_api_key: str = Field(default="", description="OpenWeatherMap API key")
    weather_base_url: str = Field(default="https://api.openweathermap.org/data/2.5")
    weather_timeout_seconds: float = Field(default=10.0, gt=0)
    weather_cache_ttl_seconds: Optional[float] = Field(
        default=None,
        description="Seconds before a cached observation expires; unset keeps entries for the process lifetime",
    )

    # Event storage
    db_path: str = Field(default="./db.json", description="Path of the JSON event store")

    # HTTP Server configuration
    http_host: str = Field(default="0.0.0.0")
    http_port: int = Field(default=3000)
    log_level: str = Field(default="INFO")

    class Config:
        """Pydantic config."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"
