"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field

from weatherapp.config.defaults import (
    DEFAULT_DB_PATH,
    DEFAULT_FAVORITES_KEY,
    DEFAULT_TIMEOUT_SECONDS,
    WEATHERSTACK_BASE_URL,
)


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class WeatherApiConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = WEATHERSTACK_BASE_URL
    access_key: str = ""  # falls back to WEATHERSTACK_ACCESS_KEY
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0.0, le=120.0)


class StorageConfig(BaseModel):
    model_config = {"extra": "forbid"}

    db_path: str = DEFAULT_DB_PATH
    favorites_key: str = Field(default=DEFAULT_FAVORITES_KEY, min_length=1)


class ServerConfig(BaseModel):
    model_config = {"extra": "forbid"}

    host: str = "127.0.0.1"
    port: int = Field(default=8777, ge=1, le=65535)


class LoggingConfig(BaseModel):
    model_config = {"extra": "forbid"}

    level: LogLevel = LogLevel.INFO


class AppConfig(BaseModel):
    model_config = {"extra": "forbid"}

    weather: WeatherApiConfig = WeatherApiConfig()
    storage: StorageConfig = StorageConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()
