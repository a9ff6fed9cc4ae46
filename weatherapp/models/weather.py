"""Weather snapshot and favorite city models."""

from dataclasses import dataclass

from weatherapp.models.common import FavoriteId


@dataclass(frozen=True)
class WeatherSnapshot:
    location_name: str
    country: str
    temperature: float  # °C
    humidity: float  # percent
    feels_like: float  # °C
    description: str
    icon_url: str


@dataclass(frozen=True)
class FavoriteCity:
    id: FavoriteId
    name: str
