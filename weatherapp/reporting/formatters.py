"""Output formatters for weather snapshots, query state and favorites."""

import math

from weatherapp.models.query import QueryState
from weatherapp.models.weather import FavoriteCity, WeatherSnapshot


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded up (18.5 -> 19, -0.5 -> 0)."""
    return math.floor(value + 0.5)


def format_temperature(value: float) -> str:
    return f"{round_half_up(value)}°C"


def format_snapshot_text(s: WeatherSnapshot) -> str:
    """Plain text card for terminal output."""
    heading = s.location_name
    if s.country:
        heading = f"{heading}, {s.country}"
    lines = [
        heading,
        f"{format_temperature(s.temperature)}  {s.description}".rstrip(),
        f"Humidity: {round_half_up(s.humidity)}%",
        f"Feels like: {format_temperature(s.feels_like)}",
    ]
    if s.icon_url:
        lines.append(f"Icon: {s.icon_url}")
    return "\n".join(lines)


def snapshot_to_dict(s: WeatherSnapshot) -> dict:
    """JSON-ready view of a snapshot with display values precomputed."""
    return {
        "location_name": s.location_name,
        "country": s.country,
        "temperature": s.temperature,
        "temperature_display": format_temperature(s.temperature),
        "humidity": s.humidity,
        "humidity_display": f"{round_half_up(s.humidity)}%",
        "feels_like": s.feels_like,
        "feels_like_display": format_temperature(s.feels_like),
        "description": s.description,
        "icon_url": s.icon_url,
    }


def favorite_to_dict(f: FavoriteCity) -> dict:
    return {"id": f.id, "name": f.name}


def format_favorites_text(favorites: list[FavoriteCity]) -> str:
    if not favorites:
        return "No favorite cities yet."
    lines = ["Favorite Cities:"]
    for f in favorites:
        lines.append(f"  {f.id}  {f.name}")
    return "\n".join(lines)


def state_to_dict(state: QueryState) -> dict:
    return {
        "status": state.status.value,
        "loading": state.loading,
        "city": state.city,
        "request_id": state.request_id,
        "snapshot": snapshot_to_dict(state.snapshot) if state.snapshot else None,
        "error": state.error,
        "error_kind": state.error_kind.value if state.error_kind else None,
    }
