"""Shared test fixtures."""

import json
import sqlite3
from pathlib import Path

import pytest
import yaml

from weatherapp.ingest.weather_client import WeatherClient
from weatherapp.models.weather import WeatherSnapshot
from weatherapp.session import WeatherSession
from weatherapp.storage.database import connect, run_migrations
from weatherapp.storage.favorites_store import FavoritesStore

TEST_BASE_URL = "https://test-weather.example.com"
CURRENT_URL = f"{TEST_BASE_URL}/current"
FIXTURE_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURE_DIR


@pytest.fixture
def paris_payload() -> dict:
    with open(FIXTURE_DIR / "weatherstack_paris.json") as f:
        return json.load(f)


@pytest.fixture
def api_error_payload() -> dict:
    with open(FIXTURE_DIR / "weatherstack_error.json") as f:
        return json.load(f)


@pytest.fixture
def paris_snapshot() -> WeatherSnapshot:
    return WeatherSnapshot(
        location_name="Paris",
        country="France",
        temperature=18.4,
        humidity=63,
        feels_like=17.5,
        description="Partly cloudy",
        icon_url="https://cdn.example.com/sunny_intervals.png",
    )


@pytest.fixture
def db(tmp_path: Path) -> sqlite3.Connection:
    conn = connect(tmp_path / "test.db")
    run_migrations(conn)
    return conn


@pytest.fixture
def store(db: sqlite3.Connection) -> FavoritesStore:
    favorites = FavoritesStore(db)
    favorites.load()
    return favorites


@pytest.fixture
def client() -> WeatherClient:
    return WeatherClient(access_key="test-key-123", base_url=TEST_BASE_URL)


@pytest.fixture
def session(client: WeatherClient, store: FavoritesStore) -> WeatherSession:
    return WeatherSession(client, store)


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "weather": {"base_url": TEST_BASE_URL, "access_key": "test-key-123"},
        "storage": {"db_path": str(tmp_path / "cli.db")},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
