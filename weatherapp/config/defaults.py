"""Default endpoint, storage and timeout settings."""

WEATHERSTACK_BASE_URL = "http://api.weatherstack.com"
ACCESS_KEY_ENV = "WEATHERSTACK_ACCESS_KEY"
DEFAULT_TIMEOUT_SECONDS = 10.0

DEFAULT_CONFIG_PATH = "ops/configs/default.yaml"
DEFAULT_DB_PATH = "data/weatherapp.db"
DEFAULT_FAVORITES_KEY = "favorites"
