"""YAML config loader with dotted-key lookup."""

import logging
from pathlib import Path
from typing import Any

import yaml

from weatherapp.config.schema import AppConfig

logger = logging.getLogger(__name__)

REDACTED = "***"


def load_config(path: str | Path) -> AppConfig:
    """Load and validate config from a YAML file.

    A missing file yields the all-defaults config.
    """
    path = Path(path)
    if not path.exists():
        logger.info("Config %s not found, using defaults", path)
        return AppConfig()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return AppConfig(**raw)


def redacted(config: AppConfig) -> AppConfig:
    """Copy of the config with the access key masked."""
    if config.weather.access_key:
        return config.model_copy(
            update={
                "weather": config.weather.model_copy(
                    update={"access_key": REDACTED}
                )
            }
        )
    return config


def redacted_json(config: AppConfig) -> str:
    """Config as indented JSON with the access key masked."""
    return redacted(config).model_dump_json(indent=2)


def get_config_value(config: AppConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'weather.timeout_seconds'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj
