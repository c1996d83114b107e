"""Blesstest configuration loading."""

from blesstest.config.settings import (
    DEFAULT_CONFIG_FILENAME,
    BlesstestConfig,
    ConfigError,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILENAME",
    "BlesstestConfig",
    "ConfigError",
    "load_config",
]
