"""Configuration module for the filing core."""

from .settings import FilingSettings, get_settings
from .filing_config_loader import (
    FilingConfigLoader,
    FilingTypeConfig,
    clear_config_cache,
    get_config_loader,
)

__all__ = [
    "FilingSettings",
    "get_settings",
    "FilingConfigLoader",
    "FilingTypeConfig",
    "clear_config_cache",
    "get_config_loader",
]
