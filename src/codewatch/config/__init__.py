"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .open_data import OpenDataConfig, get_open_data_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_http_cache_path,
    get_storage_config,
)
from .sync import SyncConfig, get_sync_config
from .twilio import TwilioConfig, get_twilio_config

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "OpenDataConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "TwilioConfig",
    "configure_logging",
    "get_database_config",
    "get_http_cache_path",
    "get_open_data_config",
    "get_storage_config",
    "get_sync_config",
    "get_twilio_config",
    "require_env_vars",
]
