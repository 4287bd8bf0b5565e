"""Application configuration helpers."""

from __future__ import annotations

from .conference_hall import ConferenceHallConfig, get_conference_hall_config
from .env import optional_env_var, optional_int_env_var
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging, resolve_log_level
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .sync import DEFAULT_BATCH_LIMIT, SyncConfig, get_sync_config

__all__ = [
    "DEFAULT_BATCH_LIMIT",
    "ConferenceHallConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "get_conference_hall_config",
    "get_database_config",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "optional_int_env_var",
    "resolve_log_level",
]
