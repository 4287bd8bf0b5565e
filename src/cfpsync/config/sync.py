"""Synchronization defaults for the import engine."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_int_env_var
from .errors import ConfigurationError

# Hard ceiling of the batch writes this engine was designed against.
STORE_MAX_BATCH_OPERATIONS = 500
DEFAULT_BATCH_LIMIT = 450


@dataclass(frozen=True, slots=True)
class SyncConfig:
    batch_limit: int = DEFAULT_BATCH_LIMIT

    def __post_init__(self) -> None:
        if not 0 < self.batch_limit <= STORE_MAX_BATCH_OPERATIONS:
            raise ConfigurationError(
                f"batch_limit must be between 1 and {STORE_MAX_BATCH_OPERATIONS}, "
                f"got {self.batch_limit}"
            )


def get_sync_config() -> SyncConfig:
    return SyncConfig(batch_limit=optional_int_env_var("CFPSYNC_BATCH_LIMIT", DEFAULT_BATCH_LIMIT))
