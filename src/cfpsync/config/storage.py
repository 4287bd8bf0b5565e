"""Where cfpsync keeps its database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "cfpsync"
DEFAULT_DB_FILENAME: Final[str] = "cfpsync.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def sqlite_uri(self) -> str:
        """SQLite URI of the database file; creates the data directory on the way."""

        directory = self.resolve_data_dir()
        directory.mkdir(parents=True, exist_ok=True)
        return f"sqlite+pysqlite:///{directory / self.database_filename}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _platform_data_home() -> Path:
    # %LOCALAPPDATA% on Windows, $XDG_DATA_HOME elsewhere
    if os.name == "nt":
        override, fallback = "LOCALAPPDATA", Path.home() / "AppData" / "Local"
    else:
        override, fallback = "XDG_DATA_HOME", Path.home() / ".local" / "share"
    configured = optional_env_var(override)
    return Path(configured) if configured else fallback


def get_storage_config() -> StorageConfig:
    configured = optional_env_var("CFPSYNC_DATA_DIR")
    data_dir = Path(configured) if configured else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    """``DATABASE_URI`` wins; otherwise a SQLite file in the data directory."""

    uri = optional_env_var("DATABASE_URI")
    if uri is None:
        uri = (storage or get_storage_config()).sqlite_uri()
    return DatabaseConfig(uri=uri)
