"""Environment variable loaders for configuration."""

from __future__ import annotations

import os

from .errors import ConfigurationError


def optional_env_var(name: str) -> str | None:
    """Return the stripped value of ``name``; unset and blank both read as ``None``."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def optional_int_env_var(name: str, default: int) -> int:
    """Return an integer environment variable, falling back to ``default`` when unset."""

    value = optional_env_var(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc
