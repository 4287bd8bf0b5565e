"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def resolve_log_level(default: int = logging.INFO) -> int:
    """Level named by ``CFPSYNC_LOG_LEVEL`` (e.g. ``DEBUG``), else ``default``."""

    name = optional_env_var("CFPSYNC_LOG_LEVEL")
    if name is None:
        return default
    level = logging.getLevelNamesMapping().get(name.upper())
    if level is None:
        raise ConfigurationError(f"CFPSYNC_LOG_LEVEL is not a logging level: {name!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Configure the root logger for CLI output.

    ``force=True`` replaces handlers installed earlier, e.g. by pytest.
    """

    logging.basicConfig(
        level=resolve_log_level() if level is None else level,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
