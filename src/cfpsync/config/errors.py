"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A configuration value read from the environment or the command line is unusable."""
