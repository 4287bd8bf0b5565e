"""SQLAlchemy adapter package for cfpsync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyConferenceRepository,
    SqlAlchemyConferenceSecretRepository,
    SqlAlchemyEmailIndexRepository,
    SqlAlchemyPersonRepository,
    SqlAlchemySessionRepository,
    SqlAlchemyTrackRepository,
)

__all__ = [
    "SqlAlchemyConferenceRepository",
    "SqlAlchemyConferenceSecretRepository",
    "SqlAlchemyEmailIndexRepository",
    "SqlAlchemyPersonRepository",
    "SqlAlchemySessionRepository",
    "SqlAlchemyTrackRepository",
    "create_all_tables",
    "mapper_registry",
    "start_mappers",
]
