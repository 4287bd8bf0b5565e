"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import SubmissionFetcher
from .persistence import (
    ConferenceRepository,
    ConferenceSecretRepository,
    EmailIndexRepository,
    PersonRepository,
    SessionRepository,
    TrackRepository,
)
from .unit_of_work import (
    ConferenceRepositories,
    ConferenceUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ConferenceRepositories",
    "ConferenceRepository",
    "ConferenceSecretRepository",
    "ConferenceUnitOfWork",
    "EmailIndexRepository",
    "PersonRepository",
    "RepositoryCollection",
    "SessionRepository",
    "SubmissionFetcher",
    "TrackRepository",
    "UnitOfWork",
]
