"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from cfpsync.domain.ports.persistence import (
        ConferenceRepository,
        ConferenceSecretRepository,
        EmailIndexRepository,
        PersonRepository,
        SessionRepository,
        TrackRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection.

    One unit of work is one atomic transaction: either ``commit`` lands every
    write made through its repositories or none of them.
    """

    @property
    def repositories(self) -> TRepositories: ...  # the repo list itself should be immutable

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class ConferenceRepositories(RepositoryCollection):
    """Repositories required to reconcile a conference program."""

    conferences: ConferenceRepository
    secrets: ConferenceSecretRepository
    persons: PersonRepository
    email_index: EmailIndexRepository
    sessions: SessionRepository
    tracks: TrackRepository


type ConferenceUnitOfWork = UnitOfWork[ConferenceRepositories]
