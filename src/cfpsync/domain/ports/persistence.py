"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from cfpsync.domain.model import (
        Conference,
        ConferenceSecret,
        EmailIndexEntry,
        Person,
        Session,
        Track,
    )


@runtime_checkable
class PersonRepository(Protocol):
    """Persistence contract for people."""

    def get(self, person_id: UUID) -> Person | None: ...

    def find_by_speaker_external_ids(self, external_ids: Iterable[str]) -> Sequence[Person]: ...

    def find_submitters_without_account(self, conference_id: str) -> Sequence[Person]: ...

    def put(self, person: Person) -> None: ...

    def delete(self, person_id: UUID) -> None: ...


@runtime_checkable
class SessionRepository(Protocol):
    """Persistence contract for sessions."""

    def list_for_conference(self, conference_id: str) -> Sequence[Session]: ...

    def put(self, session: Session) -> None: ...

    def delete(self, session_id: UUID) -> None: ...


@runtime_checkable
class TrackRepository(Protocol):
    """Persistence contract for conference tracks."""

    def list_for_conference(self, conference_id: str) -> Sequence[Track]: ...

    def put(self, track: Track) -> None: ...


@runtime_checkable
class EmailIndexRepository(Protocol):
    """Key-value store of normalized email -> owning person.

    ``get(..., for_update=True)`` must lock the key for the rest of the
    surrounding transaction where the backend supports it, and ``add`` must
    reject a second entry for the same key.
    """

    def get(self, key: str, *, for_update: bool = False) -> EmailIndexEntry | None: ...

    def add(self, entry: EmailIndexEntry) -> None: ...

    def delete(self, key: str) -> None: ...


@runtime_checkable
class ConferenceRepository(Protocol):
    """Persistence contract for conferences."""

    def get(self, conference_id: str) -> Conference | None: ...

    def put(self, conference: Conference) -> None: ...


@runtime_checkable
class ConferenceSecretRepository(Protocol):
    """Read access to per-conference credentials."""

    def find(self, conference_id: str, name: str) -> ConferenceSecret | None: ...

    def add(self, secret: ConferenceSecret) -> None: ...
