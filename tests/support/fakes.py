"""In-memory repositories and unit of work for reconciliation tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from cfpsync.domain.errors import EmailExistsError
from cfpsync.domain.ports.unit_of_work import ConferenceRepositories

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from types import TracebackType
    from uuid import UUID

    from cfpsync.domain.model import (
        Conference,
        ConferenceSecret,
        EmailIndexEntry,
        Person,
        Session,
        Track,
    )


class InMemoryPersonRepository:
    def __init__(self) -> None:
        self.items: dict[UUID, Person] = {}

    def get(self, person_id: UUID) -> Person | None:
        return self.items.get(person_id)

    def find_by_speaker_external_ids(self, external_ids: Iterable[str]) -> Sequence[Person]:
        wanted = set(external_ids)
        return [person for person in self.items.values() if person.speaker.external_id in wanted]

    def find_submitters_without_account(self, conference_id: str) -> Sequence[Person]:
        return [
            person
            for person in self.items.values()
            if not person.has_account
            and conference_id in person.speaker.submitted_conference_ids
        ]

    def put(self, person: Person) -> None:
        self.items[person.id] = person

    def delete(self, person_id: UUID) -> None:
        self.items.pop(person_id, None)


class InMemorySessionRepository:
    def __init__(self) -> None:
        self.items: dict[UUID, Session] = {}

    def list_for_conference(self, conference_id: str) -> Sequence[Session]:
        return [
            session
            for session in self.items.values()
            if session.conference.conference_id == conference_id
        ]

    def put(self, session: Session) -> None:
        self.items[session.id] = session

    def delete(self, session_id: UUID) -> None:
        self.items.pop(session_id, None)


class InMemoryTrackRepository:
    def __init__(self) -> None:
        self.items: dict[UUID, Track] = {}

    def list_for_conference(self, conference_id: str) -> Sequence[Track]:
        return [track for track in self.items.values() if track.conference_id == conference_id]

    def put(self, track: Track) -> None:
        self.items[track.id] = track


class InMemoryEmailIndexRepository:
    def __init__(self) -> None:
        self.items: dict[str, EmailIndexEntry] = {}

    def get(self, key: str, *, for_update: bool = False) -> EmailIndexEntry | None:
        _ = for_update
        return self.items.get(key)

    def add(self, entry: EmailIndexEntry) -> None:
        if entry.key in self.items:
            raise EmailExistsError(
                f"Email {entry.key!r} already indexed",
                key=entry.key,
                owner_id=self.items[entry.key].person_id,
                claimant_id=entry.person_id,
            )
        self.items[entry.key] = entry

    def delete(self, key: str) -> None:
        self.items.pop(key, None)


class InMemoryConferenceRepository:
    def __init__(self) -> None:
        self.items: dict[str, Conference] = {}

    def get(self, conference_id: str) -> Conference | None:
        return self.items.get(conference_id)

    def put(self, conference: Conference) -> None:
        self.items[conference.id] = conference


class InMemorySecretRepository:
    def __init__(self) -> None:
        self.items: list[ConferenceSecret] = []

    def find(self, conference_id: str, name: str) -> ConferenceSecret | None:
        for secret in self.items:
            if secret.conference_id == conference_id and secret.name == name:
                return secret
        return None

    def add(self, secret: ConferenceSecret) -> None:
        self.items.append(secret)


@dataclass
class InMemoryStore:
    """Shared state behind every ``FakeUnitOfWork``.

    Writes are visible immediately; ``commits`` counts committed units of work.
    ``fail_on_commit`` makes the n-th commit (1-based) raise ``commit_error``.
    """

    conferences: InMemoryConferenceRepository = field(default_factory=InMemoryConferenceRepository)
    secrets: InMemorySecretRepository = field(default_factory=InMemorySecretRepository)
    persons: InMemoryPersonRepository = field(default_factory=InMemoryPersonRepository)
    email_index: InMemoryEmailIndexRepository = field(
        default_factory=InMemoryEmailIndexRepository
    )
    sessions: InMemorySessionRepository = field(default_factory=InMemorySessionRepository)
    tracks: InMemoryTrackRepository = field(default_factory=InMemoryTrackRepository)
    commits: int = 0
    rollbacks: int = 0
    fail_on_commit: int | None = None
    commit_error: Exception | None = None

    def unit_of_work(self) -> FakeUnitOfWork:
        return FakeUnitOfWork(self)


class FakeUnitOfWork:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self._repositories = ConferenceRepositories(
            conferences=store.conferences,
            secrets=store.secrets,
            persons=store.persons,
            email_index=store.email_index,
            sessions=store.sessions,
            tracks=store.tracks,
        )

    @property
    def repositories(self) -> ConferenceRepositories:
        return self._repositories

    def __enter__(self) -> FakeUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        attempt = self.store.commits + 1
        if self.store.fail_on_commit == attempt and self.store.commit_error is not None:
            raise self.store.commit_error
        self.store.commits = attempt

    def rollback(self) -> None:
        self.store.rollbacks += 1
