"""Chunked batch commits.

Staged mutations are grouped into write units (mutations that must land
together, e.g. a person and its email claim) and flushed in chunks of at most
``limit`` operations. Every chunk is one transaction; the sequence of chunks
is not. A failure in chunk N leaves chunks before N committed, so callers rely
on diff-before-write to make a rerun converge instead of rolling back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import singledispatch
from logging import getLogger
from typing import TYPE_CHECKING

from cfpsync.domain.errors import CommitFailedError, ReconciliationError
from cfpsync.domain.model import utcnow

from .identity import EmailIdentityIndex

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime
    from uuid import UUID

    from cfpsync.domain.model import Conference, Person, Session, Track
    from cfpsync.domain.ports.unit_of_work import ConferenceRepositories, ConferenceUnitOfWork

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PutPerson:
    person: Person


@dataclass(frozen=True, slots=True)
class PutSession:
    session: Session


@dataclass(frozen=True, slots=True)
class PutTrack:
    track: Track


@dataclass(frozen=True, slots=True)
class PutConference:
    conference: Conference


@dataclass(frozen=True, slots=True)
class ClaimEmail:
    email: str
    person_id: UUID


@dataclass(frozen=True, slots=True)
class ReleaseEmail:
    key: str
    person_id: UUID


@dataclass(frozen=True, slots=True)
class DeletePerson:
    person_id: UUID


@dataclass(frozen=True, slots=True)
class DeleteSession:
    session_id: UUID


type Mutation = (
    PutPerson
    | PutSession
    | PutTrack
    | PutConference
    | ClaimEmail
    | ReleaseEmail
    | DeletePerson
    | DeleteSession
)


@dataclass(frozen=True, slots=True)
class WriteUnit:
    """Mutations that are committed in the same chunk."""

    mutations: tuple[Mutation, ...]
    label: str = ""

    def __len__(self) -> int:
        return len(self.mutations)


@dataclass(slots=True)
class BatchCommitCoordinator:
    unit_of_work_factory: Callable[[], ConferenceUnitOfWork]
    limit: int
    clock: Callable[[], datetime] = utcnow
    chunks_committed: int = 0
    operations_committed: int = 0
    _pending: list[WriteUnit] = field(default_factory=list["WriteUnit"], repr=False)

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError(f"Batch limit must be positive, got {self.limit}")

    @property
    def pending(self) -> tuple[WriteUnit, ...]:
        return tuple(self._pending)

    @property
    def pending_operations(self) -> int:
        return sum(len(unit) for unit in self._pending)

    def stage(self, *mutations: Mutation, label: str = "") -> None:
        if not mutations:
            return
        unit = WriteUnit(mutations=mutations, label=label)
        if len(unit) > self.limit:
            raise ValueError(
                f"Write unit {label or '<unnamed>'} has {len(unit)} operations, "
                f"more than the batch limit of {self.limit}"
            )
        self._pending.append(unit)

    def plan_chunks(self) -> list[list[WriteUnit]]:
        """Pack pending units, in order, into chunks within the limit."""

        return list(_pack_units(self._pending, self.limit))

    def flush(self) -> int:
        """Commit every pending unit and return the number of chunks committed."""

        chunks = self.plan_chunks()
        committed = 0
        for index, chunk in enumerate(chunks, start=1):
            operations = sum(len(unit) for unit in chunk)
            with self.unit_of_work_factory() as uow:
                now = self.clock()
                for unit in chunk:
                    for mutation in unit.mutations:
                        apply_mutation(mutation, uow.repositories, now)
                uow.commit()
            committed += 1
            self.chunks_committed += 1
            self.operations_committed += operations
            # Committed units must never be replayed by a later flush.
            del self._pending[: len(chunk)]
            log.info("Committed chunk %s/%s (%s operations)", index, len(chunks), operations)
        return committed


def flush_staged(batch: BatchCommitCoordinator, *, run: str) -> int:
    """Flush ``batch``; a store failure becomes ``CommitFailedError``.

    Reconciliation errors (e.g. an email claim lost to a concurrent writer)
    propagate unchanged.
    """

    try:
        return batch.flush()
    except ReconciliationError:
        raise
    except Exception as exc:
        raise CommitFailedError(
            f"{run} failed after {batch.chunks_committed} committed chunks: {exc}",
            chunks_committed=batch.chunks_committed,
        ) from exc


def _pack_units(units: Iterable[WriteUnit], limit: int) -> Iterable[list[WriteUnit]]:
    chunk: list[WriteUnit] = []
    size = 0
    for unit in units:
        if chunk and size + len(unit) > limit:
            yield chunk
            chunk, size = [], 0
        chunk.append(unit)
        size += len(unit)
    if chunk:
        yield chunk


@singledispatch
def apply_mutation(mutation: object, repositories: ConferenceRepositories, now: datetime) -> None:
    _ = (repositories, now)
    raise TypeError(f"Unsupported mutation: {type(mutation).__name__}")


@apply_mutation.register(PutPerson)
def _(mutation: PutPerson, repositories: ConferenceRepositories, now: datetime) -> None:
    mutation.person.updated_at = now
    repositories.persons.put(mutation.person)


@apply_mutation.register(PutSession)
def _(mutation: PutSession, repositories: ConferenceRepositories, now: datetime) -> None:
    _ = now
    repositories.sessions.put(mutation.session)


@apply_mutation.register(PutTrack)
def _(mutation: PutTrack, repositories: ConferenceRepositories, now: datetime) -> None:
    _ = now
    repositories.tracks.put(mutation.track)


@apply_mutation.register(PutConference)
def _(mutation: PutConference, repositories: ConferenceRepositories, now: datetime) -> None:
    mutation.conference.updated_at = now
    repositories.conferences.put(mutation.conference)


@apply_mutation.register(ClaimEmail)
def _(mutation: ClaimEmail, repositories: ConferenceRepositories, now: datetime) -> None:
    EmailIdentityIndex(repositories.email_index, now=now).claim(mutation.email, mutation.person_id)


@apply_mutation.register(ReleaseEmail)
def _(mutation: ReleaseEmail, repositories: ConferenceRepositories, now: datetime) -> None:
    EmailIdentityIndex(repositories.email_index, now=now).release(mutation.key, mutation.person_id)


@apply_mutation.register(DeletePerson)
def _(mutation: DeletePerson, repositories: ConferenceRepositories, now: datetime) -> None:
    _ = now
    repositories.persons.delete(mutation.person_id)


@apply_mutation.register(DeleteSession)
def _(mutation: DeleteSession, repositories: ConferenceRepositories, now: datetime) -> None:
    _ = now
    repositories.sessions.delete(mutation.session_id)
