"""Undo an import: drop the conference's sessions and its import-only speakers."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from cfpsync.domain.errors import ConferenceNotFoundError, ReconciliationError
from cfpsync.domain.model import utcnow

from .batch import (
    BatchCommitCoordinator,
    DeletePerson,
    DeleteSession,
    PutConference,
    ReleaseEmail,
    flush_staged,
)
from .engine import format_timestamp
from .report import ResetReport

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from cfpsync.domain.model import Person
    from cfpsync.domain.ports.unit_of_work import ConferenceUnitOfWork

    from .batch import Mutation

log = getLogger(__name__)


def imported_only_for(person: Person, conference_id: str) -> bool:
    """Whether ``person`` exists solely because of imports into ``conference_id``."""

    if person.has_account:
        return False
    conference_ids = set(person.speaker.submitted_conference_ids)
    return conference_ids == {conference_id}


def reset_conference_import(
    conference_id: str,
    *,
    unit_of_work_factory: Callable[[], ConferenceUnitOfWork],
    batch_limit: int,
    clock: Callable[[], datetime] = utcnow,
) -> ResetReport:
    """Delete what importing ``conference_id`` created.

    Speakers with an account or submissions to other conferences are kept,
    whether or not they are still flagged as speakers. The conference's
    ``updated_at`` is refreshed in the last chunk.
    Email index entries are released only while owned by the deleted person.
    """

    report = ResetReport(reset_at=format_timestamp(clock()))
    batch = BatchCommitCoordinator(unit_of_work_factory, limit=batch_limit, clock=clock)

    try:
        with unit_of_work_factory() as uow:
            repositories = uow.repositories
            conference = repositories.conferences.get(conference_id)
            if conference is None:
                raise ConferenceNotFoundError(
                    f"Conference {conference_id} does not exist", conference_id=conference_id
                )
            sessions = repositories.sessions.list_for_conference(conference_id)
            speakers = [
                person
                for person in repositories.persons.find_submitters_without_account(conference_id)
                if imported_only_for(person, conference_id)
            ]

        for session in sessions:
            batch.stage(DeleteSession(session.id), label=f"session:{session.id}")
            report.session_deleted += 1
        for person in speakers:
            mutations: list[Mutation] = [DeletePerson(person.id)]
            if person.email_key:
                mutations.insert(0, ReleaseEmail(person.email_key, person.id))
            batch.stage(*mutations, label=f"speaker:{person.id}")
            report.speaker_deleted += 1

        # PutConference stamps updated_at
        batch.stage(PutConference(conference), label="conference")
        flush_staged(batch, run=f"Reset of conference {conference_id}")
    except ReconciliationError as exc:
        exc.with_context(conference_id=conference_id, report=report)
        raise

    log.info(
        "Reset conference %s: %s sessions and %s speakers deleted in %s chunks",
        conference_id,
        report.session_deleted,
        report.speaker_deleted,
        batch.chunks_committed,
    )
    return report
