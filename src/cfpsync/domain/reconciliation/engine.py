"""Import orchestration for one conference.

Control flow: fetch every submission once, synthesize tracks, resolve
speakers, reconcile sessions, then flush the staged writes in chunks. Planning
runs against one read-only unit of work; each flushed chunk uses its own.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from cfpsync.domain.errors import (
    ConferenceNotFoundError,
    ImportConfigMissingError,
    ReconciliationError,
)
from cfpsync.domain.model import CONFERENCE_HALL_TOKEN_SECRET, utcnow

from .batch import BatchCommitCoordinator, PutConference, flush_staged
from .report import ImportReport
from .sessions import reconcile_sessions
from .speakers import reconcile_speakers
from .tracks import synthesize_tracks

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from cfpsync.domain.model import Conference
    from cfpsync.domain.ports.fetching import SubmissionFetcher
    from cfpsync.domain.ports.unit_of_work import ConferenceUnitOfWork

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImportRequest:
    """Already authenticated and authorized caller context."""

    conference_id: str
    requester_email: str = ""


def format_timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds")


def import_conference(
    request: ImportRequest,
    *,
    fetcher: SubmissionFetcher,
    unit_of_work_factory: Callable[[], ConferenceUnitOfWork],
    batch_limit: int,
    clock: Callable[[], datetime] = utcnow,
) -> ImportReport:
    """Reconcile the conference's submissions into the local store.

    Fatal errors propagate as ``ReconciliationError`` carrying the conference
    id and the report reached so far. Chunks committed before a failure stay
    committed; rerunning the import converges.
    """

    conference_id = request.conference_id
    report = ImportReport(imported_at=format_timestamp(clock()))
    batch = BatchCommitCoordinator(unit_of_work_factory, limit=batch_limit, clock=clock)
    log.info("Starting import of conference %s for %s", conference_id, request.requester_email)

    try:
        conference, token = load_import_settings(conference_id, unit_of_work_factory)
        submissions = fetcher(event_name=conference.conference_hall_name, token=token)
        log.info("Fetched %s submissions for conference %s", len(submissions), conference_id)

        with unit_of_work_factory() as uow:
            repositories = uow.repositories
            tracks = synthesize_tracks(
                submissions,
                conference_id=conference_id,
                existing_tracks=repositories.tracks.list_for_conference(conference_id),
                batch=batch,
                report=report,
            )
            speakers = reconcile_speakers(
                submissions,
                conference=conference,
                repositories=repositories,
                batch=batch,
                report=report,
            )
            reconcile_sessions(
                submissions,
                conference=conference,
                tracks=tracks,
                speakers=speakers,
                existing_sessions=repositories.sessions.list_for_conference(conference_id),
                batch=batch,
                report=report,
            )

        batch.stage(
            PutConference(
                replace(conference, conference_hall_last_communication=report.imported_at)
            ),
            label="conference",
        )
        flush_staged(batch, run=f"Import of conference {conference_id}")
    except ReconciliationError as exc:
        report.chunks_committed = batch.chunks_committed
        log.warning(
            "Import of conference %s failed after %s committed chunks",
            conference_id,
            batch.chunks_committed,
        )
        exc.with_context(conference_id=conference_id, report=report)
        raise

    report.chunks_committed = batch.chunks_committed
    log.info("Import of conference %s finished: %s", conference_id, report.as_dict())
    return report


def load_import_settings(
    conference_id: str,
    unit_of_work_factory: Callable[[], ConferenceUnitOfWork],
) -> tuple[Conference, str]:
    """Return the conference and its Conference Hall token, or raise before any fetch."""

    with unit_of_work_factory() as uow:
        conference = uow.repositories.conferences.get(conference_id)
        if conference is None:
            raise ConferenceNotFoundError(
                f"Conference {conference_id} does not exist", conference_id=conference_id
            )
        secret = uow.repositories.secrets.find(conference_id, CONFERENCE_HALL_TOKEN_SECRET)

    token = secret.value.strip() if secret is not None else ""
    missing: list[str] = []
    if not conference.conference_hall_name.strip():
        missing.append("conference_hall_name")
    if not token:
        missing.append(CONFERENCE_HALL_TOKEN_SECRET)
    if missing:
        raise ImportConfigMissingError(
            f"Conference {conference_id} is missing import settings: {', '.join(missing)}",
            conference_id=conference_id,
            missing=tuple(missing),
        )
    return conference, token
