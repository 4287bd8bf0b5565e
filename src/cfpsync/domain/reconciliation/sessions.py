"""Session reconciliation: submissions -> Session records."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from cfpsync.domain.labels import find_by_label, label_key, labels_overlap, normalize_label
from cfpsync.domain.model import (
    Session,
    SessionConference,
    SessionLevel,
    fill_speaker_slots,
)
from cfpsync.domain.status import next_status

from .batch import PutSession

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from uuid import UUID

    from cfpsync.domain.model import Conference, Submission, Track

    from .batch import BatchCommitCoordinator
    from .report import ImportReport
    from .speakers import SpeakerResolution

log = getLogger(__name__)


def map_level(level: str | None) -> SessionLevel:
    try:
        return SessionLevel(level or "")
    except ValueError:
        return SessionLevel.BEGINNER


def find_session_type_id(conference: Conference, formats: Sequence[str]) -> str:
    """Resolve the session type of a submission from its format labels.

    The conference's explicit type -> format mapping is tried first, then the
    session type names themselves. Returns ``""`` when nothing matches.
    """

    normalized_formats = [label for label in map(normalize_label, formats) if label]
    if not normalized_formats:
        return ""

    for session_type_id, mapped_format in conference.session_type_format_mapping.items():
        normalized_mapped = normalize_label(mapped_format)
        if not any(labels_overlap(label, normalized_mapped) for label in normalized_formats):
            continue
        if conference.session_type_by_id(session_type_id) is not None:
            return session_type_id

    found = find_by_label(conference.session_types, formats, name_of=lambda item: item.name)
    return found.id if found is not None else ""


def find_track_id(tracks: Iterable[Track], categories: Sequence[str]) -> UUID | None:
    """Track of the first category with the same label key, else a containment match."""

    candidates = list(tracks)
    by_key = {label_key(track.name): track for track in reversed(candidates)}
    for category in categories:
        track = by_key.get(label_key(category)) if category.strip() else None
        if track is not None:
            return track.id
    found = find_by_label(candidates, categories, name_of=lambda track: track.name)
    return found.id if found is not None else None


def session_search_text(submission: Submission) -> str:
    values = (
        submission.title,
        submission.abstract,
        submission.references,
        *submission.categories,
        *submission.tags,
        *(speaker.name or "" for speaker in submission.speakers),
    )
    return " ".join(value for value in values if value).lower()


def map_session(
    submission: Submission,
    *,
    conference: Conference,
    tracks: Sequence[Track],
    speaker_ids: Sequence[UUID],
    existing: Session | None,
    imported_at: str,
) -> Session:
    """Build the imported content of a session.

    Only the fields owned by the importer are set on top of ``existing``;
    ``last_change_date`` is left alone and stamped by the caller on write.
    """

    current_status = existing.conference.status if existing is not None else None
    session_type_id = find_session_type_id(conference, submission.formats)
    session_type = conference.session_type_by_id(session_type_id) if session_type_id else None
    if session_type is not None:
        session_type_label = session_type.name
    else:
        session_type_label = submission.formats[0] if submission.formats else ""

    languages = tuple(language.lower() for language in submission.languages if language)
    submit_date = submission.submitted_at or ""
    if not submit_date and existing is not None:
        submit_date = existing.conference.submit_date
    slots, dropped = fill_speaker_slots(speaker_ids)
    if dropped:
        log.warning(
            "Submission %s has %s speakers, keeping the first %s",
            submission.external_id,
            len(speaker_ids),
            len(speaker_ids) - dropped,
        )

    sub_record = SessionConference(
        conference_id=conference.id,
        status=next_status(
            submission.deliberation_status,
            submission.confirmation_status,
            current_status,
        ),
        external_id=submission.external_id,
        session_type_id=session_type_id,
        track_id=find_track_id(tracks, submission.categories),
        submit_date=submit_date or imported_at,
        level=map_level(submission.level),
        languages=languages or (conference.primary_language,),
        review_average=float(submission.review.average or 0),
        review_votes=submission.review.votes,
    )
    content = {
        "title": submission.title,
        "abstract": submission.abstract,
        "references": submission.references,
        "session_type": session_type_label,
        "speaker1_id": slots[0],
        "speaker2_id": slots[1],
        "speaker3_id": slots[2],
        "search": session_search_text(submission),
        "conference": sub_record,
    }
    if existing is None:
        return Session(last_change_date=imported_at, **content)
    return replace(existing, **content)


def same_imported_session(left: Session, right: Session) -> bool:
    return _imported_fields(left) == _imported_fields(right)


def _imported_fields(session: Session) -> tuple[object, ...]:
    return (
        session.title,
        session.abstract,
        session.references,
        session.session_type,
        session.speaker_slots,
        session.search,
        session.conference,
    )


def reconcile_sessions(
    submissions: Sequence[Submission],
    *,
    conference: Conference,
    tracks: Sequence[Track],
    speakers: SpeakerResolution,
    existing_sessions: Iterable[Session],
    batch: BatchCommitCoordinator,
    report: ImportReport,
) -> None:
    """Stage the session writes needed to mirror ``submissions``."""

    by_external_id: dict[str, Session] = {}
    for session in existing_sessions:
        external_id = session.conference.external_id
        if external_id:
            by_external_id.setdefault(external_id, session)

    for submission in submissions:
        existing = by_external_id.get(submission.external_id)
        speaker_ids = speakers.resolve(speaker.external_id for speaker in submission.speakers)
        mapped = map_session(
            submission,
            conference=conference,
            tracks=tracks,
            speaker_ids=speaker_ids,
            existing=existing,
            imported_at=report.imported_at,
        )

        if existing is not None and same_imported_session(existing, mapped):
            report.session_unchanged += 1
            continue

        mapped.last_change_date = report.imported_at
        batch.stage(PutSession(mapped), label=f"session:{submission.external_id}")
        by_external_id[submission.external_id] = mapped
        if existing is None:
            report.session_added += 1
        else:
            report.session_updated += 1

    log.info(
        "Sessions: %s added, %s updated, %s unchanged",
        report.session_added,
        report.session_updated,
        report.session_unchanged,
    )
