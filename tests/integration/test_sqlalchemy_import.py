from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select

from cfpsync.adapters.sqlalchemy.mappings import (
    email_index_table,
    person_table,
    session_table,
    track_table,
)
from cfpsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
from cfpsync.domain.errors import (
    CommitFailedError,
    ConferenceNotFoundError,
    EmailExistsError,
    ImportConfigMissingError,
    UpstreamUnavailableError,
)
from cfpsync.domain.model import Person, SessionStatus
from cfpsync.domain.reconciliation import (
    ImportRequest,
    create_person,
    import_conference,
)
from tests.helpers.conference import (
    CONFERENCE_ID,
    FailingFetcher,
    StaticFetcher,
    make_conference,
    make_speaker,
    make_submission,
    seed_conference,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sqlalchemy.engine import Engine

    from cfpsync.domain.model import Submission
    from cfpsync.domain.reconciliation import ImportReport

FIRST_RUN = datetime(2026, 10, 19, 8, 0, tzinfo=UTC)

type UnitOfWorkFactory = Callable[[], SqlAlchemyUnitOfWork]


def _submissions() -> list[Submission]:
    grace = make_speaker("spk-1", name="Grace Hopper", email="Grace@Example.com")
    return [
        make_submission(
            "prop-1",
            speakers=[grace],
            formats=("Conference (40 min)",),
            categories=("Dev Ops",),
            deliberation_status="ACCEPTED",
            confirmation_status="CONFIRMED",
        ),
        make_submission(
            "prop-2",
            speakers=[
                make_speaker("spk-1", name=None, bio="Compiler pioneer."),
                make_speaker("spk-2", name="Alan Turing", email="alan@example.com"),
            ],
            formats=("Workshop",),
            categories=("devops",),
        ),
    ]


def _run(
    unit_of_work_factory: UnitOfWorkFactory,
    submissions: Sequence[Submission],
    *,
    at: datetime = FIRST_RUN,
    batch_limit: int = 450,
) -> ImportReport:
    return import_conference(
        ImportRequest(conference_id=CONFERENCE_ID, requester_email="orga@example.com"),
        fetcher=StaticFetcher(submissions),
        unit_of_work_factory=unit_of_work_factory,
        batch_limit=batch_limit,
        clock=lambda: at,
    )


def _snapshot(engine: Engine) -> dict[str, list[tuple[object, ...]]]:
    with engine.connect() as connection:
        return {
            table.name: [
                tuple(row)
                for row in connection.execute(select(table).order_by(*table.primary_key.columns))
            ]
            for table in (person_table, email_index_table, session_table, track_table)
        }


def test_import_creates_program(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    seed_conference(sqlite_unit_of_work)
    fetcher = StaticFetcher(_submissions())

    report = import_conference(
        ImportRequest(conference_id=CONFERENCE_ID),
        fetcher=fetcher,
        unit_of_work_factory=sqlite_unit_of_work,
        batch_limit=450,
        clock=lambda: FIRST_RUN,
    )

    assert fetcher.calls == [("devfest-2026", "ch-token")]
    assert report.imported_at == "2026-10-19T08:00:00.000+00:00"
    assert (report.track_added, report.speaker_added, report.session_added) == (1, 2, 2)
    assert report.chunks_committed == 1

    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        (track,) = repositories.tracks.list_for_conference(CONFERENCE_ID)
        sessions = {
            session.conference.external_id: session
            for session in repositories.sessions.list_for_conference(CONFERENCE_ID)
        }
        grace, alan = sorted(
            repositories.persons.find_by_speaker_external_ids(["spk-1", "spk-2"]),
            key=lambda person: person.speaker.external_id or "",
        )
        conference = repositories.conferences.get(CONFERENCE_ID)
        grace_entry = repositories.email_index.get("grace@example.com")

    assert track.name == "Dev Ops"
    talk = sessions["prop-1"]
    assert talk.conference.session_type_id == "st1"
    assert talk.conference.track_id == track.id
    assert talk.conference.status is SessionStatus.SPEAKER_CONFIRMED
    assert talk.speaker_slots == (grace.id, None, None)
    workshop = sessions["prop-2"]
    assert workshop.conference.session_type_id == "st2"
    assert workshop.conference.track_id == track.id
    assert workshop.speaker_ids == (grace.id, alan.id)
    assert grace.speaker.bio == "Compiler pioneer."
    assert (grace.first_name, grace.last_name) == ("Grace", "Hopper")
    assert grace.speaker.submitted_conference_ids == (CONFERENCE_ID,)
    assert grace_entry is not None
    assert grace_entry.person_id == grace.id
    assert conference is not None
    assert conference.conference_hall_last_communication == report.imported_at


def test_rerun_is_idempotent(
    sqlite_unit_of_work: UnitOfWorkFactory,
    sqlite_engine: Engine,
) -> None:
    seed_conference(sqlite_unit_of_work)
    _run(sqlite_unit_of_work, _submissions())
    before = _snapshot(sqlite_engine)

    report = _run(sqlite_unit_of_work, _submissions(), at=FIRST_RUN + timedelta(hours=1))

    assert report.written == 0
    assert (report.track_unchanged, report.speaker_unchanged, report.session_unchanged) == (
        1,
        2,
        2,
    )
    assert _snapshot(sqlite_engine) == before


def test_changed_submission_is_updated(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    seed_conference(sqlite_unit_of_work)
    _run(sqlite_unit_of_work, _submissions())
    changed = _submissions()
    changed[0] = make_submission(
        "prop-1",
        title="Renamed talk",
        speakers=changed[0].speakers,
        formats=("Conference (40 min)",),
        categories=("Dev Ops",),
        deliberation_status="ACCEPTED",
        confirmation_status="DECLINED",
    )
    later = FIRST_RUN + timedelta(days=1)

    report = _run(sqlite_unit_of_work, changed, at=later)

    assert report.session_updated == 1
    assert report.session_unchanged == 1
    with sqlite_unit_of_work() as uow:
        sessions = {
            session.conference.external_id: session
            for session in uow.repositories.sessions.list_for_conference(CONFERENCE_ID)
        }
    assert sessions["prop-1"].title == "Renamed talk"
    assert sessions["prop-1"].conference.status is SessionStatus.DECLINED_BY_SPEAKER
    assert sessions["prop-1"].last_change_date == report.imported_at
    assert sessions["prop-2"].last_change_date == "2026-10-19T08:00:00.000+00:00"


def test_identity_conflict_aborts_without_writes(
    sqlite_unit_of_work: UnitOfWorkFactory,
    sqlite_engine: Engine,
) -> None:
    seed_conference(sqlite_unit_of_work)
    owner = create_person(
        Person(email="shared@example.com", has_account=True),
        unit_of_work_factory=sqlite_unit_of_work,
    )
    _run(sqlite_unit_of_work, _submissions())
    before = _snapshot(sqlite_engine)
    conflicting = [
        make_submission(
            "prop-3",
            speakers=[make_speaker("spk-2", name="Alan Turing", email="shared@example.com")],
        )
    ]

    with pytest.raises(EmailExistsError) as excinfo:
        _run(sqlite_unit_of_work, conflicting, at=FIRST_RUN + timedelta(hours=1))

    error = excinfo.value
    assert error.conference_id == CONFERENCE_ID
    assert error.owner_id == owner.id
    assert error.report is not None
    assert error.report.chunks_committed == 0
    assert _snapshot(sqlite_engine) == before


def test_missing_token_fails_before_fetch(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    seed_conference(sqlite_unit_of_work, token=None)
    fetcher = StaticFetcher(_submissions())

    with pytest.raises(ImportConfigMissingError) as excinfo:
        import_conference(
            ImportRequest(conference_id=CONFERENCE_ID),
            fetcher=fetcher,
            unit_of_work_factory=sqlite_unit_of_work,
            batch_limit=450,
        )

    assert excinfo.value.missing == ("CONFERENCE_HALL_TOKEN",)
    assert excinfo.value.conference_id == CONFERENCE_ID
    assert fetcher.calls == []


def test_missing_event_name_and_token_are_both_reported(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    seed_conference(
        sqlite_unit_of_work,
        make_conference(conference_hall_name="  "),
        token="   ",
    )

    with pytest.raises(ImportConfigMissingError) as excinfo:
        _run(sqlite_unit_of_work, [])

    assert excinfo.value.missing == ("conference_hall_name", "CONFERENCE_HALL_TOKEN")


def test_unknown_conference(sqlite_unit_of_work: UnitOfWorkFactory) -> None:
    with pytest.raises(ConferenceNotFoundError) as excinfo:
        _run(sqlite_unit_of_work, [])

    assert excinfo.value.conference_id == CONFERENCE_ID


def test_upstream_failure_writes_nothing(
    sqlite_unit_of_work: UnitOfWorkFactory,
    sqlite_engine: Engine,
) -> None:
    seed_conference(sqlite_unit_of_work)
    before = _snapshot(sqlite_engine)

    with pytest.raises(UpstreamUnavailableError) as excinfo:
        import_conference(
            ImportRequest(conference_id=CONFERENCE_ID),
            fetcher=FailingFetcher(UpstreamUnavailableError("Conference Hall unreachable")),
            unit_of_work_factory=sqlite_unit_of_work,
            batch_limit=450,
        )

    assert excinfo.value.conference_id == CONFERENCE_ID
    assert excinfo.value.report is not None
    assert excinfo.value.report.written == 0
    assert _snapshot(sqlite_engine) == before


def _failing_commit_factory(fail_on: int) -> UnitOfWorkFactory:
    commits = 0

    class _UnitOfWork(SqlAlchemyUnitOfWork):
        def commit(self) -> None:
            nonlocal commits
            commits += 1
            if commits == fail_on:
                raise RuntimeError("connection lost")
            super().commit()

    return _UnitOfWork


def test_interrupted_import_converges_on_rerun(
    sqlite_unit_of_work: UnitOfWorkFactory,
    sqlite_engine: Engine,
) -> None:
    seed_conference(sqlite_unit_of_work)
    submissions = [
        make_submission(f"prop-{number}", speakers=[make_speaker(f"spk-{number}")])
        for number in range(4)
    ]

    # limit 3: one chunk per speaker unit (person + email claim) until the
    # sessions fill up the rest; the third chunk fails.
    with pytest.raises(CommitFailedError, match="connection lost") as excinfo:
        _run(_failing_commit_factory(3), submissions, batch_limit=3)

    failure = excinfo.value
    assert failure.conference_id == CONFERENCE_ID
    assert failure.chunks_committed == 2
    assert failure.report is not None
    assert failure.report.chunks_committed == 2
    assert isinstance(failure.__cause__, RuntimeError)

    with sqlite_unit_of_work() as uow:
        imported = uow.repositories.persons.find_by_speaker_external_ids(
            [f"spk-{number}" for number in range(4)]
        )
    assert sorted(person.speaker.external_id or "" for person in imported) == ["spk-0", "spk-1"]

    rerun = _run(sqlite_unit_of_work, submissions, at=FIRST_RUN + timedelta(hours=1), batch_limit=3)

    assert (rerun.speaker_unchanged, rerun.speaker_added) == (2, 2)
    assert rerun.session_added == 4
    converged = _snapshot(sqlite_engine)

    final = _run(sqlite_unit_of_work, submissions, at=FIRST_RUN + timedelta(hours=2), batch_limit=3)

    assert final.written == 0
    assert _snapshot(sqlite_engine) == converged
