from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cfpsync import app
from cfpsync.domain.errors import EmailExistsError
from cfpsync.config import ConfigurationError
from cfpsync.domain.model import CONFERENCE_HALL_TOKEN_SECRET, SessionType
from cfpsync.domain.reconciliation import load_import_settings
from cfpsync.domain.reconciliation.sessions import find_session_type_id
from tests.helpers.conference import StaticFetcher, make_speaker, make_submission

if TYPE_CHECKING:
    from collections.abc import Callable

    from cfpsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork


def test_configure_conference_creates_and_updates(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    app.configure_conference(
        "conf-1",
        name="DevFest",
        conference_hall_name="devfest-2026",
        token="first",
        languages=("FR", "en"),
        unit_of_work_factory=sqlite_unit_of_work,
    )
    app.configure_conference(
        "conf-1",
        name="DevFest 2026",
        conference_hall_name="devfest-2026",
        token="second",
        unit_of_work_factory=sqlite_unit_of_work,
    )

    conference, token = load_import_settings("conf-1", sqlite_unit_of_work)

    assert conference.name == "DevFest 2026"
    assert conference.languages == ("FR", "en")
    assert conference.primary_language == "fr"
    assert token == "second"
    with sqlite_unit_of_work() as uow:
        secret = uow.repositories.secrets.find("conf-1", CONFERENCE_HALL_TOKEN_SECRET)
    assert secret is not None


def test_configure_conference_stores_session_types_and_format_mapping(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    app.configure_conference(
        "conf-1",
        name="DevFest",
        conference_hall_name="devfest-2026",
        token="secret",
        session_types=(
            SessionType(id="st1", name="Talk", duration=40),
            SessionType(id="st2", name="Workshop", duration=120),
        ),
        format_mapping={"st2": "Hands-on"},
        unit_of_work_factory=sqlite_unit_of_work,
    )

    conference, _ = load_import_settings("conf-1", sqlite_unit_of_work)

    assert [session_type.id for session_type in conference.session_types] == ["st1", "st2"]
    assert conference.session_type_format_mapping == {"st2": "Hands-on"}
    assert find_session_type_id(conference, ["Hands-on"]) == "st2"


def test_configure_conference_rejects_mapping_to_unknown_session_type(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with pytest.raises(ConfigurationError, match="unknown session types: st9"):
        app.configure_conference(
            "conf-1",
            name="DevFest",
            conference_hall_name="devfest-2026",
            session_types=(SessionType(id="st1", name="Talk"),),
            format_mapping={"st9": "Keynote"},
            unit_of_work_factory=sqlite_unit_of_work,
        )

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.conferences.get("conf-1") is None


def test_import_conference_hall_uses_configured_limit(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("CFPSYNC_BATCH_LIMIT", "2")
    app.configure_conference(
        "conf-1",
        name="DevFest",
        conference_hall_name="devfest-2026",
        token="secret",
        unit_of_work_factory=sqlite_unit_of_work,
    )
    fetcher = StaticFetcher(
        [
            make_submission("prop-1", speakers=[make_speaker("spk-1")]),
            make_submission("prop-2", speakers=[make_speaker("spk-2")]),
        ]
    )

    report = app.import_conference_hall(
        "conf-1",
        fetcher=fetcher,
        unit_of_work_factory=sqlite_unit_of_work,
    )

    assert fetcher.calls == [("devfest-2026", "secret")]
    assert (report.speaker_added, report.session_added) == (2, 2)
    # speakers: one chunk each; sessions: one chunk; conference stamp: one chunk
    assert report.chunks_committed == 4

    reset = app.reset_conference_hall_import("conf-1", unit_of_work_factory=sqlite_unit_of_work)

    assert (reset.session_deleted, reset.speaker_deleted) == (2, 2)


def test_create_person_rejects_duplicate_email(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    person = app.create_person(
        email="orga@example.com",
        first_name="Orga",
        unit_of_work_factory=sqlite_unit_of_work,
    )

    with pytest.raises(EmailExistsError) as excinfo:
        app.create_person(email="ORGA@example.com", unit_of_work_factory=sqlite_unit_of_work)

    assert excinfo.value.owner_id == person.id
