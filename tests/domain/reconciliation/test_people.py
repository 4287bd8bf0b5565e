from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from cfpsync.domain.errors import EmailExistsError, EmailMissingError
from cfpsync.domain.model import Person, SpeakerProfile
from cfpsync.domain.reconciliation import create_person, upsert_person

if TYPE_CHECKING:
    from collections.abc import Callable

    from cfpsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

FIXED_NOW = datetime(2026, 10, 19, 8, 0, tzinfo=UTC)


def _clock() -> datetime:
    return FIXED_NOW


def test_create_person_claims_email(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    person = Person(
        email=" Grace@Example.com ",
        first_name="Grace",
        last_name="Hopper",
        speaker=SpeakerProfile(submitted_conference_ids=("conf-1", "conf-1")),
    )

    stored = create_person(person, unit_of_work_factory=sqlite_unit_of_work, clock=_clock)

    assert stored.email == "Grace@Example.com"
    assert stored.search == "grace hopper grace@example.com"
    assert stored.speaker.submitted_conference_ids == ("conf-1",)
    with sqlite_unit_of_work() as uow:
        entry = uow.repositories.email_index.get("grace@example.com")
        loaded = uow.repositories.persons.get(person.id)
    assert entry is not None
    assert entry.person_id == person.id
    assert loaded is not None
    assert loaded.updated_at == FIXED_NOW


def test_create_person_rejects_taken_email(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    first = create_person(Person(email="grace@example.com"), unit_of_work_factory=sqlite_unit_of_work)

    with pytest.raises(EmailExistsError) as excinfo:
        create_person(Person(email="GRACE@example.com"), unit_of_work_factory=sqlite_unit_of_work)

    assert excinfo.value.owner_id == first.id


def test_create_person_requires_email(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with pytest.raises(EmailMissingError):
        create_person(Person(email="  "), unit_of_work_factory=sqlite_unit_of_work)


def test_upsert_person_moves_index_entry(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    person = create_person(
        Person(email="old@example.com", first_name="Grace"),
        unit_of_work_factory=sqlite_unit_of_work,
    )

    upsert_person(
        replace(person, email="new@example.com"),
        unit_of_work_factory=sqlite_unit_of_work,
    )

    with sqlite_unit_of_work() as uow:
        index = uow.repositories.email_index
        old_entry = index.get("old@example.com")
        new_entry = index.get("new@example.com")
        loaded = uow.repositories.persons.get(person.id)
    assert old_entry is None
    assert new_entry is not None
    assert new_entry.person_id == person.id
    assert loaded is not None
    assert loaded.email == "new@example.com"


def test_upsert_person_cannot_take_foreign_email(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    owner = create_person(Person(email="taken@example.com"), unit_of_work_factory=sqlite_unit_of_work)
    other = create_person(Person(email="mine@example.com"), unit_of_work_factory=sqlite_unit_of_work)

    with pytest.raises(EmailExistsError):
        upsert_person(
            replace(other, email="taken@example.com"),
            unit_of_work_factory=sqlite_unit_of_work,
        )

    with sqlite_unit_of_work() as uow:
        taken = uow.repositories.email_index.get("taken@example.com")
        mine = uow.repositories.email_index.get("mine@example.com")
        loaded = uow.repositories.persons.get(other.id)
    assert taken is not None
    assert taken.person_id == owner.id
    assert mine is not None
    assert loaded is not None
    assert loaded.email == "mine@example.com"


def test_upsert_person_inserts_new_person(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    person = Person(email="fresh@example.com", first_name="Fresh")

    upsert_person(person, unit_of_work_factory=sqlite_unit_of_work)

    with sqlite_unit_of_work() as uow:
        loaded = uow.repositories.persons.get(person.id)
        entry = uow.repositories.email_index.get("fresh@example.com")
    assert loaded is not None
    assert loaded.first_name == "Fresh"
    assert entry is not None
