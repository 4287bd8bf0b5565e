"""Standalone person writes guarded by the email identity index.

Each operation is one unit-of-work transaction spanning the Person row and
every index entry it touches.
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from cfpsync.domain.errors import EmailExistsError, EmailMissingError
from cfpsync.domain.model import person_search_text, utcnow

from .identity import EmailIdentityIndex
from .speakers import merge_conference_ids

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from cfpsync.domain.model import Person
    from cfpsync.domain.ports.unit_of_work import ConferenceUnitOfWork

log = getLogger(__name__)


def create_person(
    person: Person,
    *,
    unit_of_work_factory: Callable[[], ConferenceUnitOfWork],
    clock: Callable[[], datetime] = utcnow,
) -> Person:
    """Insert a new person, failing if its email is already indexed."""

    key = person.email_key
    if not key:
        raise EmailMissingError("Cannot create a person without an email")

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        entry = repositories.email_index.get(key, for_update=True)
        if entry is not None:
            raise EmailExistsError(
                f"Email {key!r} already belongs to person {entry.person_id}",
                key=key,
                owner_id=entry.person_id,
                claimant_id=person.id,
            )
        now = clock()
        stored = _prepared(person, now)
        EmailIdentityIndex(repositories.email_index, now=now).claim(stored.email, stored.id)
        repositories.persons.put(stored)
        uow.commit()

    log.info("Created person %s", stored.id)
    return stored


def upsert_person(
    person: Person,
    *,
    unit_of_work_factory: Callable[[], ConferenceUnitOfWork],
    clock: Callable[[], datetime] = utcnow,
) -> Person:
    """Write ``person`` and move its index entry when the email changed.

    The previous email key is released only while it still points at this
    person; an entry taken over by someone else is left in place.
    """

    key = person.email_key
    if not key:
        raise EmailMissingError(f"Person {person.id} has no email")

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        existing = repositories.persons.get(person.id)
        now = clock()
        index = EmailIdentityIndex(repositories.email_index, now=now)
        index.claim(person.email, person.id)
        previous_key = existing.email_key if existing is not None else ""
        if previous_key and previous_key != key:
            index.release(previous_key, person.id)
        stored = _prepared(person, now)
        repositories.persons.put(stored)
        uow.commit()

    log.info("Stored person %s", stored.id)
    return stored


def _prepared(person: Person, now: datetime) -> Person:
    stored = replace(
        person,
        email=person.email.strip(),
        speaker=replace(
            person.speaker,
            submitted_conference_ids=merge_conference_ids(person.speaker.submitted_conference_ids),
        ),
        updated_at=now,
    )
    stored.search = person_search_text(stored)
    return stored
