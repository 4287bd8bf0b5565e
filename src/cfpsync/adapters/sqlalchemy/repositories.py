"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from cfpsync.adapters.sqlalchemy.mappings import (
    conference_secret_table,
    email_index_table,
    person_table,
    session_table,
    track_table,
)
from cfpsync.domain.errors import EmailExistsError
from cfpsync.domain.model import (
    Conference,
    ConferenceSecret,
    EmailIndexEntry,
    Person,
    Session,
    Track,
)

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable, Sequence

    from sqlalchemy.orm import Session as OrmSession


class SqlAlchemyPersonRepository:
    def __init__(self, session: OrmSession) -> None:
        self.session = session

    def get(self, person_id: uuid.UUID) -> Person | None:
        return self.session.get(Person, person_id)

    def find_by_speaker_external_ids(self, external_ids: Iterable[str]) -> Sequence[Person]:
        wanted = sorted(set(external_ids))
        if not wanted:
            return []
        stmt = (
            select(Person)
            .where(person_table.c.speaker_external_id.in_(wanted))
            .order_by(person_table.c.speaker_external_id, person_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()

    def find_submitters_without_account(self, conference_id: str) -> Sequence[Person]:
        """Persons without an account whose speaker profile lists ``conference_id``."""

        # submitted ids live in a JSON column; filter them after loading
        stmt = (
            select(Person)
            .where(person_table.c.has_account.is_(False))
            .order_by(person_table.c.id)
        )
        return [
            person
            for person in self.session.execute(stmt).scalars()
            if conference_id in person.speaker.submitted_conference_ids
        ]

    def put(self, person: Person) -> None:
        self.session.merge(person)
        self.session.flush()

    def delete(self, person_id: uuid.UUID) -> None:
        _delete(self.session, self.session.get(Person, person_id))


class SqlAlchemySessionRepository:
    def __init__(self, session: OrmSession) -> None:
        self.session = session

    def list_for_conference(self, conference_id: str) -> Sequence[Session]:
        stmt = (
            select(Session)
            .where(session_table.c.conference_id == conference_id)
            .order_by(session_table.c.conference_external_id, session_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()

    def put(self, session: Session) -> None:
        self.session.merge(session)
        self.session.flush()

    def delete(self, session_id: uuid.UUID) -> None:
        _delete(self.session, self.session.get(Session, session_id))


class SqlAlchemyTrackRepository:
    def __init__(self, session: OrmSession) -> None:
        self.session = session

    def list_for_conference(self, conference_id: str) -> Sequence[Track]:
        stmt = (
            select(Track)
            .where(track_table.c.conference_id == conference_id)
            .order_by(track_table.c.name, track_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()

    def put(self, track: Track) -> None:
        self.session.merge(track)
        self.session.flush()


class SqlAlchemyEmailIndexRepository:
    """Email ownership records; the primary key enforces one owner per key."""

    def __init__(self, session: OrmSession) -> None:
        self.session = session

    def get(self, key: str, *, for_update: bool = False) -> EmailIndexEntry | None:
        stmt = select(EmailIndexEntry).where(email_index_table.c.key == key)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def add(self, entry: EmailIndexEntry) -> None:
        self.session.add(entry)
        try:
            self.session.flush()
        except IntegrityError as exc:
            raise EmailExistsError(
                f"Email {entry.key!r} was claimed concurrently",
                key=entry.key,
                owner_id=None,
                claimant_id=entry.person_id,
            ) from exc

    def delete(self, key: str) -> None:
        _delete(self.session, self.session.get(EmailIndexEntry, key))


class SqlAlchemyConferenceRepository:
    def __init__(self, session: OrmSession) -> None:
        self.session = session

    def get(self, conference_id: str) -> Conference | None:
        return self.session.get(Conference, conference_id)

    def put(self, conference: Conference) -> None:
        self.session.merge(conference)
        self.session.flush()


class SqlAlchemyConferenceSecretRepository:
    def __init__(self, session: OrmSession) -> None:
        self.session = session

    def find(self, conference_id: str, name: str) -> ConferenceSecret | None:
        stmt = (
            select(ConferenceSecret)
            .where(conference_secret_table.c.conference_id == conference_id)
            .where(conference_secret_table.c.name == name)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def add(self, secret: ConferenceSecret) -> None:
        self.session.add(secret)
        self.session.flush()


def _delete(session: OrmSession, entity: object | None) -> None:
    if entity is None:
        return
    session.delete(entity)
    session.flush()
