"""SQLAlchemy mapping metadata for the cfpsync domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import TypeAdapter
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import composite, configure_mappers

from cfpsync.domain.model import (
    Conference,
    ConferenceSecret,
    EmailIndexEntry,
    Person,
    Session,
    SessionConference,
    SessionLevel,
    SessionStatus,
    SessionType,
    SocialLink,
    SpeakerProfile,
    Track,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class _PydanticJSON[T](TypeDecorator[T]):
    """JSON text column validated through a pydantic ``TypeAdapter``."""

    impl = Text
    cache_ok = True
    adapter: ClassVar[TypeAdapter[Any]]
    empty: ClassVar[Any]

    def process_bind_param(self, value: T | None, dialect: Dialect) -> str:
        _ = dialect
        payload = self.adapter.dump_python(self.empty if value is None else value, mode="json")
        return json.dumps(payload, sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> T:
        _ = dialect
        if value is None:
            return self.empty
        return self.adapter.validate_json(value)


class StringTupleType(_PydanticJSON[tuple[str, ...]]):
    adapter = TypeAdapter(tuple[str, ...])
    empty = ()


class SocialLinksType(_PydanticJSON[tuple[SocialLink, ...]]):
    adapter = TypeAdapter(tuple[SocialLink, ...])
    empty = ()


class SessionTypesType(_PydanticJSON[tuple[SessionType, ...]]):
    adapter = TypeAdapter(tuple[SessionType, ...])
    empty = ()


class StringMappingType(_PydanticJSON[dict[str, str]]):
    adapter = TypeAdapter(dict[str, str])
    empty: ClassVar[dict[str, str]] = {}


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Tables ----------------------------------------------------------------------

conference_table = Table(
    "conference",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("languages", StringTupleType, nullable=False),
    Column("session_types", SessionTypesType, nullable=False),
    Column("organizer_emails", StringTupleType, nullable=False),
    Column("conference_hall_name", String, nullable=False, default=""),
    Column("session_type_format_mapping", StringMappingType, nullable=False),
    Column("conference_hall_last_communication", String, nullable=True),
    Column("updated_at", UTCDateTime, nullable=True),
)

conference_secret_table = Table(
    "conference_secret",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("conference_id", String, nullable=False),
    Column("name", String, nullable=False),
    Column("value", String, nullable=False),
    UniqueConstraint("conference_id", "name"),
)

track_table = Table(
    "track",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("conference_id", String, nullable=False, index=True),
    Column("name", String, nullable=False),
    Column("description", String, nullable=False, default=""),
    Column("color", String, nullable=False),
    Column("icon", String, nullable=False),
)

person_table = Table(
    "person",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("email", String, nullable=False),
    Column("first_name", String, nullable=False, default=""),
    Column("last_name", String, nullable=False, default=""),
    Column("has_account", Boolean, nullable=False, default=False),
    Column("is_platform_admin", Boolean, nullable=False, default=False),
    Column("is_speaker", Boolean, nullable=False, default=False),
    Column("preferred_language", String, nullable=False),
    Column("search", Text, nullable=False, default=""),
    Column("speaker_external_id", String, nullable=True, index=True),
    Column("speaker_company", String, nullable=False, default=""),
    Column("speaker_bio", Text, nullable=False, default=""),
    Column("speaker_reference", Text, nullable=False, default=""),
    Column("speaker_photo_url", String, nullable=False, default=""),
    Column("speaker_social_links", SocialLinksType, nullable=False),
    Column("speaker_submitted_conference_ids", StringTupleType, nullable=False),
    Column("updated_at", UTCDateTime, nullable=True),
)

# Unique email ownership. No foreign key: the entry may be written before the
# owning person row within the same transaction.
email_index_table = Table(
    "email_index",
    mapper_registry.metadata,
    Column("key", String, primary_key=True),
    Column("person_id", UUIDColumnType, nullable=False, index=True),
    Column("email", String, nullable=False),
    Column("created_at", UTCDateTime, nullable=True),
)

session_table = Table(
    "session",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("title", String, nullable=False),
    Column("abstract", Text, nullable=False, default=""),
    Column("references", Text, nullable=False, default=""),
    Column("session_type", String, nullable=False, default=""),
    Column("speaker1_id", UUIDColumnType, nullable=True),
    Column("speaker2_id", UUIDColumnType, nullable=True),
    Column("speaker3_id", UUIDColumnType, nullable=True),
    Column("last_change_date", String, nullable=False, default=""),
    Column("search", Text, nullable=False, default=""),
    Column("organizer_notes", Text, nullable=False, default=""),
    Column("conference_id", String, nullable=False),
    Column("conference_status", Enum(SessionStatus, native_enum=False), nullable=False),
    Column("conference_external_id", String, nullable=True),
    Column("conference_session_type_id", String, nullable=False, default=""),
    Column("conference_track_id", UUIDColumnType, nullable=True),
    Column("conference_submit_date", String, nullable=False, default=""),
    Column("conference_level", Enum(SessionLevel, native_enum=False), nullable=False),
    Column("conference_languages", StringTupleType, nullable=False),
    Column("conference_review_average", Float, nullable=False, default=0.0),
    Column("conference_review_votes", Integer, nullable=False, default=0),
    UniqueConstraint("conference_id", "conference_external_id"),
    Index("ix_session_conference_id", "conference_id"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Conference, conference_table)

    mapper_registry.map_imperatively(ConferenceSecret, conference_secret_table)

    mapper_registry.map_imperatively(Track, track_table)

    mapper_registry.map_imperatively(
        Person,
        person_table,
        properties={
            "speaker": composite(
                SpeakerProfile,
                person_table.c.speaker_external_id,
                person_table.c.speaker_company,
                person_table.c.speaker_bio,
                person_table.c.speaker_reference,
                person_table.c.speaker_photo_url,
                person_table.c.speaker_social_links,
                person_table.c.speaker_submitted_conference_ids,
            ),
        },
    )

    mapper_registry.map_imperatively(EmailIndexEntry, email_index_table)

    mapper_registry.map_imperatively(
        Session,
        session_table,
        properties={
            "conference": composite(
                SessionConference,
                session_table.c.conference_id,
                session_table.c.conference_status,
                session_table.c.conference_external_id,
                session_table.c.conference_session_type_id,
                session_table.c.conference_track_id,
                session_table.c.conference_submit_date,
                session_table.c.conference_level,
                session_table.c.conference_languages,
                session_table.c.conference_review_average,
                session_table.c.conference_review_votes,
            ),
        },
    )

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
