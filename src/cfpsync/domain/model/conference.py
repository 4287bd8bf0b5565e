"""Conference configuration as seen by the importer."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from cfpsync.domain.model.base import Entity

if TYPE_CHECKING:
    from datetime import datetime

DEFAULT_LANGUAGE: Final[str] = "en"
DEFAULT_TRACK_COLOR: Final[str] = "#808080"
DEFAULT_TRACK_ICON: Final[str] = "pi pi-tag"
CONFERENCE_HALL_TOKEN_SECRET: Final[str] = "CONFERENCE_HALL_TOKEN"  # noqa: S105


@dataclass(frozen=True)
class SessionType:
    id: str
    name: str
    duration: int = 0


@dataclass(eq=False, kw_only=True)
class Conference:
    id: str
    name: str
    languages: tuple[str, ...] = ()
    session_types: tuple[SessionType, ...] = ()
    organizer_emails: tuple[str, ...] = ()
    conference_hall_name: str = ""
    # session type id -> Conference Hall format label
    session_type_format_mapping: Mapping[str, str] = field(default_factory=dict[str, str])
    conference_hall_last_communication: str | None = None
    updated_at: datetime | None = None

    @property
    def primary_language(self) -> str:
        if not self.languages:
            return DEFAULT_LANGUAGE
        return (self.languages[0] or DEFAULT_LANGUAGE).lower()

    def session_type_by_id(self, session_type_id: str) -> SessionType | None:
        for session_type in self.session_types:
            if session_type.id == session_type_id:
                return session_type
        return None


@dataclass(eq=False, kw_only=True)
class Track(Entity):
    conference_id: str
    name: str
    description: str = ""
    color: str = DEFAULT_TRACK_COLOR
    icon: str = DEFAULT_TRACK_ICON


@dataclass(eq=False, kw_only=True)
class ConferenceSecret(Entity):
    conference_id: str
    name: str
    value: str
