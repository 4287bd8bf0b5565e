"""People: speakers, organizers, and the email identity index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cfpsync.domain.labels import normalize_email
from cfpsync.domain.model.base import Entity

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(frozen=True)
class SocialLink:
    network: str
    url: str


@dataclass(frozen=True)
class SpeakerProfile:
    """Speaker sub-record of a person.

    ``external_id`` is the submission platform's speaker id. It is a plain
    foreign reference with no integrity guarantees.
    """

    external_id: str | None = None
    company: str = ""
    bio: str = ""
    reference: str = ""
    photo_url: str = ""
    social_links: tuple[SocialLink, ...] = ()
    submitted_conference_ids: tuple[str, ...] = ()

    def __composite_values__(
        self,
    ) -> tuple[str | None, str, str, str, str, tuple[SocialLink, ...], tuple[str, ...]]:
        """For SQLAlchemy composite columns (adapter-side convenience)."""
        return (
            self.external_id,
            self.company,
            self.bio,
            self.reference,
            self.photo_url,
            self.social_links,
            self.submitted_conference_ids,
        )


@dataclass(eq=False, kw_only=True)
class Person(Entity):
    email: str
    first_name: str = ""
    last_name: str = ""
    has_account: bool = False
    is_platform_admin: bool = False
    is_speaker: bool = False
    preferred_language: str = "en"
    search: str = ""
    speaker: SpeakerProfile = field(default_factory=SpeakerProfile)
    updated_at: datetime | None = None

    @property
    def email_key(self) -> str:
        return normalize_email(self.email)


def person_search_text(person: Person) -> str:
    values = (
        person.first_name,
        person.last_name,
        person.email,
        person.speaker.company,
    )
    return " ".join(value for value in values if value).lower()


@dataclass(eq=False, kw_only=True)
class EmailIndexEntry:
    """Owner record for one normalized email key."""

    key: str
    person_id: UUID
    email: str
    created_at: datetime | None = None
