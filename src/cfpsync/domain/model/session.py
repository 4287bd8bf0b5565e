"""Sessions (talks) and their conference-specific sub-record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from cfpsync.domain.model.base import Entity
from cfpsync.domain.model.enums import SessionLevel, SessionStatus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

SPEAKER_SLOTS: Final[int] = 3

type SpeakerSlots = tuple[UUID | None, UUID | None, UUID | None]


@dataclass(frozen=True)
class SessionConference:
    conference_id: str
    status: SessionStatus = SessionStatus.SUBMITTED
    external_id: str | None = None
    session_type_id: str = ""
    track_id: UUID | None = None
    submit_date: str = ""
    level: SessionLevel = SessionLevel.BEGINNER
    languages: tuple[str, ...] = ()
    review_average: float = 0.0
    review_votes: int = 0

    def __composite_values__(
        self,
    ) -> tuple[
        str,
        SessionStatus,
        str | None,
        str,
        UUID | None,
        str,
        SessionLevel,
        tuple[str, ...],
        float,
        int,
    ]:
        """For SQLAlchemy composite columns (adapter-side convenience)."""
        return (
            self.conference_id,
            self.status,
            self.external_id,
            self.session_type_id,
            self.track_id,
            self.submit_date,
            self.level,
            self.languages,
            self.review_average,
            self.review_votes,
        )


@dataclass(eq=False, kw_only=True)
class Session(Entity):
    title: str
    conference: SessionConference
    abstract: str = ""
    references: str = ""
    session_type: str = ""
    speaker1_id: UUID | None = None
    speaker2_id: UUID | None = None
    speaker3_id: UUID | None = None
    last_change_date: str = ""
    search: str = ""
    # Locally edited, never written by the importer.
    organizer_notes: str = ""

    @property
    def speaker_slots(self) -> SpeakerSlots:
        return (self.speaker1_id, self.speaker2_id, self.speaker3_id)

    @property
    def speaker_ids(self) -> tuple[UUID, ...]:
        return tuple(speaker_id for speaker_id in self.speaker_slots if speaker_id is not None)


def fill_speaker_slots(speaker_ids: Sequence[UUID]) -> tuple[SpeakerSlots, int]:
    """Place ids into the fixed slots, returning the slots and how many ids were dropped."""

    kept = list(speaker_ids[:SPEAKER_SLOTS])
    padded = kept + [None] * (SPEAKER_SLOTS - len(kept))
    return (padded[0], padded[1], padded[2]), max(len(speaker_ids) - SPEAKER_SLOTS, 0)
