"""Public domain model surface."""

from __future__ import annotations

from cfpsync.domain.model.base import Entity, new_id, utcnow
from cfpsync.domain.model.conference import (
    CONFERENCE_HALL_TOKEN_SECRET,
    DEFAULT_LANGUAGE,
    DEFAULT_TRACK_COLOR,
    DEFAULT_TRACK_ICON,
    Conference,
    ConferenceSecret,
    SessionType,
    Track,
)
from cfpsync.domain.model.enums import (
    ConfirmationStatus,
    DeliberationStatus,
    SessionLevel,
    SessionStatus,
    SocialNetwork,
)
from cfpsync.domain.model.person import (
    EmailIndexEntry,
    Person,
    SocialLink,
    SpeakerProfile,
    person_search_text,
)
from cfpsync.domain.model.session import (
    SPEAKER_SLOTS,
    Session,
    SessionConference,
    SpeakerSlots,
    fill_speaker_slots,
)
from cfpsync.domain.model.submission import Submission, SubmissionReview, SubmittedSpeaker

__all__ = [
    "CONFERENCE_HALL_TOKEN_SECRET",
    "DEFAULT_LANGUAGE",
    "DEFAULT_TRACK_COLOR",
    "DEFAULT_TRACK_ICON",
    "SPEAKER_SLOTS",
    "Conference",
    "ConferenceSecret",
    "ConfirmationStatus",
    "DeliberationStatus",
    "EmailIndexEntry",
    "Entity",
    "Person",
    "Session",
    "SessionConference",
    "SessionLevel",
    "SessionStatus",
    "SessionType",
    "SocialLink",
    "SocialNetwork",
    "SpeakerProfile",
    "SpeakerSlots",
    "Submission",
    "SubmissionReview",
    "SubmittedSpeaker",
    "Track",
    "fill_speaker_slots",
    "new_id",
    "person_search_text",
    "utcnow",
]
