"""Reconciliation of Conference Hall submissions into the local program."""

from __future__ import annotations

from .batch import (
    BatchCommitCoordinator,
    ClaimEmail,
    DeletePerson,
    DeleteSession,
    Mutation,
    PutConference,
    PutPerson,
    PutSession,
    PutTrack,
    ReleaseEmail,
    WriteUnit,
)
from .engine import ImportRequest, import_conference, load_import_settings
from .identity import EmailIdentityIndex, IdentityIndex
from .people import create_person, upsert_person
from .report import ImportReport, ResetReport, SkippedSpeaker
from .reset import reset_conference_import
from .sessions import reconcile_sessions
from .speakers import SpeakerResolution, reconcile_speakers
from .tracks import synthesize_tracks

__all__ = [
    "BatchCommitCoordinator",
    "ClaimEmail",
    "DeletePerson",
    "DeleteSession",
    "EmailIdentityIndex",
    "IdentityIndex",
    "ImportReport",
    "ImportRequest",
    "Mutation",
    "PutConference",
    "PutPerson",
    "PutSession",
    "PutTrack",
    "ReleaseEmail",
    "ResetReport",
    "SkippedSpeaker",
    "SpeakerResolution",
    "WriteUnit",
    "create_person",
    "import_conference",
    "load_import_settings",
    "reconcile_sessions",
    "reconcile_speakers",
    "reset_conference_import",
    "synthesize_tracks",
    "upsert_person",
]
