"""Import/reset reports returned to callers. Output artifacts only, never persisted."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True, kw_only=True)
class SkippedSpeaker:
    """A speaker left out of the import without failing it."""

    external_id: str
    reason: str


@dataclass(slots=True, kw_only=True)
class ImportReport:
    """Counters of one import run."""

    imported_at: str
    session_added: int = 0
    session_updated: int = 0
    session_unchanged: int = 0
    speaker_added: int = 0
    speaker_updated: int = 0
    speaker_unchanged: int = 0
    speaker_skipped: int = 0
    track_added: int = 0
    track_updated: int = 0
    track_unchanged: int = 0
    chunks_committed: int = 0
    skipped: list[SkippedSpeaker] = field(default_factory=list["SkippedSpeaker"])

    def skip_speaker(self, external_id: str, reason: str) -> None:
        self.speaker_skipped += 1
        self.skipped.append(SkippedSpeaker(external_id=external_id, reason=reason))

    @property
    def written(self) -> int:
        return (
            self.session_added
            + self.session_updated
            + self.speaker_added
            + self.speaker_updated
            + self.track_added
            + self.track_updated
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "sessionAdded": self.session_added,
            "sessionUpdated": self.session_updated,
            "sessionUnchanged": self.session_unchanged,
            "speakerAdded": self.speaker_added,
            "speakerUpdated": self.speaker_updated,
            "speakerUnchanged": self.speaker_unchanged,
            "speakerSkipped": self.speaker_skipped,
            "trackAdded": self.track_added,
            "trackUpdated": self.track_updated,
            "trackUnchanged": self.track_unchanged,
            "importedAt": self.imported_at,
        }


@dataclass(slots=True, kw_only=True)
class ResetReport:
    reset_at: str
    session_deleted: int = 0
    speaker_deleted: int = 0

    def as_dict(self) -> dict[str, object]:
        return {
            "sessionDeleted": self.session_deleted,
            "speakerDeleted": self.speaker_deleted,
            "resetAt": self.reset_at,
        }
