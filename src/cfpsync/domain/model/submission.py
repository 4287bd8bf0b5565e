"""Submission shapes handed over by external fetchers.

These are read-only observations of the submission platform. Adapters build
them from provider payloads; the reconciliation core never persists them.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, kw_only=True)
class SubmittedSpeaker:
    external_id: str
    name: str | None = None
    email: str | None = None
    bio: str | None = None
    company: str | None = None
    references: str | None = None
    picture: str | None = None
    social_links: tuple[str, ...] = ()


@dataclass(frozen=True, kw_only=True)
class SubmissionReview:
    average: float | None = None
    positives: int | None = None
    negatives: int | None = None

    @property
    def votes(self) -> int:
        return (self.positives or 0) + (self.negatives or 0)


@dataclass(frozen=True, kw_only=True)
class Submission:
    external_id: str
    title: str = ""
    abstract: str = ""
    submitted_at: str | None = None
    deliberation_status: str | None = None
    confirmation_status: str | None = None
    level: str | None = None
    references: str = ""
    formats: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    languages: tuple[str, ...] = ()
    speakers: tuple[SubmittedSpeaker, ...] = ()
    review: SubmissionReview = field(default_factory=SubmissionReview)
