"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SessionStatus(StrEnum):
    SUBMITTED = "SUBMITTED"
    WAITLISTED = "WAITLISTED"
    ACCEPTED = "ACCEPTED"
    SPEAKER_CONFIRMED = "SPEAKER_CONFIRMED"
    SCHEDULED = "SCHEDULED"
    PROGRAMMED = "PROGRAMMED"
    DECLINED_BY_SPEAKER = "DECLINED_BY_SPEAKER"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"


class DeliberationStatus(StrEnum):
    """Review outcome reported by the submission platform."""

    REJECTED = "REJECTED"
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"


class ConfirmationStatus(StrEnum):
    """Speaker answer reported by the submission platform once accepted."""

    CONFIRMED = "CONFIRMED"
    DECLINED = "DECLINED"
    PENDING = "PENDING"


class SessionLevel(StrEnum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class SocialNetwork(StrEnum):
    LINKEDIN = "LinkedIn"
    GITHUB = "GitHub"
    X = "X"
    BLUESKY = "Bluesky"
    MASTODON = "Mastodon"
    WEBSITE = "Website"
