"""Translate Conference Hall payloads into domain submissions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cfpsync.domain.model import Submission, SubmissionReview, SubmittedSpeaker

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .schema import (
        ConferenceHallEvent,
        ConferenceHallProposal,
        ConferenceHallReview,
        ConferenceHallSpeaker,
    )


def translate_event(event: ConferenceHallEvent) -> list[Submission]:
    return [translate_proposal(proposal) for proposal in event.proposals or ()]


def translate_proposal(proposal: ConferenceHallProposal) -> Submission:
    return Submission(
        external_id=proposal.id,
        title=proposal.title or "",
        abstract=proposal.abstract or "",
        submitted_at=proposal.submitted_at or None,
        deliberation_status=proposal.deliberation_status,
        confirmation_status=proposal.confirmation_status,
        level=proposal.level,
        references=proposal.references or "",
        formats=_strings(proposal.formats),
        categories=_strings(proposal.categories),
        tags=_strings(proposal.tags),
        languages=_strings(proposal.languages),
        speakers=tuple(translate_speaker(speaker) for speaker in proposal.speakers or ()),
        review=translate_review(proposal.review),
    )


def translate_speaker(speaker: ConferenceHallSpeaker) -> SubmittedSpeaker:
    return SubmittedSpeaker(
        external_id=speaker.id,
        name=speaker.name,
        email=speaker.email,
        bio=speaker.bio,
        company=speaker.company,
        references=speaker.references,
        picture=speaker.picture,
        social_links=_strings(speaker.social_links),
    )


def translate_review(review: ConferenceHallReview | None) -> SubmissionReview:
    if review is None:
        return SubmissionReview()
    return SubmissionReview(
        average=review.average,
        positives=review.positives,
        negatives=review.negatives,
    )


def _strings(values: Iterable[str] | None) -> tuple[str, ...]:
    return tuple(value for value in values or () if value)
