"""Conference Hall event API response schemas."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)

type ConferenceHallId = str
type ISODateTime = str


class ConferenceHallBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "Conference Hall %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class ConferenceHallSpeaker(ConferenceHallBaseModel):
    id: ConferenceHallId
    name: str | None = None
    bio: str | None = None
    company: str | None = None
    references: str | None = None
    picture: str | None = None
    email: str | None = None
    social_links: list[str] | None = Field(default=None, alias="socialLinks")


class ConferenceHallReview(ConferenceHallBaseModel):
    average: float | None = None
    positives: int | None = None
    negatives: int | None = None


class ConferenceHallProposal(ConferenceHallBaseModel):
    id: ConferenceHallId
    title: str | None = None
    abstract: str | None = None
    submitted_at: ISODateTime | None = Field(default=None, alias="submittedAt")
    deliberation_status: str | None = Field(default=None, alias="deliberationStatus")
    confirmation_status: str | None = Field(default=None, alias="confirmationStatus")
    level: str | None = None
    references: str | None = None
    formats: list[str] | None = None
    categories: list[str] | None = None
    tags: list[str] | None = None
    languages: list[str] | None = None
    speakers: list[ConferenceHallSpeaker] | None = None
    review: ConferenceHallReview | None = None


class ConferenceHallEvent(ConferenceHallBaseModel):
    name: str | None = None
    proposals: list[ConferenceHallProposal] | None = None
