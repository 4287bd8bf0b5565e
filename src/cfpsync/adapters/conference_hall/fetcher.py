"""Conference Hall submission fetcher."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from .client import ConferenceHallClient
from .translator import translate_event

if TYPE_CHECKING:
    from cfpsync.config.conference_hall import ConferenceHallConfig
    from cfpsync.domain.model import Submission
    from cfpsync.domain.ports.fetching import SubmissionFetcher

    from .schema import ConferenceHallEvent

log = getLogger(__name__)


class EventClient(Protocol):
    def fetch_event(self, *, event_name: str, token: str) -> ConferenceHallEvent: ...


def fetch_submissions(
    *,
    event_name: str,
    token: str,
    config: ConferenceHallConfig,
    client: EventClient | None = None,
) -> list[Submission]:
    """Fetch every proposal of ``event_name`` as domain submissions."""

    active_client = client or ConferenceHallClient(config=config)
    event = active_client.fetch_event(event_name=event_name, token=token)
    submissions = translate_event(event)
    log.info("Translated %s Conference Hall proposals for %r", len(submissions), event_name)
    return submissions


def build_conference_hall_fetcher(
    config: ConferenceHallConfig,
    *,
    client: EventClient | None = None,
) -> SubmissionFetcher:
    def fetcher(*, event_name: str, token: str) -> list[Submission]:
        return fetch_submissions(event_name=event_name, token=token, config=config, client=client)

    return fetcher
