"""Conference Hall API client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from cfpsync.adapters.http_resilience import ResilientClient
from cfpsync.domain.errors import UpstreamBadResponseError, UpstreamUnavailableError

from .schema import ConferenceHallEvent

if TYPE_CHECKING:
    from collections.abc import Callable

    from cfpsync.config.conference_hall import ConferenceHallConfig
    from cfpsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


class ConferenceHallClient:
    """Low-level HTTP client for the Conference Hall event API."""

    def __init__(
        self,
        *,
        config: ConferenceHallConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def fetch_event(self, *, event_name: str, token: str) -> ConferenceHallEvent:
        """Return the complete event payload, or raise an ``UpstreamError``."""

        return asyncio.run(self._fetch_event_async(event_name=event_name, token=token))

    async def _fetch_event_async(self, *, event_name: str, token: str) -> ConferenceHallEvent:
        async with self._client_factory(self._resilience) as client:
            return await self._perform_request(
                client=client,
                url=event_url(self._config.base_url, event_name),
                token=token,
            )

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        url: str,
        token: str,
    ) -> ConferenceHallEvent:
        try:
            response = await client.get(url, headers={API_KEY_HEADER: token})
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise UpstreamBadResponseError(
                f"Conference Hall API error: {status_code}", status_code=status_code
            ) from exc
        except httpx.TransportError as exc:
            raise UpstreamUnavailableError(f"Conference Hall unreachable: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamBadResponseError(
                "Conference Hall returned a non-JSON body", status_code=response.status_code
            ) from exc
        if not isinstance(payload, dict):
            raise UpstreamBadResponseError(
                "Unexpected Conference Hall response payload", status_code=response.status_code
            )

        try:
            event = ConferenceHallEvent.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamBadResponseError(
                f"Conference Hall payload does not match the event schema: {exc}",
                status_code=response.status_code,
            ) from exc
        log.info("Fetched %s proposals from Conference Hall", len(event.proposals or ()))
        return event


def event_url(base_url: str, event_name: str) -> str:
    return f"{base_url.rstrip('/')}/event/{quote(event_name, safe='')}/"
