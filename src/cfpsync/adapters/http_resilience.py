"""Rate-limited, retrying async HTTP client shared by the upstream adapters."""

from __future__ import annotations

from contextlib import nullcontext
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from aiolimiter import AsyncLimiter
from httpx_retries import RetryTransport

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from cfpsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)


def build_async_client(config: ResilienceConfig) -> httpx.AsyncClient:
    """Create the ``httpx.AsyncClient`` described by ``config``.

    Retries wrap the configured transport (the default network transport when
    none is set), so a mock transport still sees every retried attempt.
    """

    retry = config.retry.build()
    transport = (
        RetryTransport(retry=retry)
        if config.transport is None
        else RetryTransport(transport=config.transport, retry=retry)
    )
    options: dict[str, Any] = {
        "timeout": config.timeout_seconds,
        "transport": transport,
        "follow_redirects": True,
    }
    if config.base_url is not None:
        options["base_url"] = config.base_url
    if config.default_headers:
        options["headers"] = dict(config.default_headers)
    return httpx.AsyncClient(**options)


class ResilientClient:
    """Async context manager issuing requests through the retry transport and rate limiter."""

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        self._client = build_async_client(config)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        async with self._limiter or nullcontext():
            log.debug("%s %s %s", self.config.name, method, url)
            return await self._client.request(method, url, headers=headers, params=params)

    async def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        return await self.request("GET", url, headers=headers, params=params)
