"""Retry, rate-limit and transport settings for outbound HTTP clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx
from httpx_retries import Retry

if TYPE_CHECKING:
    from collections.abc import Mapping

# Failures worth another attempt: the upstream may recover within the backoff window.
TRANSIENT_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
TRANSIENT_ERRORS: tuple[type[httpx.HTTPError], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Backoff schedule for idempotent requests; ``total=0`` disables retrying."""

    total: int = 3
    backoff_factor: float = 0.5
    backoff_jitter: float = 1.0
    max_backoff_wait: float = 30.0
    respect_retry_after_header: bool = True
    status_forcelist: frozenset[int] = TRANSIENT_STATUS_CODES

    def build(self) -> Retry:
        return Retry(
            total=self.total,
            backoff_factor=self.backoff_factor,
            backoff_jitter=self.backoff_jitter,
            max_backoff_wait=self.max_backoff_wait,
            respect_retry_after_header=self.respect_retry_after_header,
            allowed_methods=("GET", "HEAD", "OPTIONS"),
            status_forcelist=tuple(sorted(self.status_forcelist)),
            retry_on_exceptions=TRANSIENT_ERRORS,
        )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
    # innermost transport, wrapped by the retry transport
    transport: httpx.AsyncBaseTransport | None = None
