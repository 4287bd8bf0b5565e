"""Conference Hall configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_CONFERENCE_HALL_BASE_URL = "https://conference-hall.io/api/v1"
CONFERENCE_HALL_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class ConferenceHallConfig:
    resilience: ResilienceConfig

    @property
    def base_url(self) -> str:
        return self.resilience.base_url or DEFAULT_CONFERENCE_HALL_BASE_URL


def get_conference_hall_config(*, resilience: ResilienceConfig | None = None) -> ConferenceHallConfig:
    base_url = optional_env_var("CONFERENCE_HALL_BASE_URL") or DEFAULT_CONFERENCE_HALL_BASE_URL
    return ConferenceHallConfig(
        resilience=resilience
        or ResilienceConfig(
            name="conference-hall",
            base_url=base_url.rstrip("/"),
            timeout_seconds=CONFERENCE_HALL_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            retry=RetryPolicy(total=3),
            default_headers={"Accept": "application/json"},
        )
    )
