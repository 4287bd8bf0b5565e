"""Conference Hall submission adapter."""

from __future__ import annotations

from .client import ConferenceHallClient
from .fetcher import build_conference_hall_fetcher, fetch_submissions

__all__ = [
    "ConferenceHallClient",
    "build_conference_hall_fetcher",
    "fetch_submissions",
]
