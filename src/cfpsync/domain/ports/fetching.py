"""Ports for fetching external domain data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cfpsync.domain.model import Submission


@runtime_checkable
class SubmissionFetcher(Protocol):
    """Callable port returning every submission of one event.

    Implementations either return the complete list or raise an
    ``UpstreamError``; a partial list is never returned.
    """

    def __call__(self, *, event_name: str, token: str) -> Sequence[Submission]: ...


__all__ = ["SubmissionFetcher"]
