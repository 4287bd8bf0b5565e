"""Error taxonomy of the reconciliation engine.

Fatal errors carry the conference id and the counters reached so far, so a
caller can log and alert without re-deriving state. Speakers skipped for lack
of an email are not errors; they are recorded on the import report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from uuid import UUID

    from cfpsync.domain.reconciliation.report import ImportReport, ResetReport


class ReconciliationError(RuntimeError):
    """Base class for failures that abort a reconciliation run."""

    def __init__(
        self,
        message: str,
        *,
        conference_id: str | None = None,
        report: ImportReport | ResetReport | None = None,
    ) -> None:
        super().__init__(message)
        self.conference_id = conference_id
        self.report = report

    def with_context(
        self, *, conference_id: str, report: ImportReport | ResetReport | None
    ) -> Self:
        """Attach run context unless an inner layer already did."""

        if self.conference_id is None:
            self.conference_id = conference_id
        if self.report is None:
            self.report = report
        return self


class ConferenceNotFoundError(ReconciliationError):
    """Raised when the conference to import into does not exist."""


class UpstreamError(ReconciliationError):
    """Raised when the submission platform cannot provide a usable payload."""


class UpstreamUnavailableError(UpstreamError):
    """Network level failure talking to the submission platform."""


class UpstreamBadResponseError(UpstreamError):
    """Non-2xx status, non-JSON body or a payload that does not match the schema."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class IdentityError(ReconciliationError):
    """Base class for identity index failures."""


class EmailMissingError(IdentityError):
    """Raised when no usable email can be derived for a person write."""


class IdentityConflictError(IdentityError):
    """Raised when an identity key is already owned by another person."""

    def __init__(
        self, message: str, *, key: str, owner_id: UUID | None, claimant_id: UUID
    ) -> None:
        super().__init__(message)
        self.key = key
        self.owner_id = owner_id
        self.claimant_id = claimant_id


class EmailExistsError(IdentityConflictError):
    """Raised when an email claim fails because another person owns the key."""


class ImportConfigMissingError(ReconciliationError):
    """Raised before any fetch when the conference lacks import settings."""

    def __init__(self, message: str, *, conference_id: str, missing: tuple[str, ...]) -> None:
        super().__init__(message, conference_id=conference_id)
        self.missing = missing


class CommitFailedError(ReconciliationError):
    """A chunk could not be written; chunks before it stay committed."""

    def __init__(self, message: str, *, chunks_committed: int) -> None:
        super().__init__(message)
        self.chunks_committed = chunks_committed
