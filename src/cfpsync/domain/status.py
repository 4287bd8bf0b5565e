"""Session status state machine.

Merges the review/confirmation state reported by the submission platform
with the scheduling state held locally. Pure; no persistence involved.
"""

from __future__ import annotations

from cfpsync.domain.model.enums import ConfirmationStatus, DeliberationStatus, SessionStatus

_ON_PROGRAM = frozenset({SessionStatus.SCHEDULED, SessionStatus.PROGRAMMED})


def next_status(
    deliberation: str | None,
    confirmation: str | None,
    current: SessionStatus | str | None = None,
) -> SessionStatus:
    """Return the local status for a submission.

    ``current`` is the status of the already imported session, ``None`` for a
    new one. Unknown deliberation values are treated like a missing one.
    """

    local = _coerce_status(current)

    if deliberation == DeliberationStatus.REJECTED:
        return SessionStatus.REJECTED
    if deliberation == DeliberationStatus.PENDING:
        if local is SessionStatus.WAITLISTED:
            return SessionStatus.WAITLISTED
        return SessionStatus.SUBMITTED
    if deliberation != DeliberationStatus.ACCEPTED:
        return SessionStatus.SUBMITTED

    if confirmation == ConfirmationStatus.DECLINED:
        if local is SessionStatus.PROGRAMMED:
            return SessionStatus.CANCELLED
        return SessionStatus.DECLINED_BY_SPEAKER
    if confirmation == ConfirmationStatus.CONFIRMED:
        if local in _ON_PROGRAM:
            return SessionStatus.PROGRAMMED
        return SessionStatus.SPEAKER_CONFIRMED
    if local in _ON_PROGRAM:
        return SessionStatus.SCHEDULED
    return SessionStatus.ACCEPTED


def _coerce_status(value: SessionStatus | str | None) -> SessionStatus | None:
    if value is None or isinstance(value, SessionStatus):
        return value
    try:
        return SessionStatus(value)
    except ValueError:
        return None
