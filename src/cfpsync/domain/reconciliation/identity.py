"""Email identity index: at most one person owns a normalized email.

The index is an explicit key -> owner record written in the same transaction
as the owning person. Any transactional key-value primitive can back it; the
only requirement is that ``get(..., for_update=True)`` followed by a write is
serialized per key.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from cfpsync.domain.errors import EmailExistsError, EmailMissingError
from cfpsync.domain.labels import normalize_email
from cfpsync.domain.model import EmailIndexEntry

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from cfpsync.domain.ports.persistence import EmailIndexRepository

log = getLogger(__name__)


class IdentityIndex(Protocol):
    """Claim/release capability over identity keys."""

    def owner_of(self, key: str) -> UUID | None: ...

    def claim(self, email: str, owner_id: UUID) -> str: ...

    def release(self, key: str, owner_id: UUID) -> bool: ...


@dataclass(slots=True)
class EmailIdentityIndex:
    """``IdentityIndex`` on top of an ``EmailIndexRepository``.

    Must be used inside the unit of work that also writes the owning person.
    """

    entries: EmailIndexRepository
    now: datetime | None = None

    def owner_of(self, key: str) -> UUID | None:
        entry = self.entries.get(normalize_email(key))
        return entry.person_id if entry is not None else None

    def claim(self, email: str, owner_id: UUID) -> str:
        """Claim ``email`` for ``owner_id`` and return its key.

        Re-claiming a key already owned by ``owner_id`` is a no-op.
        """

        key = normalize_email(email)
        if not key:
            raise EmailMissingError(f"Person {owner_id} has no usable email")
        entry = self.entries.get(key, for_update=True)
        if entry is not None:
            if entry.person_id != owner_id:
                raise EmailExistsError(
                    f"Email {key!r} already belongs to person {entry.person_id}",
                    key=key,
                    owner_id=entry.person_id,
                    claimant_id=owner_id,
                )
            return key
        self.entries.add(
            EmailIndexEntry(key=key, person_id=owner_id, email=email.strip(), created_at=self.now)
        )
        return key

    def release(self, key: str, owner_id: UUID) -> bool:
        """Delete ``key`` only while it still points at ``owner_id``."""

        normalized = normalize_email(key)
        entry = self.entries.get(normalized, for_update=True)
        if entry is None:
            return False
        if entry.person_id != owner_id:
            log.info(
                "Keeping email index entry %r: owned by %s, not %s",
                normalized,
                entry.person_id,
                owner_id,
            )
            return False
        self.entries.delete(normalized)
        return True
