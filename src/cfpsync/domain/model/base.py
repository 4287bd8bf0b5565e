"""
Base building blocks:
identity and clock for locally owned entities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain.

    External platform ids are never used as primary keys; they travel in the
    entity's sub-records as opaque strings.
    """

    id: UUID = field(default_factory=new_id)
