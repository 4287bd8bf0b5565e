"""Initial conference program schema.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from alembic import op

from cfpsync.adapters.sqlalchemy.mappings import mapper_registry

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    mapper_registry.metadata.create_all(op.get_bind(), checkfirst=True)


def downgrade() -> None:
    mapper_registry.metadata.drop_all(op.get_bind(), checkfirst=True)
