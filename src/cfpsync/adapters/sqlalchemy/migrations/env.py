"""Alembic environment for the cfpsync schema.

``upgrade_head`` hands over an open connection through ``config.attributes``;
the ``alembic`` command line falls back to ``sqlalchemy.url`` or ``DATABASE_URI``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from alembic import context
from sqlalchemy import create_engine, pool

from cfpsync.adapters.sqlalchemy.mappings import mapper_registry, start_mappers
from cfpsync.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

log = logging.getLogger("alembic.env")

config = context.config

start_mappers()

# render_as_batch: SQLite cannot ALTER most column definitions in place
CONFIGURE_OPTIONS: dict[str, Any] = {
    "target_metadata": mapper_registry.metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **CONFIGURE_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_offline() -> None:
    log.info("Emitting migration SQL for %s", _database_url())
    context.configure(url=_database_url(), literal_binds=True, **CONFIGURE_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        _migrate(connection)
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as owned_connection:
            _migrate(owned_connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
