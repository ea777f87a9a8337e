"""Alembic environment for the chronicler content schema."""

from __future__ import annotations

import logging
from typing import Any

from alembic import context
from sqlalchemy import create_engine, pool

from chronicler.adapters.sqlalchemy import mapper_registry, start_mappers
from chronicler.config import get_database_config

config = context.config

log = logging.getLogger("alembic.env")

start_mappers()

target_metadata = mapper_registry.metadata


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def _run(**options: Any) -> None:
    # SQLite cannot ALTER constraints in place, so every migration runs in batch mode
    context.configure(
        target_metadata=target_metadata,
        render_as_batch=True,
        compare_type=True,
        compare_server_default=True,
        **options,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    log.info("Rendering chronicler migrations as SQL")
    _run(url=_database_url(), literal_binds=True)


def run_migrations_online() -> None:
    """Migrate through the caller's connection, or a throwaway engine when none is given."""

    existing_connection = config.attributes.get("connection")
    if existing_connection is not None:
        _run(connection=existing_connection)
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool, future=True)
    try:
        with engine.connect() as connection:
            _run(connection=connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
