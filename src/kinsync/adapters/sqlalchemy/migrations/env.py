"""Alembic environment for the person graph schema.

``upgrade_head`` hands over an open connection through ``config.attributes``;
the alembic CLI falls back to ``sqlalchemy.url`` or the configured database.
"""

from __future__ import annotations

from alembic import context
from sqlalchemy import create_engine, pool

from kinsync.adapters.sqlalchemy import mapper_registry, start_mappers
from kinsync.config import get_database_config

config = context.config

start_mappers()
target_metadata = mapper_registry.metadata


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def _run(**options: object) -> None:
    # batch mode: SQLite cannot ALTER constraints in place
    context.configure(
        target_metadata=target_metadata,
        render_as_batch=True,
        compare_type=True,
        **options,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    _run(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})


def run_migrations_online() -> None:
    handed_over = config.attributes.get("connection")
    if handed_over is not None:
        _run(connection=handed_over)
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
