"""Alembic environment for the referral schema.

Migrations are raw SQL against the Supabase Postgres database, so there is no
model metadata and autogenerate is not used. The connection string always
comes from application settings, never from alembic.ini.
"""
import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from libs.common.config import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    url = get_settings().DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL must be set to run migrations")
    return url


def _configure(**kwargs) -> None:
    # Supabase owns auth/storage schemas; only track our own version table
    context.configure(
        target_metadata=None,
        version_table_schema="public",
        transaction_per_migration=True,
        **kwargs,
    )


def run_offline() -> None:
    """Emit the migration SQL to stdout for review or manual application."""
    _configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_online() -> None:
    engine = create_async_engine(_database_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    asyncio.run(run_online())
