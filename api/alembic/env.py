from __future__ import annotations

import logging
import sys
import time
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import Connection, create_engine, text

# Ensure parent directory (api/) is in Python path for module imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Import models so they register with Base.metadata
import models  # noqa: F401
from alembic import context
from core.config import get_settings
from core.database import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# hash("laundry-admin-migrations") % (2**31)
_ADVISORY_LOCK_KEY = 1187730452

_LOCK_TIMEOUT_SECONDS = 120

_SYNC_DRIVERS = {
    "+asyncpg": "+psycopg2",
    "+aiosqlite": "",
}


def _get_sync_database_url() -> str:
    """Swap the async driver in DATABASE_URL for its synchronous counterpart."""
    url = get_settings().database_url
    for async_driver, sync_driver in _SYNC_DRIVERS.items():
        if async_driver in url:
            return url.replace(async_driver, sync_driver)
    return url


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=_get_sync_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def _acquire_advisory_lock(connection: Connection, logger: logging.Logger) -> None:
    """Serialize concurrent workers on PostgreSQL, polling until the timeout."""
    start_time = time.time()
    while time.time() - start_time < _LOCK_TIMEOUT_SECONDS:
        acquired = connection.execute(
            text("SELECT pg_try_advisory_lock(:key)"),
            {"key": _ADVISORY_LOCK_KEY},
        ).scalar()
        if acquired:
            connection.commit()
            logger.info("Acquired migration advisory lock")
            return
        logger.debug("Waiting for migration lock...")
        time.sleep(2)

    raise RuntimeError(
        f"Failed to acquire migration lock within {_LOCK_TIMEOUT_SECONDS}s. "
        "Another process may be stuck holding the lock."
    )


def _run_migrations(connection: Connection) -> None:
    logger = logging.getLogger("alembic")
    is_postgres = connection.dialect.name == "postgresql"

    if is_postgres:
        _acquire_advisory_lock(connection, logger)

    try:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=True,
        )

        with context.begin_transaction():
            context.run_migrations()
    finally:
        if is_postgres:
            connection.execute(
                text("SELECT pg_advisory_unlock(:key)"),
                {"key": _ADVISORY_LOCK_KEY},
            )
            logger.info("Released migration advisory lock")


def run_migrations_online() -> None:
    """Run migrations on a synchronous connection (psycopg2 or pysqlite)."""
    engine = create_engine(_get_sync_database_url())

    with engine.connect() as connection:
        _run_migrations(connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
