"""Alembic migration environment configuration."""

from logging.config import fileConfig

from sqlalchemy import create_engine, pool
from sqlalchemy.engine import Connection

from alembic import context

# this is the Alembic Config object
config = context.config

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Import settings for database URL
from sleep_log_server.core.config import settings  # noqa: E402

# Import Base and all models to register them with metadata
from sleep_log_server.models import SleepRecord  # noqa: E402, F401
from sleep_log_server.models.base import Base  # noqa: E402

# Set target metadata for autogenerate support
target_metadata = Base.metadata

# Async drivers and the sync drivers Alembic runs with instead
SYNC_DRIVERS = {
    "+asyncpg": "+psycopg",
    "+aiosqlite": "",
}


def get_sync_database_url() -> str:
    """Get synchronous database URL for migrations.

    Swaps the async driver of the configured URL for its sync counterpart.
    """
    url = settings.database_url

    for async_driver, sync_driver in SYNC_DRIVERS.items():
        if async_driver in url:
            url = url.replace(async_driver, sync_driver)

    return url


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Emits SQL to the script output without connecting to a database.
    """
    url = get_sync_database_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations with a connection."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against a live connection."""
    connectable = create_engine(
        get_sync_database_url(),
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        do_run_migrations(connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
