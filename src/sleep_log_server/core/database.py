"""Database engine creation and schema initialization."""

import logging

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from sleep_log_server.core.config import settings
from sleep_log_server.models.base import Base

logger = logging.getLogger(__name__)


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """Create the async database engine.

    Args:
        database_url: Database URL (defaults to the configured one)

    Returns:
        Async SQLAlchemy engine
    """
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        url,
        echo=False,
        pool_size=10,
        max_overflow=20,
        pool_recycle=300,  # Recycle connections every 5 minutes
    )


# Global engine and session maker
engine = create_engine()
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def create_tables(target: AsyncEngine) -> None:
    """Create any missing tables."""
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_database(target: AsyncEngine | None = None) -> None:
    """Prepare the database for serving requests.

    With ``database_create_tables`` enabled, missing tables are created directly
    from the model metadata. Otherwise the schema is expected to come from
    Alembic and only the presence of the ``alembic_version`` table is checked.

    Args:
        target: Engine to initialize (defaults to the global engine)
    """
    target = target or engine

    if settings.database_create_tables:
        await create_tables(target)
        logger.info("Database tables created")
        return

    async with target.connect() as conn:
        has_migrations = await conn.run_sync(
            lambda sync_conn: inspect(sync_conn).has_table("alembic_version")
        )

    if not has_migrations:
        logger.warning(
            "Database migrations have not been applied. "
            "Run 'alembic upgrade head' to initialize the database schema."
        )
    else:
        logger.info("Database schema managed by Alembic")


async def close_database(target: AsyncEngine | None = None) -> None:
    """Close database connection pool."""
    await (target or engine).dispose()
