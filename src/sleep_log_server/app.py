"""Litestar application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from advanced_alchemy.config.asyncio import AsyncSessionConfig
from litestar import Litestar
from litestar.config.cors import CORSConfig
from litestar.datastructures import State
from litestar.openapi import OpenAPIConfig
from litestar.plugins.sqlalchemy import SQLAlchemyAsyncConfig, SQLAlchemyPlugin
from sqlalchemy.ext.asyncio import AsyncEngine

from sleep_log_server import __version__
from sleep_log_server.api import api_routers
from sleep_log_server.api.errors import sleep_log_error_handler
from sleep_log_server.core.config import settings
from sleep_log_server.core.database import close_database, init_database
from sleep_log_server.core.database import engine as default_engine
from sleep_log_server.core.exceptions import SleepLogError
from sleep_log_server.services.advice import AdviceService

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.log_level)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def create_app(
    engine: AsyncEngine | None = None,
    advice_service: AdviceService | None = None,
) -> Litestar:
    """Create Litestar application.

    Args:
        engine: Database engine (defaults to the one built from settings)
        advice_service: Advice provider client (defaults to one built from settings)

    Returns:
        Configured Litestar app instance
    """
    engine = engine or default_engine

    @asynccontextmanager
    async def lifespan(app: Litestar) -> AsyncIterator[None]:
        """Prepare the database on startup and release it on shutdown."""
        logger.info(
            "Starting sleep-log-server",
            version=__version__,
            database=engine.url.get_backend_name(),
            advice_configured=bool(app.state.advice_service.api_key),
        )

        await init_database(engine)

        yield

        await close_database(engine)
        logger.info("Shutdown complete")

    return Litestar(
        route_handlers=api_routers,
        lifespan=[lifespan],
        openapi_config=OpenAPIConfig(
            title="sleep-log-server API",
            version=__version__,
            description="Sleep logging with overlap validation, statistics and advice",
        ),
        plugins=[
            SQLAlchemyPlugin(
                config=SQLAlchemyAsyncConfig(
                    engine_instance=engine,
                    session_dependency_key="session",
                    session_config=AsyncSessionConfig(expire_on_commit=False),
                ),
            ),
        ],
        cors_config=CORSConfig(allow_origins=settings.cors_allow_origins),
        exception_handlers={SleepLogError: sleep_log_error_handler},
        state=State(
            {
                # One writer at a time across all requests of this process
                "sleep_write_lock": asyncio.Lock(),
                "advice_service": advice_service or AdviceService(),
            }
        ),
        debug=settings.log_level == "DEBUG",
    )


# Application instance
app = create_app()
