"""CLI entry point for sleep-log-server."""

import asyncio

import typer
import uvicorn

from sleep_log_server import __version__
from sleep_log_server.core.config import settings

app = typer.Typer(
    name="sleep-log-server",
    help="Sleep logging server with statistics and advice",
    no_args_is_help=True,
)


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind to (overrides config)"),
    port: int = typer.Option(None, help="Port to bind to (overrides config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
) -> None:
    """Start the API server.

    Example:
        sleep-log-server serve
        sleep-log-server serve --host 0.0.0.0 --port 8080 --reload
    """
    uvicorn.run(
        "sleep_log_server.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("init-db")
def init_db() -> None:
    """Create missing database tables."""
    from sleep_log_server.core.database import close_database, create_tables, engine

    async def _run() -> None:
        await create_tables(engine)
        await close_database(engine)

    asyncio.run(_run())
    typer.echo(f"Tables created in {engine.url.render_as_string(hide_password=True)}")


@app.command()
def seed(
    days: int = typer.Option(10, min=1, max=365, help="Number of past nights to create"),
) -> None:
    """Insert demo sleep records for the last DAYS nights.

    Nights that overlap existing records or end in the future are skipped.
    """
    from sleep_log_server.core.database import (
        async_session_maker,
        close_database,
        create_tables,
        engine,
    )
    from sleep_log_server.services.record_store import SleepRecordStore
    from sleep_log_server.services.seed import seed_demo_data
    from sleep_log_server.services.sleep import SleepService

    async def _run():
        await create_tables(engine)
        async with async_session_maker() as session:
            result = await seed_demo_data(SleepService(SleepRecordStore(session)), days=days)
        await close_database(engine)
        return result

    result = asyncio.run(_run())
    typer.echo(f"Created {result.created} sleep records")
    for reason in result.skipped:
        typer.echo(f"  skipped {reason}")


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"sleep-log-server v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
