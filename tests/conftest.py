"""Shared test fixtures."""

import asyncio
import json
from collections.abc import AsyncIterator, Callable

import httpx
import pytest
from litestar.testing import AsyncTestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from sleep_log_server.models.base import Base
from sleep_log_server.services.advice import AdviceService
from sleep_log_server.services.record_store import SleepRecordStore
from sleep_log_server.services.sleep import SleepService


def sse_body(*fragments: str) -> str:
    """Build a Gemini-style server-sent event stream carrying ``fragments``."""
    events = []
    for fragment in fragments:
        chunk = {"candidates": [{"content": {"role": "model", "parts": [{"text": fragment}]}}]}
        events.append(f"data: {json.dumps(chunk)}\r\n\r\n")
    return "".join(events)


@pytest.fixture
async def async_engine():
    """Create async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine) -> AsyncIterator[AsyncSession]:
    """Create async session for testing."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def advice_requests() -> list[httpx.Request]:
    """Requests received by the fake advice provider."""
    return []


@pytest.fixture
def advice_handler(
    advice_requests: list[httpx.Request],
) -> Callable[[httpx.Request], httpx.Response]:
    """Fake provider answering with a two-fragment stream."""

    def handler(request: httpx.Request) -> httpx.Response:
        advice_requests.append(request)
        return httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            text=sse_body("Go to bed ", "earlier."),
        )

    return handler


@pytest.fixture
def advice_service(advice_handler) -> AdviceService:
    """Advice service wired to the fake provider."""
    return AdviceService(
        api_key="test-gemini-key",
        model="gemini-test",
        api_base="https://gemini.test/v1beta",
        transport=httpx.MockTransport(advice_handler),
    )


@pytest.fixture
def store(async_session: AsyncSession) -> SleepRecordStore:
    """Record store on the test session."""
    return SleepRecordStore(async_session, asyncio.Lock())


@pytest.fixture
def sleep_service(store: SleepRecordStore, advice_service: AdviceService) -> SleepService:
    """Sleep service with the fake advice provider."""
    return SleepService(store, advice_service=advice_service, lookback_days=7)


@pytest.fixture
async def client(async_engine, advice_service: AdviceService) -> AsyncIterator[AsyncTestClient]:
    """HTTP test client against the in-memory database."""
    from sleep_log_server.app import create_app

    app = create_app(engine=async_engine, advice_service=advice_service)
    async with AsyncTestClient(app=app) as test_client:
        yield test_client
