"""Sleep record API endpoints."""

import asyncio
from typing import Any

from litestar import Router, delete, get, post, put
from litestar.datastructures import State
from litestar.di import Provide
from litestar.status_codes import HTTP_200_OK, HTTP_201_CREATED, HTTP_204_NO_CONTENT
from sqlalchemy.ext.asyncio import AsyncSession

from sleep_log_server.schemas.sleep import AdviceRequest, SleepRecordInput
from sleep_log_server.services.advice import AdviceService
from sleep_log_server.services.record_store import SleepRecordStore
from sleep_log_server.services.sleep import SleepService


async def provide_sleep_service(session: AsyncSession, state: State) -> SleepService:
    """Build the request's sleep service around the injected session.

    The write lock and advice client live in application state and are shared
    by every request.
    """
    write_lock: asyncio.Lock = state.sleep_write_lock
    advice_service: AdviceService = state.advice_service
    return SleepService(SleepRecordStore(session, write_lock), advice_service=advice_service)


@post("/sleep", status_code=HTTP_201_CREATED)
async def create_sleep_record(data: SleepRecordInput, sleep_service: SleepService) -> dict[str, Any]:
    """Create a sleep record.

    Returns:
        The stored record

    Example:
        POST /api/sleep
        {"startTime": "2024-01-01T22:00:00+09:00", "endTime": "2024-01-02T06:00:00+09:00"}
    """
    record = await sleep_service.create_record(data.start_time, data.end_time, data.note)
    return record.to_dict()


@get("/sleep", status_code=HTTP_200_OK)
async def list_sleep_records(sleep_service: SleepService) -> list[dict[str, Any]]:
    """List all sleep records, most recent start first."""
    records = await sleep_service.list_records()
    return [record.to_dict() for record in records]


@get("/sleep/{record_id:int}", status_code=HTTP_200_OK)
async def get_sleep_record(record_id: int, sleep_service: SleepService) -> dict[str, Any]:
    """Get a single sleep record."""
    record = await sleep_service.get_record(record_id)
    return record.to_dict()


@put("/sleep/{record_id:int}", status_code=HTTP_200_OK)
async def update_sleep_record(
    record_id: int,
    data: SleepRecordInput,
    sleep_service: SleepService,
) -> dict[str, Any]:
    """Replace interval and note of a sleep record."""
    record = await sleep_service.update_record(
        record_id, data.start_time, data.end_time, data.note
    )
    return record.to_dict()


@delete("/sleep/{record_id:int}", status_code=HTTP_204_NO_CONTENT)
async def delete_sleep_record(record_id: int, sleep_service: SleepService) -> None:
    """Delete a sleep record."""
    await sleep_service.delete_record(record_id)


@get("/sleep/stats", status_code=HTTP_200_OK)
async def get_daily_stats(sleep_service: SleepService) -> list[dict[str, Any]]:
    """Average sleep duration per day over the last week.

    Returns:
        ``[{date, averageDuration, sleepCount}]`` ascending by date
    """
    stats = await sleep_service.get_daily_stats()
    return [stat.to_dict() for stat in stats]


@get("/sleep/stats/weekly-duration", status_code=HTTP_200_OK)
async def get_weekly_duration(sleep_service: SleepService) -> list[dict[str, Any]]:
    """Total sleep duration per week (weeks start on Sunday).

    Returns:
        ``[{week, totalDuration}]`` ascending by week
    """
    stats = await sleep_service.get_weekly_stats()
    return [stat.to_dict() for stat in stats]


@get("/sleep/stats/hour-distribution", status_code=HTTP_200_OK)
async def get_hour_distribution(sleep_service: SleepService) -> list[dict[str, Any]]:
    """Number of sleeps starting and ending in each hour of the day.

    Returns:
        24 entries ``[{hour, starts, ends}]``, hours "00" to "23"
    """
    stats = await sleep_service.get_hour_distribution()
    return [stat.to_dict() for stat in stats]


@post("/sleep/advice", status_code=HTTP_200_OK)
async def get_sleep_advice(data: AdviceRequest, sleep_service: SleepService) -> dict[str, str]:
    """Ask the text generation provider for advice on the supplied data.

    The records and statistics are forwarded as sent; nothing is recomputed.
    """
    advice = await sleep_service.get_advice(data.to_payload())
    return {"advice": advice}


sleep_router = Router(
    path="/",
    route_handlers=[
        create_sleep_record,
        list_sleep_records,
        get_sleep_record,
        update_sleep_record,
        delete_sleep_record,
        get_daily_stats,
        get_weekly_duration,
        get_hour_distribution,
        get_sleep_advice,
    ],
    dependencies={"sleep_service": Provide(provide_sleep_service)},
    tags=["Sleep"],
)
