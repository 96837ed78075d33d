"""Sleep record service: validated CRUD, statistics and advice."""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

import structlog

from sleep_log_server.core.config import settings
from sleep_log_server.core.exceptions import ValidationError
from sleep_log_server.models.sleep import SleepRecord
from sleep_log_server.services.advice import AdviceService
from sleep_log_server.services.record_store import SleepRecordStore
from sleep_log_server.services.statistics import (
    DailyStat,
    HourDistributionStat,
    WeeklyStat,
    daily_stats,
    hour_distribution,
    weekly_stats,
)
from sleep_log_server.services.validation import validate_interval

logger = structlog.get_logger()


class SleepService:
    """Orchestrates validation, persistence and aggregation of sleep records.

    Writes take the store's exclusive lock so that the overlap check and the
    write it guards see the same set of records.
    """

    def __init__(
        self,
        store: SleepRecordStore,
        advice_service: AdviceService | None = None,
        lookback_days: int | None = None,
    ) -> None:
        """Initialize sleep service.

        Args:
            store: Record store
            advice_service: Advice provider client (created from settings if omitted)
            lookback_days: Window for daily stats (defaults to settings)
        """
        self.store = store
        self.advice_service = advice_service or AdviceService()
        self.lookback_days = lookback_days or settings.stats_lookback_days
        self.logger = logger.bind(service="sleep")

    async def create_record(
        self,
        start_time: str | datetime,
        end_time: str | datetime,
        note: str | None = None,
        now: datetime | None = None,
    ) -> SleepRecord:
        """Validate and store a new sleep interval.

        Raises:
            ValidationError: First failing validation rule
            StorageFailureError: If the database fails
        """
        async with self.store.exclusive():
            existing = await self.store.list()
            try:
                interval = validate_interval(start_time, end_time, existing, now=now)
            except ValidationError as e:
                self.logger.info("Sleep record rejected", error=e.code, reason=e.message)
                raise

            record = await self.store.create(interval.start_time, interval.end_time, note)

        self.logger.info("Sleep record created", record_id=record.id)
        return record

    async def list_records(self) -> Sequence[SleepRecord]:
        """All records, most recent start first."""
        return await self.store.list()

    async def get_record(self, record_id: int) -> SleepRecord:
        """Fetch one record.

        Raises:
            RecordNotFoundError: If the id does not exist
        """
        return await self.store.get(record_id)

    async def update_record(
        self,
        record_id: int,
        start_time: str | datetime,
        end_time: str | datetime,
        note: str | None = None,
        now: datetime | None = None,
    ) -> SleepRecord:
        """Validate and replace an existing record's interval and note.

        The record itself is excluded from the overlap check, so saving a record
        with its current interval succeeds.

        Raises:
            RecordNotFoundError: If the id does not exist
            ValidationError: First failing validation rule
            StorageFailureError: If the database fails
        """
        async with self.store.exclusive():
            existing = await self.store.list()
            try:
                interval = validate_interval(
                    start_time, end_time, existing, exclude_id=record_id, now=now
                )
            except ValidationError as e:
                self.logger.info(
                    "Sleep record update rejected",
                    record_id=record_id,
                    error=e.code,
                    reason=e.message,
                )
                raise

            record = await self.store.update(
                record_id, interval.start_time, interval.end_time, note
            )

        self.logger.info("Sleep record updated", record_id=record_id)
        return record

    async def delete_record(self, record_id: int) -> None:
        """Delete a record.

        Raises:
            RecordNotFoundError: If the id does not exist
        """
        async with self.store.exclusive():
            await self.store.delete(record_id)

        self.logger.info("Sleep record deleted", record_id=record_id)

    async def get_daily_stats(self, now: datetime | None = None) -> list[DailyStat]:
        """Average duration per day over the lookback window."""
        records = await self.store.list()
        return daily_stats(records, now=now, lookback_days=self.lookback_days)

    async def get_weekly_stats(self) -> list[WeeklyStat]:
        """Total duration per Sunday-anchored week."""
        return weekly_stats(await self.store.list())

    async def get_hour_distribution(self) -> list[HourDistributionStat]:
        """Start/end counts for each of the 24 hours."""
        return hour_distribution(await self.store.list())

    async def get_advice(self, payload: dict[str, Any]) -> str:
        """Forward client-supplied records and stats to the advice provider.

        Raises:
            AdviceConfigurationError: If the provider credential is missing
            AdviceUpstreamError: If the provider call fails
        """
        return await self.advice_service.generate(payload)
