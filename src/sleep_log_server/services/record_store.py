"""Persistence for sleep records."""

import asyncio
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sleep_log_server.core.exceptions import RecordNotFoundError, StorageFailureError
from sleep_log_server.models.sleep import SleepRecord

logger = structlog.get_logger()


class SleepRecordStore:
    """CRUD access to the ``sleep_records`` table.

    Each write is a single commit. Database errors are rolled back and raised
    as ``StorageFailureError``.

    ``exclusive()`` hands out a process-wide write lock so callers can run a
    read-validate-write sequence without another writer slipping in between.
    Share one lock between all stores of a process.
    """

    def __init__(self, session: AsyncSession, write_lock: asyncio.Lock | None = None) -> None:
        """Initialize store.

        Args:
            session: Database session
            write_lock: Lock shared by all writers of this database
        """
        self.session = session
        self.write_lock = write_lock or asyncio.Lock()
        self.logger = logger.bind(component="record_store")

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[None]:
        """Hold the write lock for the duration of the block."""
        async with self.write_lock:
            yield

    async def list(self) -> Sequence[SleepRecord]:
        """Return all records, most recent start first."""
        try:
            result = await self.session.execute(select(SleepRecord))
            records = result.scalars().all()
        except SQLAlchemyError as e:
            raise await self._storage_failure("list", e) from e

        # Text columns sort lexically; order by the actual instant instead
        return sorted(records, key=lambda r: r.start_time, reverse=True)

    async def get(self, record_id: int) -> SleepRecord:
        """Fetch one record.

        Raises:
            RecordNotFoundError: If no record has this id
        """
        try:
            record = await self.session.get(SleepRecord, record_id)
        except SQLAlchemyError as e:
            raise await self._storage_failure("get", e) from e

        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    async def create(
        self,
        start_time: datetime,
        end_time: datetime,
        note: str | None = None,
    ) -> SleepRecord:
        """Insert a new record; id and timestamps are assigned here."""
        now = datetime.now(UTC)
        record = SleepRecord(
            start_time=start_time,
            end_time=end_time,
            note=note,
            created_at=now,
            updated_at=now,
        )

        try:
            self.session.add(record)
            await self.session.commit()
            await self.session.refresh(record)
        except SQLAlchemyError as e:
            raise await self._storage_failure("create", e) from e

        return record

    async def update(
        self,
        record_id: int,
        start_time: datetime,
        end_time: datetime,
        note: str | None = None,
    ) -> SleepRecord:
        """Replace interval and note of an existing record.

        Raises:
            RecordNotFoundError: If no record has this id
        """
        record = await self.get(record_id)

        record.start_time = start_time
        record.end_time = end_time
        record.note = note
        record.updated_at = datetime.now(UTC)

        try:
            await self.session.commit()
            await self.session.refresh(record)
        except SQLAlchemyError as e:
            raise await self._storage_failure("update", e) from e

        return record

    async def delete(self, record_id: int) -> None:
        """Hard-delete a record.

        Raises:
            RecordNotFoundError: If no record has this id
        """
        record = await self.get(record_id)

        try:
            await self.session.delete(record)
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._storage_failure("delete", e) from e

    async def _storage_failure(self, operation: str, error: SQLAlchemyError) -> StorageFailureError:
        """Roll back, log and wrap a database error."""
        await self.session.rollback()
        self.logger.error("Storage operation failed", operation=operation, error=str(error))
        return StorageFailureError("Sleep records could not be accessed")
