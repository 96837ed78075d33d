"""Tests for the sleep record store and service."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from sleep_log_server.core.exceptions import (
    FutureTimeViolationError,
    InvalidTimeFormatError,
    OrderingViolationError,
    OverlapViolationError,
    RecordNotFoundError,
    StorageFailureError,
)
from sleep_log_server.services.record_store import SleepRecordStore
from sleep_log_server.services.seed import demo_intervals, seed_demo_data
from sleep_log_server.services.sleep import SleepService


class TestSleepRecordStore:
    """Tests for persistence."""

    async def test_create_assigns_id_and_timestamps(self, store: SleepRecordStore) -> None:
        record = await store.create(
            datetime(2024, 1, 1, 22, tzinfo=UTC),
            datetime(2024, 1, 2, 6, tzinfo=UTC),
            "first night",
        )

        assert record.id is not None
        assert record.created_at is not None
        assert record.updated_at is not None
        assert record.note == "first night"

    async def test_offset_round_trips(self, store: SleepRecordStore) -> None:
        """The submitted UTC offset is kept by the database."""
        created = await store.create(
            datetime.fromisoformat("2024-01-01T22:00:00+09:00"),
            datetime.fromisoformat("2024-01-02T06:00:00+09:00"),
        )
        store.session.expunge_all()

        fetched = await store.get(created.id)

        assert fetched.start_time.isoformat() == "2024-01-01T22:00:00+09:00"
        assert fetched.end_time.utcoffset() == timedelta(hours=9)

    async def test_list_orders_by_instant_descending(self, store: SleepRecordStore) -> None:
        """Ordering follows real time even across offsets."""
        # Lexically "2024-01-02T01:00+09:00" > "2024-01-01T20:00+00:00" but it is earlier
        early = await store.create(
            datetime.fromisoformat("2024-01-02T01:00:00+09:00"),
            datetime.fromisoformat("2024-01-02T02:00:00+09:00"),
        )
        late = await store.create(
            datetime.fromisoformat("2024-01-01T20:00:00+00:00"),
            datetime.fromisoformat("2024-01-01T21:00:00+00:00"),
        )
        middle = await store.create(
            datetime.fromisoformat("2024-01-01T18:00:00+00:00"),
            datetime.fromisoformat("2024-01-01T19:00:00+00:00"),
        )

        records = await store.list()

        assert [r.id for r in records] == [late.id, middle.id, early.id]

    async def test_get_missing_raises(self, store: SleepRecordStore) -> None:
        with pytest.raises(RecordNotFoundError) as exc_info:
            await store.get(999)
        assert exc_info.value.record_id == 999

    async def test_delete_missing_raises(self, store: SleepRecordStore) -> None:
        with pytest.raises(RecordNotFoundError):
            await store.delete(999)

    async def test_database_error_becomes_storage_failure(
        self, store: SleepRecordStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """SQLAlchemy errors are wrapped."""

        async def broken_execute(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(store.session, "execute", broken_execute)

        with pytest.raises(StorageFailureError):
            await store.list()


class TestSleepService:
    """Tests for validated CRUD and statistics."""

    async def test_create_then_list(self, sleep_service: SleepService) -> None:
        record = await sleep_service.create_record(
            "2024-01-01T22:00:00Z", "2024-01-02T06:00:00Z", "note"
        )

        records = await sleep_service.list_records()

        assert [r.id for r in records] == [record.id]
        assert records[0].note == "note"

    async def test_overlapping_create_rejected(self, sleep_service: SleepService) -> None:
        await sleep_service.create_record("2024-01-01T22:00:00Z", "2024-01-02T06:00:00Z")

        with pytest.raises(OverlapViolationError):
            await sleep_service.create_record("2024-01-02T05:00:00Z", "2024-01-02T09:00:00Z")

        assert len(await sleep_service.list_records()) == 1

    async def test_validation_order(self, sleep_service: SleepService) -> None:
        """Each rule reports its own error."""
        with pytest.raises(InvalidTimeFormatError):
            await sleep_service.create_record("bad", "2024-01-02T06:00:00Z")
        with pytest.raises(OrderingViolationError):
            await sleep_service.create_record("2024-01-02T06:00:00Z", "2024-01-02T06:00:00Z")

        future = datetime.now(UTC) + timedelta(hours=2)
        with pytest.raises(FutureTimeViolationError):
            await sleep_service.create_record(future - timedelta(hours=8), future)

    async def test_update_to_own_interval_succeeds(self, sleep_service: SleepService) -> None:
        record = await sleep_service.create_record("2024-01-01T22:00:00Z", "2024-01-02T06:00:00Z")

        updated = await sleep_service.update_record(
            record.id, "2024-01-01T22:00:00Z", "2024-01-02T06:00:00Z", "same interval"
        )

        assert updated.id == record.id
        assert updated.note == "same interval"

    async def test_update_replaces_fields(self, sleep_service: SleepService) -> None:
        record = await sleep_service.create_record(
            "2024-01-01T22:00:00Z", "2024-01-02T06:00:00Z", "old note"
        )

        updated = await sleep_service.update_record(
            record.id, "2024-01-01T23:00:00Z", "2024-01-02T07:30:00Z"
        )

        assert updated.start_time == datetime(2024, 1, 1, 23, tzinfo=UTC)
        assert updated.duration_hours == pytest.approx(8.5)
        assert updated.note is None

    async def test_update_overlapping_other_rejected(self, sleep_service: SleepService) -> None:
        first = await sleep_service.create_record("2024-01-01T22:00:00Z", "2024-01-02T06:00:00Z")
        await sleep_service.create_record("2024-01-02T22:00:00Z", "2024-01-03T06:00:00Z")

        with pytest.raises(OverlapViolationError):
            await sleep_service.update_record(
                first.id, "2024-01-01T22:00:00Z", "2024-01-02T23:00:00Z"
            )

    async def test_update_missing_raises_not_found(self, sleep_service: SleepService) -> None:
        with pytest.raises(RecordNotFoundError):
            await sleep_service.update_record(42, "2024-01-01T22:00:00Z", "2024-01-02T06:00:00Z")

    async def test_delete_twice(self, sleep_service: SleepService) -> None:
        """Second delete reports NotFound instead of failing otherwise."""
        record = await sleep_service.create_record("2024-01-01T22:00:00Z", "2024-01-02T06:00:00Z")

        await sleep_service.delete_record(record.id)
        with pytest.raises(RecordNotFoundError):
            await sleep_service.delete_record(record.id)

        assert await sleep_service.list_records() == []

    async def test_concurrent_overlapping_creates(self, sleep_service: SleepService) -> None:
        """Only one of two racing overlapping writes is stored."""
        results = await asyncio.gather(
            sleep_service.create_record("2024-01-01T22:00:00Z", "2024-01-02T06:00:00Z"),
            sleep_service.create_record("2024-01-02T01:00:00Z", "2024-01-02T08:00:00Z"),
            return_exceptions=True,
        )

        assert sum(isinstance(r, OverlapViolationError) for r in results) == 1
        assert len(await sleep_service.list_records()) == 1

    async def test_stats_read_current_records(self, sleep_service: SleepService) -> None:
        now = datetime(2024, 1, 3, 12, tzinfo=UTC)
        await sleep_service.create_record(
            "2024-01-01T22:00:00Z", "2024-01-02T06:00:00Z", now=now
        )

        daily = await sleep_service.get_daily_stats(now=now)
        weekly = await sleep_service.get_weekly_stats()
        hours = await sleep_service.get_hour_distribution()

        assert [d.to_dict() for d in daily] == [
            {"date": "2024-01-01", "averageDuration": 8.0, "sleepCount": 1}
        ]
        assert [w.to_dict() for w in weekly] == [{"week": "2023-12-31", "totalDuration": 8.0}]
        assert len(hours) == 24
        assert hours[22].start_count == 1

    async def test_advice_forwards_payload(self, sleep_service: SleepService, advice_requests) -> None:
        advice = await sleep_service.get_advice(
            {"sleeps": [], "sleepStats": [], "weeklySleepStats": [], "hourDistributionStats": []}
        )

        assert advice == "Go to bed earlier."
        assert len(advice_requests) == 1


class TestSeed:
    """Tests for demo data."""

    def test_demo_intervals_are_past_and_ordered(self) -> None:
        now = datetime(2024, 3, 15, 3, 0, tzinfo=UTC)

        intervals = demo_intervals(5, now=now)

        assert len(intervals) == 5
        assert all(start < end for start, end, _ in intervals)
        assert [s for s, _, _ in intervals] == sorted(s for s, _, _ in intervals)
        assert intervals[0][0].date() == datetime(2024, 3, 10).date()

    async def test_seed_skips_existing_overlaps(self, sleep_service: SleepService) -> None:
        first = await seed_demo_data(sleep_service, days=5)
        second = await seed_demo_data(sleep_service, days=5)

        assert first.created >= 4
        assert second.created == 0
        assert len(second.skipped) == 5
