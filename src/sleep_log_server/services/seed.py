"""Demo data for a fresh database."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, time, timedelta

import structlog

from sleep_log_server.core.exceptions import ValidationError
from sleep_log_server.services.sleep import SleepService

logger = structlog.get_logger()

# (bedtime, wake time, note); wake time is on the following day unless it is
# later than the bedtime
DEMO_NIGHTS: list[tuple[time, time, str]] = [
    (time(22, 0), time(6, 30), "Slept in on the weekend"),
    (time(23, 0), time(7, 0), "Usual night"),
    (time(22, 30), time(5, 0), "Fell asleep late, woke up early"),
    (time(21, 0), time(7, 0), "Very long sleep"),
    (time(23, 0), time(7, 0), "Deep sleep"),
    (time(22, 30), time(6, 30), "Lots of dreams"),
    (time(23, 0), time(7, 30), "Overslept"),
    (time(20, 0), time(21, 0), "Evening nap"),
    (time(22, 0), time(5, 0), "Woke up early"),
    (time(23, 0), time(8, 0), "Woke up refreshed"),
    (time(22, 0), time(6, 0), "A bit tired"),
]


@dataclass
class SeedResult:
    """Outcome of a seed run."""

    created: int = 0
    skipped: list[str] = field(default_factory=list)


def demo_intervals(days: int, now: datetime | None = None) -> list[tuple[datetime, datetime, str]]:
    """Build one demo night per day for the last ``days`` days, oldest first."""
    now = now or datetime.now(UTC)
    today = now.date()
    intervals = []

    for offset in range(days, 0, -1):
        bedtime, wake_time, note = DEMO_NIGHTS[(days - offset) % len(DEMO_NIGHTS)]
        night = today - timedelta(days=offset)
        start = datetime.combine(night, bedtime, tzinfo=UTC)
        end_day = night if wake_time > bedtime else night + timedelta(days=1)
        end = datetime.combine(end_day, wake_time, tzinfo=UTC)
        intervals.append((start, end, note))

    return intervals


async def seed_demo_data(service: SleepService, days: int = 10) -> SeedResult:
    """Insert demo nights through the service so every rule still applies.

    Nights that overlap existing records or end in the future are skipped.
    """
    result = SeedResult()

    for start, end, note in demo_intervals(days):
        try:
            await service.create_record(start, end, note)
        except ValidationError as e:
            result.skipped.append(f"{start.isoformat()}: {e.message}")
            continue
        result.created += 1

    logger.info("Demo data seeded", created=result.created, skipped=len(result.skipped))
    return result
