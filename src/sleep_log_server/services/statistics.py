"""Sleep statistics derived from the full record set.

All three aggregations are pure functions over a list of records. Dates and
hours are taken from each timestamp in the UTC offset it was stored with, so a
record logged as ``22:00+09:00`` counts toward hour 22 and toward that local
calendar date. Durations are fractional hours and are never rounded here.
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Any

from sleep_log_server.models.sleep import SleepRecord

DEFAULT_LOOKBACK_DAYS = 7
HOURS_PER_DAY = 24


@dataclass
class DailyStat:
    """Average sleep duration for one calendar date."""

    date: date
    average_duration_hours: float
    sleep_count: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the daily stats JSON shape."""
        return {
            "date": self.date.isoformat(),
            "averageDuration": self.average_duration_hours,
            "sleepCount": self.sleep_count,
        }


@dataclass
class WeeklyStat:
    """Total sleep duration for one Sunday-anchored week."""

    week_start: date
    total_duration_hours: float

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the weekly duration JSON shape."""
        return {
            "week": self.week_start.isoformat(),
            "totalDuration": self.total_duration_hours,
        }


@dataclass
class HourDistributionStat:
    """How many records start and end in a given hour of the day."""

    hour: int
    start_count: int = 0
    end_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the hour distribution JSON shape."""
        return {
            "hour": f"{self.hour:02d}",
            "starts": self.start_count,
            "ends": self.end_count,
        }


def week_start(day: date) -> date:
    """Return the Sunday on or before ``day``, or ``date.min`` if there is none."""
    # Monday is 0, Sunday is 6
    offset = (day.weekday() + 1) % 7
    if day.toordinal() <= offset:
        return date.min
    return day - timedelta(days=offset)


def daily_stats(
    records: Iterable[SleepRecord],
    now: datetime | None = None,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> list[DailyStat]:
    """Average duration per start date over the trailing lookback window.

    Args:
        records: Sleep records
        now: End of the lookback window (defaults to current time)
        lookback_days: Window length in days

    Returns:
        One entry per distinct start date, ascending by date
    """
    now = now or datetime.now(UTC)
    since = now - timedelta(days=lookback_days)

    totals: dict[date, float] = defaultdict(float)
    counts: dict[date, int] = defaultdict(int)

    for record in records:
        if record.start_time < since:
            continue
        day = record.start_time.date()
        totals[day] += record.duration_hours
        counts[day] += 1

    return [
        DailyStat(
            date=day,
            average_duration_hours=totals[day] / counts[day],
            sleep_count=counts[day],
        )
        for day in sorted(totals)
    ]


def weekly_stats(records: Iterable[SleepRecord]) -> list[WeeklyStat]:
    """Total duration per Sunday-anchored week, over all records.

    Returns:
        One entry per week containing at least one start time, ascending
    """
    totals: dict[date, float] = defaultdict(float)

    for record in records:
        totals[week_start(record.start_time.date())] += record.duration_hours

    return [
        WeeklyStat(week_start=week, total_duration_hours=totals[week])
        for week in sorted(totals)
    ]


def hour_distribution(records: Iterable[SleepRecord]) -> list[HourDistributionStat]:
    """Count start and end times per hour of the day.

    Returns:
        Exactly 24 entries, hours 0-23, including empty hours
    """
    buckets = [HourDistributionStat(hour=hour) for hour in range(HOURS_PER_DAY)]

    for record in records:
        buckets[record.start_time.hour].start_count += 1
        buckets[record.end_time.hour].end_count += 1

    return buckets
