"""Interval validation for sleep records.

Checks run in a fixed order and the first failure wins:

    1. both timestamps parse            -> InvalidTimeFormat
    2. start strictly before end        -> OrderingViolation
    3. neither timestamp in the future  -> FutureTimeViolation
    4. no overlap with other records    -> OverlapViolation

Overlap uses half-open intervals: ``[s1, e1)`` and ``[s2, e2)`` intersect iff
``s1 < e2 and s2 < e1``. Back-to-back records (one ends when the next starts)
are allowed.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from sleep_log_server.core.exceptions import (
    FutureTimeViolationError,
    InvalidTimeFormatError,
    OrderingViolationError,
    OverlapViolationError,
)
from sleep_log_server.models.sleep import SleepRecord

# Outside this range UTC conversion and week arithmetic can leave the calendar
MIN_YEAR = 2
MAX_YEAR = 9998


@dataclass(frozen=True)
class Interval:
    """A validated, timezone-aware sleep interval."""

    start_time: datetime
    end_time: datetime

    def overlaps(self, start_time: datetime, end_time: datetime) -> bool:
        """Check whether ``[start_time, end_time)`` intersects this interval."""
        return start_time < self.end_time and end_time > self.start_time


def parse_timestamp(value: str | datetime, field: str) -> datetime:
    """Parse an ISO-8601 timestamp.

    Naive values are interpreted as UTC.

    Args:
        value: ISO-8601 string or datetime
        field: Field name used in the error message

    Returns:
        Timezone-aware datetime

    Raises:
        InvalidTimeFormatError: If the value cannot be parsed or its year is
            outside MIN_YEAR..MAX_YEAR
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(value.strip())
        except (AttributeError, ValueError) as e:
            raise InvalidTimeFormatError(
                f"{field} must be an ISO-8601 timestamp, got {value!r}"
            ) from e

    if not MIN_YEAR <= parsed.year <= MAX_YEAR:
        raise InvalidTimeFormatError(
            f"{field} must be between years {MIN_YEAR} and {MAX_YEAR}, got {value!r}"
        )

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def validate_interval(
    start_value: str | datetime,
    end_value: str | datetime,
    existing: Iterable[SleepRecord],
    *,
    exclude_id: int | None = None,
    now: datetime | None = None,
) -> Interval:
    """Validate a candidate interval against the business rules.

    Args:
        start_value: Candidate start timestamp
        end_value: Candidate end timestamp
        existing: Records currently in the store
        exclude_id: Record being updated (ignored by the overlap check)
        now: Reference time for the future check (defaults to current time)

    Returns:
        The parsed interval

    Raises:
        InvalidTimeFormatError: If a timestamp cannot be parsed
        OrderingViolationError: If start is not strictly before end
        FutureTimeViolationError: If either timestamp is later than now
        OverlapViolationError: If the interval overlaps another record
    """
    start_time = parse_timestamp(start_value, "startTime")
    end_time = parse_timestamp(end_value, "endTime")

    if start_time >= end_time:
        raise OrderingViolationError("startTime must be before endTime")

    now = now or datetime.now(UTC)
    if start_time > now or end_time > now:
        raise FutureTimeViolationError("Sleep cannot be recorded in the future")

    candidate = Interval(start_time=start_time, end_time=end_time)

    for record in existing:
        if exclude_id is not None and record.id == exclude_id:
            continue
        if candidate.overlaps(record.start_time, record.end_time):
            raise OverlapViolationError(
                f"Interval overlaps existing sleep record {record.id} "
                f"({record.start_time.isoformat()} - {record.end_time.isoformat()})",
                conflicting_id=record.id,
            )

    return candidate
