"""Sleep record model."""

from datetime import datetime
from typing import Any

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from sleep_log_server.models.base import Base, OffsetDateTime, TimestampMixin, as_aware


class SleepRecord(Base, TimestampMixin):
    """A single sleep interval.

    The interval is half-open, ``[start_time, end_time)``. No two records may
    overlap; that rule is enforced by the record service before every write.
    """

    __tablename__ = "sleep_records"
    __table_args__ = {"comment": "Manually logged sleep intervals"}

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Interval (stored with the offset it was submitted with)
    start_time: Mapped[datetime] = mapped_column(OffsetDateTime, nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(OffsetDateTime, nullable=False)

    note: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        """String representation."""
        return f"<SleepRecord(id={self.id}, start={self.start_time}, end={self.end_time})>"

    @property
    def duration_hours(self) -> float:
        """Length of the interval in fractional hours."""
        return (self.end_time - self.start_time).total_seconds() / 3600

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the API's JSON shape."""
        return {
            "id": self.id,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "note": self.note,
            "createdAt": as_aware(self.created_at).isoformat() if self.created_at else None,
            "updatedAt": as_aware(self.updated_at).isoformat() if self.updated_at else None,
        }
