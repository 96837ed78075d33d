"""Pydantic schemas for sleep record and advice requests."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class SleepRecordInput(BaseModel):
    """Body of create and update requests.

    Timestamps are kept as raw strings here; parsing them is part of interval
    validation so that malformed values surface as ``InvalidTimeFormat``.
    """

    model_config = ConfigDict(populate_by_name=True)

    start_time: str = Field(alias="startTime", description="ISO-8601 start timestamp")
    end_time: str = Field(alias="endTime", description="ISO-8601 end timestamp")
    note: str | None = Field(
        default=None,
        validation_alias=AliasChoices("note", "notes"),
        description="Optional free-text note",
    )


class AdviceRequest(BaseModel):
    """Records and statistics forwarded verbatim to the advice provider."""

    model_config = ConfigDict(populate_by_name=True)

    sleeps: list[dict[str, Any]] = Field(description="Sleep records as shown to the user")
    sleep_stats: list[dict[str, Any]] = Field(alias="sleepStats", description="Daily stats")
    weekly_sleep_stats: list[dict[str, Any]] = Field(
        alias="weeklySleepStats", description="Weekly duration totals"
    )
    hour_distribution_stats: list[dict[str, Any]] = Field(
        alias="hourDistributionStats", description="Start/end hour distribution"
    )

    def to_payload(self) -> dict[str, Any]:
        """Dump with the client's field names."""
        return self.model_dump(by_alias=True)
