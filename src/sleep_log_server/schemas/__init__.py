"""Pydantic schemas for API requests."""

from sleep_log_server.schemas.sleep import AdviceRequest, SleepRecordInput

__all__ = [
    "AdviceRequest",
    "SleepRecordInput",
]
