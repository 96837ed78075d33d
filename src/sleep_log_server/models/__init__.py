"""Database models."""

from sleep_log_server.models.base import Base
from sleep_log_server.models.sleep import SleepRecord

__all__ = [
    "Base",
    "SleepRecord",
]
