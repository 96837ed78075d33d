"""Application services."""

from sleep_log_server.services.advice import AdviceService
from sleep_log_server.services.record_store import SleepRecordStore
from sleep_log_server.services.sleep import SleepService

__all__ = [
    "AdviceService",
    "SleepRecordStore",
    "SleepService",
]
