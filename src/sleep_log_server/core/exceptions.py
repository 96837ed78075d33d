"""Error taxonomy for sleep record operations.

Every error carries a stable ``code`` (returned to clients in the ``error``
field) and the HTTP status it maps to:

    400: InvalidTimeFormat, OrderingViolation, FutureTimeViolation, OverlapViolation
    404: NotFound
    500: StorageFailure, ConfigurationError, UpstreamError
"""

from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class SleepLogError(Exception):
    """Base class for all sleep log errors."""

    code = "SleepLogError"
    status_code = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SleepLogError):
    """A candidate interval was rejected by a business rule."""

    code = "ValidationError"
    status_code = HTTP_400_BAD_REQUEST


class InvalidTimeFormatError(ValidationError):
    """A timestamp could not be parsed."""

    code = "InvalidTimeFormat"


class OrderingViolationError(ValidationError):
    """startTime is not strictly before endTime."""

    code = "OrderingViolation"


class FutureTimeViolationError(ValidationError):
    """A timestamp lies in the future."""

    code = "FutureTimeViolation"


class OverlapViolationError(ValidationError):
    """The interval intersects an existing record."""

    code = "OverlapViolation"

    def __init__(self, message: str, conflicting_id: int | None = None) -> None:
        super().__init__(message)
        self.conflicting_id = conflicting_id


class RecordNotFoundError(SleepLogError):
    """No record exists with the requested id."""

    code = "NotFound"
    status_code = HTTP_404_NOT_FOUND

    def __init__(self, record_id: int) -> None:
        super().__init__(f"Sleep record {record_id} not found")
        self.record_id = record_id


class StorageFailureError(SleepLogError):
    """The underlying database failed."""

    code = "StorageFailure"


class AdviceConfigurationError(SleepLogError):
    """The advice provider credential is missing."""

    code = "ConfigurationError"


class AdviceUpstreamError(SleepLogError):
    """The advice provider could not be reached or returned an error."""

    code = "UpstreamError"
