"""Mapping of domain errors to HTTP responses."""

import structlog
from litestar import Request, Response

from sleep_log_server.core.exceptions import SleepLogError, StorageFailureError

logger = structlog.get_logger()


def sleep_log_error_handler(request: Request, exc: SleepLogError) -> Response[dict[str, object]]:
    """Render a ``SleepLogError`` with Litestar's error body plus the error code."""
    if isinstance(exc, StorageFailureError):
        logger.error("Request failed with storage error", path=request.url.path)
        detail = "Internal storage error"
    else:
        detail = exc.message

    return Response(
        content={
            "status_code": exc.status_code,
            "detail": detail,
            "error": exc.code,
        },
        status_code=exc.status_code,
    )
