"""API routes."""

from litestar import Router

from sleep_log_server.api.health import health_router
from sleep_log_server.api.sleep import sleep_router
from sleep_log_server.core.config import settings

# Sleep record endpoints get the API prefix (/api by default)
api_prefixed_router = Router(path=settings.api_prefix, route_handlers=[sleep_router])

# Export: health (root), sleep (prefixed)
api_routers = [health_router, api_prefixed_router]

__all__ = ["api_routers"]
