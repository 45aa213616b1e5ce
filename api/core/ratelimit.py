"""Rate limiting configuration using slowapi.

Production with more than one worker MUST use Redis:
set RATELIMIT_STORAGE_URI="redis://host:port/db". memory:// keeps a
separate counter per process.
"""

import logging

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

if not settings.debug and settings.ratelimit_storage_uri == "memory://":
    logger.warning(
        "ratelimit.memory_storage",
        extra={"hint": "Set RATELIMIT_STORAGE_URI to a Redis URL"},
    )


def _get_request_identifier(request: Request) -> str:
    """Authenticated user ID when known, otherwise the client IP."""
    if getattr(request.state, "user_id", None):
        return f"user:{request.state.user_id}"

    return get_remote_address(request)


_using_redis = settings.ratelimit_storage_uri.startswith("redis://")

limiter = Limiter(
    key_func=_get_request_identifier,
    default_limits=["100/minute"],
    storage_uri=settings.ratelimit_storage_uri,
    in_memory_fallback_enabled=_using_redis,
    key_prefix="laundry-admin:",
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    logger.warning(
        "ratelimit.exceeded",
        extra={
            "client": _get_request_identifier(request),
            "limit": exc.detail,
            "path": request.url.path,
        },
    )
    return JSONResponse(
        status_code=429,
        content={"error": "Rate limit exceeded. Please slow down."},
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


LOGIN_LIMIT = settings.login_rate_limit

ADMIN_LIMIT = settings.admin_rate_limit
