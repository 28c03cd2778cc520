"""Per-client rate limiting for the HTTP API."""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.core.config import settings
from app.schemas.response_schema import error_response

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.server.rate_limit],
)


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Custom handler for rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content=error_response(429, "Rate limit exceeded", "RATE_LIMIT_EXCEEDED"),
    )
