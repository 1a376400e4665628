"""Rate limiting for the store API.

Built on slowapi. Limits are keyed by the authenticated user when the request
carries one and by client IP otherwise. Storage defaults to in-process memory;
point ``RATE_LIMIT_STORAGE_URI`` at Redis when running several instances.
"""

from functools import lru_cache
from typing import Callable

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


def rate_limit_key(request: Request) -> str:
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"user:{user.user_id}"

    # First hop of X-Forwarded-For is the original client behind the proxy
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    return f"ip:{get_remote_address(request)}"


@lru_cache
def get_limiter() -> Limiter:
    settings = get_settings()
    return Limiter(
        key_func=rate_limit_key,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Answer 429 with the limit that was hit."""
    limit = str(exc.limit.limit) if getattr(exc, "limit", None) else "desconhecido"
    logger.warning(
        "Rate limit exceeded",
        extra={"extra_fields": {"key": rate_limit_key(request), "limit": limit}},
    )
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Muitas requisições. Aguarde um momento e tente novamente.",
            "code": "RATE_LIMIT_EXCEEDED",
        },
        headers={"Retry-After": "60", "X-RateLimit-Limit": limit},
    )


def checkout_limit(func: Callable) -> Callable:
    """Limit order creation per buyer (``CHECKOUT_RATE_LIMIT``)."""
    return limiter.limit(lambda: get_settings().CHECKOUT_RATE_LIMIT)(func)
