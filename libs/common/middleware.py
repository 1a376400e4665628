"""Request tracing middleware for the store API.

Every response carries an ``X-Request-ID`` (the caller's, or a fresh one) and
every non-probe request is logged once on completion with its status, timing
and, when authenticated, the acting user.
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.config import get_settings
from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = frozenset({"/health"})


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, slow_request_ms: int = 1000):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error",
                extra={"extra_fields": {"duration_ms": _elapsed_ms(started)}},
            )
            raise
        else:
            response.headers[REQUEST_ID_HEADER] = request_id
            if request.url.path not in QUIET_PATHS:
                self._log_completion(request, response, _elapsed_ms(started))
            return response
        finally:
            clear_request_context()

    def _log_completion(
        self, request: Request, response: Response, duration_ms: float
    ) -> None:
        fields = {"status_code": response.status_code, "duration_ms": duration_ms}
        user = getattr(request.state, "user", None)
        if user is not None:
            fields["user_id"] = user.user_id

        if response.status_code >= 500:
            logger.error("Request failed", extra={"extra_fields": fields})
        elif response.status_code >= 400:
            logger.warning("Request rejected", extra={"extra_fields": fields})
        elif duration_ms >= self.slow_request_ms:
            logger.warning("Slow request", extra={"extra_fields": fields})
        else:
            logger.info("Request completed", extra={"extra_fields": fields})


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install request tracing on ``app``."""
    configure_logging()
    app.add_middleware(
        RequestContextMiddleware,
        slow_request_ms=get_settings().SLOW_REQUEST_MS,
    )
    logger.info("Observability middleware initialized")
