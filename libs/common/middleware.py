"""Request logging middleware for the store API.

Every request gets an X-Request-ID (propagated from the caller when present)
that is bound to the logging context for its lifetime. Query strings are
logged with secret values masked, since email verification links carry
their token in the URL.
"""
import time
from typing import Callable, Optional
from urllib.parse import parse_qsl, urlencode

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

QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})
REDACTED_PARAMS = frozenset({"token", "otp", "code", "credential"})


def redact_query(query: str) -> Optional[str]:
    """Mask values of secret-bearing query parameters."""
    if not query:
        return None
    pairs = [
        (key, "***" if key.lower() in REDACTED_PARAMS else value)
        for key, value in parse_qsl(query, keep_blank_values=True)
    ]
    return urlencode(pairs, safe="*")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds the request id and logs each request with its duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        quiet = request.url.path in QUIET_PATHS
        slow_ms = get_settings().SLOW_REQUEST_MS
        start_time = time.perf_counter()

        if not quiet:
            logger.info(
                "Request started",
                extra={"extra_fields": {"query": redact_query(request.url.query)}},
            )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled error",
                extra={"extra_fields": {
                    "error": type(e).__name__,
                    "duration_ms": _elapsed_ms(start_time),
                }},
            )
            raise
        else:
            duration_ms = _elapsed_ms(start_time)
            if not quiet:
                fields = {
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                    "query": redact_query(request.url.query),
                }
                if response.status_code >= 500:
                    logger.error("Request failed", extra={"extra_fields": fields})
                elif response.status_code >= 400 or duration_ms >= slow_ms:
                    logger.warning("Request completed", extra={"extra_fields": fields})
                else:
                    logger.info("Request completed", extra={"extra_fields": fields})

            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_request_context()


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install the request context middleware."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
