"""Response envelope and exception handlers shared by every router.

All endpoints answer with ``{"success": bool, "message": str, "data": ...}``.
Errors use the same shape, with ``error`` carrying exception detail outside
production.
"""

from typing import Any, Generic, Optional, TypeVar

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class PaginatedData(BaseModel, Generic[T]):
    items: list[T]
    pagination: Pagination


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    """Build a success envelope."""
    return {"success": True, "message": message, "data": data}


def paginate(total: int, page: int, limit: int) -> Pagination:
    pages = (total + limit - 1) // limit if limit else 0
    return Pagination(total=total, page=page, limit=limit, pages=pages)


def _error_body(message: str, error: Optional[str] = None) -> dict:
    body: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    fields = [
        ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        for err in errors
    ]
    message = "Invalid or missing fields: " + ", ".join(f for f in fields if f)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(message.rstrip(": ")),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    settings = get_settings()
    error = None if settings.is_production else f"{type(exc).__name__}: {exc}"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", error),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error through the envelope."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
