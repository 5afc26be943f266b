"""FastAPI application for the furniture store backend."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.middleware import add_observability_middleware
from libs.common.responses import register_exception_handlers
from services.furniture_service.routers import (
    admin_auth_router,
    admin_router,
    auth_router,
    bookings_router,
    catalog_router,
    delivery_router,
    favorites_router,
    payments_router,
)

API_PREFIX = "/api"


def create_app() -> FastAPI:
    """Create and configure the furniture store FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="D&L Furnitech API",
        version="0.1.0",
        description="Furniture shop backend - catalog, bookings, delivery and payments.",
    )

    add_observability_middleware(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "furniture"}

    # Admin auth is registered before the admin router so its paths win
    app.include_router(admin_auth_router, prefix=API_PREFIX)
    app.include_router(admin_router, prefix=API_PREFIX)
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(catalog_router, prefix=API_PREFIX)
    app.include_router(bookings_router, prefix=API_PREFIX)
    app.include_router(delivery_router, prefix=API_PREFIX)
    app.include_router(payments_router, prefix=API_PREFIX)
    app.include_router(favorites_router, prefix=API_PREFIX)

    return app


app = create_app()
