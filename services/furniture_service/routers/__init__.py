"""Furniture service routers package."""

from services.furniture_service.routers.admin import router as admin_router
from services.furniture_service.routers.admin_auth import router as admin_auth_router
from services.furniture_service.routers.auth import router as auth_router
from services.furniture_service.routers.bookings import router as bookings_router
from services.furniture_service.routers.catalog import router as catalog_router
from services.furniture_service.routers.delivery import router as delivery_router
from services.furniture_service.routers.favorites import router as favorites_router
from services.furniture_service.routers.payments import router as payments_router

__all__ = [
    "admin_auth_router",
    "admin_router",
    "auth_router",
    "bookings_router",
    "catalog_router",
    "delivery_router",
    "favorites_router",
    "payments_router",
]
