"""Furniture service models package."""

from services.furniture_service.models.catalog import Product, ProductReview
from services.furniture_service.models.commerce import Booking
from services.furniture_service.models.enums import (
    DELIVERABLE_STATUSES,
    SEARCHABLE_STATUSES,
    AdminRole,
    BookingStatus,
    FurnitureCategory,
    PaymentMethod,
    PaymentStatus,
)
from services.furniture_service.models.identity import (
    Admin,
    Courier,
    Customer,
    customer_favorites,
)

__all__ = [
    "Admin",
    "AdminRole",
    "Booking",
    "BookingStatus",
    "Courier",
    "Customer",
    "DELIVERABLE_STATUSES",
    "FurnitureCategory",
    "PaymentMethod",
    "PaymentStatus",
    "Product",
    "ProductReview",
    "SEARCHABLE_STATUSES",
    "customer_favorites",
]
