"""Enum definitions for furniture service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    READY_FOR_DELIVERY = "ready_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    COD = "cod"
    UPI = "upi"
    CARD = "card"
    NETBANKING = "netbanking"
    WALLET = "wallet"


class FurnitureCategory(str, enum.Enum):
    SOFAS = "Sofas & Couches"
    CHAIRS = "Chairs & Stools"
    BEDS = "Beds & Mattresses"
    DESKS = "Desks & Tables"
    STORAGE = "Storage & Cabinets"
    SHELVING = "Shelving & Units"
    OUTDOOR = "Outdoor Furniture"
    BEDROOM = "Bedroom Furniture"
    DINING = "Dining Furniture"
    OFFICE = "Office Furniture"


class AdminRole(str, enum.Enum):
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


# Statuses a courier may act on at the door
DELIVERABLE_STATUSES = frozenset(
    {
        BookingStatus.SHIPPED,
        BookingStatus.READY_FOR_DELIVERY,
        BookingStatus.PENDING,
    }
)

# Lookup by code additionally surfaces bookings still being prepared
SEARCHABLE_STATUSES = DELIVERABLE_STATUSES | {BookingStatus.PROCESSING}
