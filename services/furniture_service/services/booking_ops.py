"""Booking lifecycle operations: create, cancel, status changes and COD checkout.

Each operation is a read-then-write inside the caller's session followed by a
single commit. Emails are left to the router, which schedules them after the
response.
"""

import secrets
import string
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.furniture_service.models import (
    Booking,
    BookingStatus,
    Customer,
    PaymentMethod,
    PaymentStatus,
    Product,
)
from services.furniture_service.schemas import (
    BookingCreate,
    BookingStatusUpdate,
    CodOrderRequest,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

CODE_PREFIX = "BK-"
CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6


# ---------------------------------------------------------------------------
# Booking codes
# ---------------------------------------------------------------------------


def _random_code() -> str:
    return CODE_PREFIX + "".join(
        secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH)
    )


async def generate_booking_code(
    db: AsyncSession, reserved: Optional[set[str]] = None
) -> str:
    """Sample codes until one is free.

    ``reserved`` holds codes already handed out in the current unit of work
    that are not flushed yet.
    """
    reserved = reserved or set()
    while True:
        code = _random_code()
        if code in reserved:
            continue
        existing = await db.scalar(
            select(Booking.id).where(Booking.booking_code == code)
        )
        if existing is None:
            return code
        logger.debug("Booking code %s already taken, resampling", code)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def get_booking_or_404(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )
    return booking


async def get_booking_by_code(db: AsyncSession, booking_code: str) -> Booking:
    result = await db.execute(
        select(Booking).where(Booking.booking_code == booking_code.strip().upper())
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )
    return booking


def unit_price(product: Product) -> Decimal:
    """The price a customer pays per item: the discounted final price."""
    if product.final_price is None:
        return Decimal(product.price)
    return Decimal(product.final_price)


# ---------------------------------------------------------------------------
# Create / cancel / status
# ---------------------------------------------------------------------------


async def create_booking(
    db: AsyncSession, *, customer: Customer, data: BookingCreate
) -> Booking:
    product = await db.get(Product, data.product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    if product.stock < data.quantity:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Insufficient stock"
        )

    total = unit_price(product) * data.quantity
    product.stock -= data.quantity

    booking = Booking(
        booking_code=await generate_booking_code(db),
        customer=customer,
        product=product,
        quantity=data.quantity,
        total_price=total,
        status=BookingStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
        payment_method=data.payment_method,
        shipping_address=data.shipping_address.model_dump(),
        delivery_date=data.delivery_date,
        notes=data.notes,
    )
    db.add(booking)
    await db.commit()

    logger.info(
        "Created booking %s: %d x %s (stock now %d)",
        booking.booking_code,
        booking.quantity,
        product.slug,
        product.stock,
    )
    return booking


async def cancel_booking(db: AsyncSession, booking: Booking) -> Booking:
    """Cancel and put the quantity back on the shelf."""
    if booking.status == BookingStatus.DELIVERED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot cancel a delivered booking",
        )
    if booking.status == BookingStatus.CANCELLED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Booking is already cancelled",
        )

    booking.status = BookingStatus.CANCELLED
    booking.cancelled_at = utc_now()
    if booking.product is not None:
        booking.product.stock += booking.quantity

    await db.commit()
    logger.info("Cancelled booking %s", booking.booking_code)
    return booking


async def update_booking_status(
    db: AsyncSession, booking: Booking, data: BookingStatusUpdate
) -> bool:
    """Overwrite status and/or payment status.

    Returns True when the lifecycle status changed.
    """
    previous = booking.status
    if data.status is not None:
        booking.status = data.status
        if data.status == BookingStatus.DELIVERED and booking.delivered_at is None:
            booking.delivered_at = utc_now()
        if data.status == BookingStatus.CANCELLED and booking.cancelled_at is None:
            booking.cancelled_at = utc_now()
    if data.payment_status is not None:
        booking.payment_status = data.payment_status

    await db.commit()
    logger.info(
        "Booking %s: status %s -> %s, payment %s",
        booking.booking_code,
        previous.value,
        booking.status.value,
        booking.payment_status.value,
    )
    return booking.status != previous


# ---------------------------------------------------------------------------
# Cash on delivery
# ---------------------------------------------------------------------------


@dataclass
class CodOrder:
    bookings: list[Booking]
    items: list[dict]  # [{"name", "quantity", "price"}] for emails
    total: Decimal

    @property
    def order_id(self) -> str:
        return self.bookings[0].booking_code


async def place_cod_order(
    db: AsyncSession, *, customer: Customer, data: CodOrderRequest
) -> CodOrder:
    """Create one ready-for-delivery booking per cart line.

    Every line is checked before anything is written, so a bad line leaves
    the catalog untouched. Prices come from the catalog, not the client.
    """
    lines: list[tuple[Product, int]] = []
    requested: dict[uuid.UUID, int] = {}
    for item in data.cart_items:
        product = await db.get(Product, item.product_id)
        if product is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Product not found: {item.product_id}",
            )
        requested[product.id] = requested.get(product.id, 0) + item.quantity
        if product.stock < requested[product.id]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Insufficient stock for {product.name}",
            )
        lines.append((product, item.quantity))

    # Checkout sends a single free-text line
    address = {"street": data.shipping_address}

    bookings: list[Booking] = []
    items: list[dict] = []
    reserved: set[str] = set()
    total = Decimal("0")
    for product, quantity in lines:
        price = unit_price(product)
        code = await generate_booking_code(db, reserved)
        reserved.add(code)

        product.stock -= quantity
        booking = Booking(
            booking_code=code,
            customer=customer,
            product=product,
            quantity=quantity,
            total_price=price * quantity,
            status=BookingStatus.READY_FOR_DELIVERY,
            payment_status=PaymentStatus.PENDING,
            payment_method=PaymentMethod.COD,
            shipping_address=address,
        )
        db.add(booking)
        bookings.append(booking)
        items.append(
            {"name": product.name, "quantity": quantity, "price": float(price)}
        )
        total += price * quantity

    await db.commit()
    logger.info(
        "COD order %s placed by %s: %d line(s), total %s",
        bookings[0].booking_code,
        customer.email,
        len(bookings),
        total,
    )
    return CodOrder(bookings=bookings, items=items, total=total)
