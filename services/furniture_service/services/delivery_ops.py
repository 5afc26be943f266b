"""Doorstep delivery confirmation with a 4-digit one-time code."""

import hmac
import secrets
import uuid
from typing import Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.furniture_service.models import (
    DELIVERABLE_STATUSES,
    SEARCHABLE_STATUSES,
    Booking,
    BookingStatus,
    PaymentMethod,
    PaymentStatus,
)
from services.furniture_service.schemas import DeliveryConfirmRequest
from services.furniture_service.services.booking_ops import (
    get_booking_by_code,
    get_booking_or_404,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

logger = get_logger(__name__)


def generate_delivery_otp() -> str:
    """Four digits, 1000-9999."""
    return str(1000 + secrets.randbelow(9000))


def _require_status(booking: Booking, allowed: frozenset, message: str) -> None:
    if booking.status not in allowed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{message}: {booking.status.value}",
        )


async def search_for_delivery(db: AsyncSession, booking_code: str) -> Booking:
    booking = await get_booking_by_code(db, booking_code)
    _require_status(
        booking, SEARCHABLE_STATUSES, "Booking is not available for delivery. Status"
    )
    return booking


async def get_for_delivery(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    booking = await get_booking_or_404(db, booking_id)
    _require_status(
        booking, DELIVERABLE_STATUSES, "Booking is not ready for delivery. Status"
    )
    return booking


async def issue_delivery_otp(db: AsyncSession, booking: Booking) -> str:
    """Store a fresh code on the booking and return it for emailing.

    Codes do not expire; a new request replaces the old code.
    """
    _require_status(
        booking, DELIVERABLE_STATUSES, "Cannot generate OTP for booking with status"
    )
    otp = generate_delivery_otp()
    booking.delivery_otp = otp
    booking.otp_verified = False
    await db.commit()
    logger.info("Delivery OTP issued for booking %s", booking.booking_code)
    return otp


async def confirm_delivery(
    db: AsyncSession,
    booking_id: uuid.UUID,
    data: DeliveryConfirmRequest,
    courier_id: Optional[uuid.UUID] = None,
) -> Booking:
    """Mark the booking delivered if the code matches.

    A COD booking is marked paid in the same commit.
    """
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .options(undefer(Booking.delivery_otp))
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found"
        )

    _require_status(
        booking, DELIVERABLE_STATUSES, "Cannot confirm delivery for booking with status"
    )

    stored = booking.delivery_otp
    if not stored or not hmac.compare_digest(
        stored.encode(), data.otp.strip().encode()
    ):
        logger.info("Rejected delivery OTP for booking %s", booking.booking_code)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid OTP"
        )

    booking.status = BookingStatus.DELIVERED
    booking.otp_verified = True
    booking.delivered_at = utc_now()
    booking.delivery_otp = None
    booking.courier_name = data.courier_name
    booking.courier_phone = data.courier_phone
    booking.courier_id = courier_id
    if booking.payment_method == PaymentMethod.COD:
        booking.payment_status = PaymentStatus.COMPLETED

    await db.commit()
    logger.info(
        "Booking %s delivered by %s (payment %s)",
        booking.booking_code,
        data.courier_name,
        booking.payment_status.value,
    )
    return booking
