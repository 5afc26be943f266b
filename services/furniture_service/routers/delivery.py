"""Delivery router: courier lookup and doorstep OTP confirmation."""

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from libs.auth.dependencies import require_courier
from libs.auth.models import AuthUser, Role
from libs.common.emails.dispatch import dispatch_email
from libs.common.emails.orders import send_delivery_otp_email
from libs.common.responses import APIResponse, ok
from libs.db.session import get_async_db
from services.furniture_service.routers._helpers import parse_uuid
from services.furniture_service.routers.bookings import notify_status_change
from services.furniture_service.schemas import (
    DeliveryBookingResponse,
    DeliveryConfirmRequest,
)
from services.furniture_service.services.delivery_ops import (
    confirm_delivery,
    get_for_delivery,
    issue_delivery_otp,
    search_for_delivery,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/delivery", tags=["delivery"])


@router.get("/search", response_model=APIResponse[DeliveryBookingResponse])
async def search(
    booking_code: str = Query(..., min_length=1, max_length=12),
    _courier: AuthUser = Depends(require_courier),
    db: AsyncSession = Depends(get_async_db),
):
    booking = await search_for_delivery(db, booking_code)
    return ok(DeliveryBookingResponse.model_validate(booking))


@router.get("/{booking_id}", response_model=APIResponse[DeliveryBookingResponse])
async def get_delivery(
    booking_id: uuid.UUID,
    _courier: AuthUser = Depends(require_courier),
    db: AsyncSession = Depends(get_async_db),
):
    booking = await get_for_delivery(db, booking_id)
    return ok(DeliveryBookingResponse.model_validate(booking))


@router.post("/{booking_id}/generate-otp", response_model=APIResponse[None])
async def generate_otp(
    booking_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    _courier: AuthUser = Depends(require_courier),
    db: AsyncSession = Depends(get_async_db),
):
    """Email a fresh delivery code to the customer."""
    booking = await get_for_delivery(db, booking_id)
    if booking.customer is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Customer not found"
        )

    otp = await issue_delivery_otp(db, booking)
    dispatch_email(
        background_tasks,
        send_delivery_otp_email,
        booking.customer.email,
        booking.customer.name,
        otp,
    )
    return ok(message="OTP sent to customer's email")


@router.post(
    "/{booking_id}/confirm", response_model=APIResponse[DeliveryBookingResponse]
)
async def confirm(
    booking_id: uuid.UUID,
    payload: DeliveryConfirmRequest,
    background_tasks: BackgroundTasks,
    courier: AuthUser = Depends(require_courier),
    db: AsyncSession = Depends(get_async_db),
):
    courier_id = parse_uuid(courier.user_id) if courier.role == Role.COURIER else None
    booking = await confirm_delivery(db, booking_id, payload, courier_id=courier_id)
    notify_status_change(background_tasks, booking)
    return ok(
        DeliveryBookingResponse.model_validate(booking),
        "Delivery confirmed successfully",
    )
