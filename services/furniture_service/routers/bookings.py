"""Bookings router: create, track, cancel and administer orders."""

import uuid
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from libs.auth.dependencies import get_current_user, require_admin, require_customer
from libs.auth.models import AuthUser
from libs.common.emails.dispatch import dispatch_email
from libs.common.emails.orders import (
    send_booking_confirmation_email,
    send_booking_status_email,
)
from libs.common.responses import APIResponse, PaginatedData, ok, paginate
from libs.db.session import get_async_db
from services.furniture_service.models import Booking, BookingStatus
from services.furniture_service.routers._helpers import ensure_can_view, load_customer
from services.furniture_service.schemas import (
    BookingCreate,
    BookingResponse,
    BookingStatusUpdate,
)
from services.furniture_service.services.booking_ops import (
    cancel_booking,
    create_booking,
    get_booking_by_code,
    get_booking_or_404,
    update_booking_status,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/bookings", tags=["bookings"])


def notify_status_change(background_tasks: BackgroundTasks, booking: Booking) -> None:
    if booking.customer is None:
        return
    dispatch_email(
        background_tasks,
        send_booking_status_email,
        booking.customer.email,
        booking.customer.name,
        booking.booking_code,
        booking.status.value,
    )


@router.post(
    "",
    response_model=APIResponse[BookingResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create(
    payload: BookingCreate,
    background_tasks: BackgroundTasks,
    current_user: AuthUser = Depends(require_customer),
    db: AsyncSession = Depends(get_async_db),
):
    customer = await load_customer(db, current_user)
    booking = await create_booking(db, customer=customer, data=payload)

    dispatch_email(
        background_tasks,
        send_booking_confirmation_email,
        customer.email,
        customer.name,
        booking.booking_code,
        booking.product.name,
        booking.quantity,
        float(booking.total_price),
        booking.status.value,
    )
    return ok(BookingResponse.model_validate(booking), "Booking created successfully")


@router.get("", response_model=APIResponse[list[BookingResponse]])
async def list_my_bookings(
    current_user: AuthUser = Depends(require_customer),
    db: AsyncSession = Depends(get_async_db),
):
    customer = await load_customer(db, current_user)
    result = await db.execute(
        select(Booking)
        .where(Booking.customer_id == customer.id)
        .order_by(Booking.created_at.desc())
    )
    return ok([BookingResponse.model_validate(b) for b in result.scalars().all()])


@router.get("/by-code", response_model=APIResponse[BookingResponse])
async def get_by_code(
    booking_code: str = Query(..., min_length=1, max_length=12),
    db: AsyncSession = Depends(get_async_db),
):
    """Public lookup for order confirmation pages."""
    booking = await get_booking_by_code(db, booking_code)
    return ok(BookingResponse.model_validate(booking))


@router.get(
    "/admin/all", response_model=APIResponse[PaginatedData[BookingResponse]]
)
async def list_all_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    filters = []
    if status_filter is not None:
        filters.append(Booking.status == status_filter)

    total = await db.scalar(select(func.count()).select_from(Booking).where(*filters))
    result = await db.execute(
        select(Booking)
        .where(*filters)
        .order_by(Booking.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    items = [BookingResponse.model_validate(b) for b in result.scalars().all()]
    return ok({"items": items, "pagination": paginate(total or 0, page, limit)})


@router.get("/{booking_id}", response_model=APIResponse[BookingResponse])
async def get_booking(
    booking_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    booking = await get_booking_or_404(db, booking_id)
    ensure_can_view(booking, current_user)
    return ok(BookingResponse.model_validate(booking))


@router.patch("/{booking_id}/status", response_model=APIResponse[BookingResponse])
async def update_status(
    booking_id: uuid.UUID,
    payload: BookingStatusUpdate,
    background_tasks: BackgroundTasks,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Operator override of status and payment status."""
    booking = await get_booking_or_404(db, booking_id)
    if await update_booking_status(db, booking, payload):
        notify_status_change(background_tasks, booking)
    return ok(BookingResponse.model_validate(booking), "Booking updated")


@router.patch("/{booking_id}/cancel", response_model=APIResponse[BookingResponse])
async def cancel(
    booking_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    booking = await get_booking_or_404(db, booking_id)
    ensure_can_view(booking, current_user)
    await cancel_booking(db, booking)
    notify_status_change(background_tasks, booking)
    return ok(BookingResponse.model_validate(booking), "Booking cancelled")
