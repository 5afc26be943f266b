"""Admin router: customer directory and courier management."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.common.responses import APIResponse, PaginatedData, ok, paginate
from libs.db.session import get_async_db
from services.furniture_service.models import Courier, Customer
from services.furniture_service.schemas import CourierResponse, CustomerResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin", tags=["admin"])
logger = get_logger(__name__)


async def _get_courier_or_404(db: AsyncSession, courier_id: uuid.UUID) -> Courier:
    courier = await db.get(Courier, courier_id)
    if courier is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Courier not found"
        )
    return courier


@router.get("/customers", response_model=APIResponse[PaginatedData[CustomerResponse]])
async def list_customers(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    total = await db.scalar(select(func.count()).select_from(Customer))
    result = await db.execute(
        select(Customer)
        .order_by(Customer.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    items = [CustomerResponse.model_validate(c) for c in result.scalars().all()]
    return ok({"items": items, "pagination": paginate(total or 0, page, limit)})


@router.get("/couriers", response_model=APIResponse[list[CourierResponse]])
async def list_couriers(
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(Courier).order_by(Courier.created_at.desc()))
    return ok([CourierResponse.model_validate(c) for c in result.scalars().all()])


@router.get("/couriers/{courier_id}", response_model=APIResponse[CourierResponse])
async def get_courier(
    courier_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    courier = await _get_courier_or_404(db, courier_id)
    return ok(CourierResponse.model_validate(courier))


@router.delete("/couriers/{courier_id}", response_model=APIResponse[None])
async def delete_courier(
    courier_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    courier = await _get_courier_or_404(db, courier_id)
    await db.delete(courier)
    await db.commit()
    logger.info(f"Courier {courier.email} deleted by {admin.user_id}")
    return ok(message="Courier deleted")


async def _set_courier_active(
    db: AsyncSession, courier_id: uuid.UUID, active: bool
) -> Courier:
    courier = await _get_courier_or_404(db, courier_id)
    courier.is_active = active
    if not active:
        courier.login_otp = None
        courier.login_otp_expires_at = None
    await db.commit()
    return courier


@router.patch(
    "/couriers/{courier_id}/activate", response_model=APIResponse[CourierResponse]
)
async def activate_courier(
    courier_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    courier = await _set_courier_active(db, courier_id, True)
    return ok(CourierResponse.model_validate(courier), "Courier activated")


@router.patch(
    "/couriers/{courier_id}/deactivate", response_model=APIResponse[CourierResponse]
)
async def deactivate_courier(
    courier_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    courier = await _set_courier_active(db, courier_id, False)
    return ok(CourierResponse.model_validate(courier), "Courier deactivated")
