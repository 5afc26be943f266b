"""Favorites router: a customer's saved products."""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_customer
from libs.auth.models import AuthUser
from libs.common.responses import APIResponse, ok
from libs.db.session import get_async_db
from services.furniture_service.routers._helpers import load_customer
from services.furniture_service.schemas import ProductResponse
from services.furniture_service.services.catalog_ops import get_product_or_404
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=APIResponse[list[ProductResponse]])
async def list_favorites(
    current_user: AuthUser = Depends(require_customer),
    db: AsyncSession = Depends(get_async_db),
):
    customer = await load_customer(db, current_user)
    return ok([ProductResponse.model_validate(p) for p in customer.favorites])


@router.post("/add/{product_id}", response_model=APIResponse[dict])
async def add_favorite(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_customer),
    db: AsyncSession = Depends(get_async_db),
):
    customer = await load_customer(db, current_user)
    product = await get_product_or_404(db, product_id)

    if any(p.id == product.id for p in customer.favorites):
        return ok({"is_favorite": True}, "Already in favorites")

    customer.favorites.append(product)
    await db.commit()
    return ok({"is_favorite": True}, "Added to favorites")


@router.post("/remove/{product_id}", response_model=APIResponse[dict])
async def remove_favorite(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_customer),
    db: AsyncSession = Depends(get_async_db),
):
    customer = await load_customer(db, current_user)
    remaining = [p for p in customer.favorites if p.id != product_id]
    if len(remaining) != len(customer.favorites):
        customer.favorites = remaining
        await db.commit()
    return ok({"is_favorite": False}, "Removed from favorites")


@router.get("/check/{product_id}", response_model=APIResponse[dict])
async def check_favorite(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(require_customer),
    db: AsyncSession = Depends(get_async_db),
):
    customer = await load_customer(db, current_user)
    return ok({"is_favorite": any(p.id == product_id for p in customer.favorites)})
