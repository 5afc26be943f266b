"""Catalog helpers: slugs, pricing, ratings and image handling."""

import re
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from libs.common.media_utils import MediaUploadError, upload_image, upload_images
from services.furniture_service.models import Product
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    slug = _NON_SLUG_CHARS.sub("-", name.lower()).strip("-")
    return slug or "product"


def contains_pattern(term: str) -> str:
    """Substring LIKE pattern with wildcards in ``term`` escaped by backslash."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def compute_final_price(price: float, discount_percentage: float) -> Decimal:
    """``price * (1 - discount/100)`` rounded to 2 places."""
    value = Decimal(str(price)) * (1 - Decimal(str(discount_percentage)) / 100)
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def average_rating(ratings: list[int]) -> float:
    if not ratings:
        return 0.0
    return round(sum(ratings) / len(ratings), 2)


async def get_product_or_404(db: AsyncSession, product_id: uuid.UUID) -> Product:
    product = await db.get(Product, product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return product


async def ensure_slug_available(
    db: AsyncSession, slug: str, exclude_id: Optional[uuid.UUID] = None
) -> None:
    query = select(Product.id).where(Product.slug == slug)
    if exclude_id is not None:
        query = query.where(Product.id != exclude_id)
    if await db.scalar(query) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"A product with slug '{slug}' already exists",
        )


async def store_images(
    image: Optional[str], images: Optional[list[str]]
) -> tuple[Optional[str], Optional[list[str]]]:
    """Upload inline images to the CDN. Hosted URLs pass through."""
    try:
        stored_image = await upload_image(image) if image else image
        stored_images = await upload_images(images) if images else images
    except MediaUploadError as e:
        logger.warning(f"Product image upload failed: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return stored_image, stored_images
