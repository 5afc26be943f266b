"""Product catalog router: public browsing, admin management and reviews."""

import uuid
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.auth.dependencies import require_admin, require_customer
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.common.responses import APIResponse, PaginatedData, ok, paginate
from libs.db.session import get_async_db
from services.furniture_service.models import FurnitureCategory, Product, ProductReview
from services.furniture_service.routers._helpers import load_customer
from services.furniture_service.schemas import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    ReviewCreate,
    VisibilityUpdate,
)
from services.furniture_service.services.catalog_ops import (
    average_rating,
    compute_final_price,
    contains_pattern,
    ensure_slug_available,
    get_product_or_404,
    slugify,
    store_images,
)
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/products", tags=["products"])
logger = get_logger(__name__)


# ============================================================================
# PUBLIC CATALOG
# ============================================================================


@router.get("", response_model=APIResponse[PaginatedData[ProductResponse]])
async def list_products(
    category: Optional[FurnitureCategory] = None,
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    """List visible products, newest first."""
    filters = [Product.is_visible.is_(True)]
    if category is not None:
        filters.append(Product.category == category)
    if search:
        pattern = contains_pattern(search.strip())
        filters.append(
            or_(
                Product.name.ilike(pattern, escape="\\"),
                Product.description.ilike(pattern, escape="\\"),
                Product.brand.ilike(pattern, escape="\\"),
            )
        )

    total = await db.scalar(select(func.count()).select_from(Product).where(*filters))
    result = await db.execute(
        select(Product)
        .where(*filters)
        .order_by(Product.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    items = [ProductResponse.model_validate(p) for p in result.scalars().all()]
    return ok({"items": items, "pagination": paginate(total or 0, page, limit)})


@router.get("/admin/all", response_model=APIResponse[list[ProductResponse]])
async def list_all_products(
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Every product, hidden ones included."""
    result = await db.execute(select(Product).order_by(Product.created_at.desc()))
    return ok([ProductResponse.model_validate(p) for p in result.scalars().all()])


@router.get("/slug/{slug}", response_model=APIResponse[ProductResponse])
async def get_product_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(Product).where(Product.slug == slug, Product.is_visible.is_(True))
    )
    product = result.scalar_one_or_none()
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return ok(ProductResponse.model_validate(product))


@router.get("/{product_id}", response_model=APIResponse[ProductResponse])
async def get_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    product = await get_product_or_404(db, product_id)
    if not product.is_visible:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return ok(ProductResponse.model_validate(product))


# ============================================================================
# ADMIN MANAGEMENT
# ============================================================================


@router.post(
    "",
    response_model=APIResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    payload: ProductCreate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    slug = slugify(payload.slug or payload.name)
    await ensure_slug_available(db, slug)

    image, images = await store_images(payload.image, payload.images)
    final_price = (
        Decimal(str(payload.final_price))
        if payload.final_price is not None
        else compute_final_price(payload.price, payload.discount_percentage)
    )

    data = payload.model_dump(
        exclude={"slug", "image", "images", "final_price", "price"}
    )
    product = Product(
        **data,
        slug=slug,
        price=Decimal(str(payload.price)),
        final_price=final_price,
        images=images or [],
        image=image or (images[0] if images else ""),
        created_by=admin.user_id,
    )
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info(f"Product {product.slug} created by {admin.user_id}")
    return ok(ProductResponse.model_validate(product), "Product created successfully")


@router.put("/{product_id}", response_model=APIResponse[ProductResponse])
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    product = await get_product_or_404(db, product_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    # A rename re-derives the slug unless one is given explicitly
    if "slug" in changes or "name" in changes:
        source = changes.pop("slug", None) or changes.get("name") or product.name
        slug = slugify(source)
        await ensure_slug_available(db, slug, exclude_id=product.id)
        product.slug = slug

    if "image" in changes or "images" in changes:
        image, images = await store_images(
            changes.pop("image", None), changes.pop("images", None)
        )
        if image is not None:
            product.image = image
        if images is not None:
            product.images = images
            if not product.image and images:
                product.image = images[0]

    explicit_final = changes.pop("final_price", None)
    if "price" in changes:
        changes["price"] = Decimal(str(changes["price"]))
    for field, value in changes.items():
        setattr(product, field, value)

    if explicit_final is not None:
        product.final_price = Decimal(str(explicit_final))
    elif "price" in changes or "discount_percentage" in changes:
        product.final_price = compute_final_price(
            float(product.price), product.discount_percentage
        )

    await db.commit()
    return ok(ProductResponse.model_validate(product), "Product updated successfully")


@router.delete("/{product_id}", response_model=APIResponse[None])
async def delete_product(
    product_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    product = await get_product_or_404(db, product_id)
    await db.delete(product)
    await db.commit()
    logger.info(f"Product {product.slug} deleted by {admin.user_id}")
    return ok(message="Product deleted successfully")


@router.patch("/{product_id}/visibility", response_model=APIResponse[ProductResponse])
async def set_visibility(
    product_id: uuid.UUID,
    payload: VisibilityUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    product = await get_product_or_404(db, product_id)
    product.is_visible = payload.is_visible
    await db.commit()
    state = "visible" if product.is_visible else "hidden"
    return ok(ProductResponse.model_validate(product), f"Product is now {state}")


# ============================================================================
# REVIEWS
# ============================================================================


@router.post(
    "/{product_id}/reviews",
    response_model=APIResponse[ProductResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_review(
    product_id: uuid.UUID,
    payload: ReviewCreate,
    current_user: AuthUser = Depends(require_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Add a review and recompute the product's average rating."""
    product = await get_product_or_404(db, product_id)
    customer = await load_customer(db, current_user)

    product.reviews.append(
        ProductReview(
            user_id=str(customer.id),
            user_name=customer.name,
            rating=payload.rating,
            comment=payload.comment,
        )
    )
    product.rating = average_rating([r.rating for r in product.reviews])
    await db.commit()
    return ok(ProductResponse.model_validate(product), "Review added")
