"""Shared helpers for furniture service routers."""

import uuid
from contextlib import contextmanager
from typing import Optional

from fastapi import HTTPException, Response, status
from libs.auth.models import AuthUser
from libs.auth.tokens import create_access_token, set_auth_cookie
from libs.common.logging import get_logger
from services.furniture_service.models import Booking, Customer
from services.furniture_service.razorpay_client import (
    PaymentConfigurationError,
    PaymentGatewayError,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


async def load_customer(db: AsyncSession, current_user: AuthUser) -> Customer:
    """Resolve the signed-in customer's record."""
    customer_id = parse_uuid(current_user.user_id)
    customer = await db.get(Customer, customer_id) if customer_id else None
    if customer is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="User not found"
        )
    return customer


async def commit_or_conflict(db: AsyncSession, detail: str) -> None:
    """Commit, turning a unique-constraint race into a 409."""
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


def ensure_can_view(booking: Booking, current_user: AuthUser) -> None:
    """Owners and operators only."""
    if current_user.is_admin:
        return
    if str(booking.customer_id) != current_user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized"
        )


def start_session(
    response: Response, subject: uuid.UUID, role: str, email: str
) -> str:
    """Sign a session token and set it as the auth cookie."""
    token = create_access_token(str(subject), role, email)
    set_auth_cookie(response, token)
    return token


@contextmanager
def gateway_errors():
    """Translate Razorpay client failures into HTTP errors."""
    try:
        yield
    except PaymentConfigurationError as e:
        logger.error(f"Payment gateway not configured: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Payment gateway is not configured",
        )
    except PaymentGatewayError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
