from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError

from libs.auth.models import ADMIN_ROLES, DELIVERY_ROLES, AuthUser, Role
from libs.auth.tokens import decode_token
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Resolve the session token and return the authenticated principal.

    The http-only cookie takes priority; the bearer header is a fallback for
    API clients.
    """
    settings = get_settings()
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_token(token)
        return AuthUser(**payload)
    except (JWTError, ValidationError) as e:
        logger.info("Rejected session token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> AuthUser:
    if current_user.role not in ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


async def require_courier(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> AuthUser:
    """Couriers, and admins acting on their behalf."""
    if current_user.role not in DELIVERY_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Delivery courier access required",
        )
    return current_user


async def require_customer(
    current_user: Annotated[AuthUser, Depends(get_current_user)]
) -> AuthUser:
    if current_user.role != Role.CUSTOMER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Customer account required",
        )
    return current_user
