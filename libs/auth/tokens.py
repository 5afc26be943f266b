"""Session and email-verification tokens (HS256 JWTs)."""

from datetime import timedelta
from typing import Any, Optional

from fastapi import Response
from jose import JWTError, jwt
from passlib.hash import bcrypt

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now

EMAIL_VERIFICATION_PURPOSE = "email_verification"


def hash_password(password: str) -> str:
    return bcrypt.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        return False


def _encode(claims: dict[str, Any], expires_in: timedelta) -> str:
    settings = get_settings()
    payload = dict(claims)
    payload["exp"] = utc_now() + expires_in
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and verify a token. Raises ``JWTError`` when invalid or expired."""
    settings = get_settings()
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def create_access_token(
    subject: str, role: str, email: Optional[str] = None
) -> str:
    settings = get_settings()
    claims: dict[str, Any] = {"sub": subject, "role": role}
    if email:
        claims["email"] = email
    return _encode(claims, timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))


def create_email_verification_token(subject: str) -> str:
    settings = get_settings()
    return _encode(
        {"sub": subject, "purpose": EMAIL_VERIFICATION_PURPOSE},
        timedelta(hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS),
    )


def read_email_verification_token(token: str) -> str:
    """Return the subject of a verification token, or raise ``JWTError``."""
    payload = decode_token(token)
    if payload.get("purpose") != EMAIL_VERIFICATION_PURPOSE or not payload.get("sub"):
        raise JWTError("Not an email verification token")
    return payload["sub"]


def set_auth_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
    )


def clear_auth_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
    )
