"""Emailed 6-digit login codes for admins and couriers."""

import enum
import hmac
import secrets
from datetime import timedelta
from typing import Union

from libs.common.config import get_settings
from libs.common.datetime_utils import ensure_utc, utc_now
from services.furniture_service.models import Admin, Courier

Principal = Union[Admin, Courier]


class OTPCheck(str, enum.Enum):
    VALID = "valid"
    MISSING = "missing"
    EXPIRED = "expired"
    INVALID = "invalid"


def generate_login_otp() -> str:
    return f"{100000 + secrets.randbelow(900000)}"


def issue_login_otp(principal: Principal) -> str:
    """Attach a fresh code to the principal. The caller commits."""
    settings = get_settings()
    otp = generate_login_otp()
    principal.login_otp = otp
    principal.login_otp_expires_at = utc_now() + timedelta(
        minutes=settings.LOGIN_OTP_TTL_MINUTES
    )
    return otp


def check_login_otp(principal: Principal, otp: str) -> OTPCheck:
    if not principal.login_otp or principal.login_otp_expires_at is None:
        return OTPCheck.MISSING
    if ensure_utc(principal.login_otp_expires_at) < utc_now():
        return OTPCheck.EXPIRED
    if not hmac.compare_digest(principal.login_otp.encode(), otp.strip().encode()):
        return OTPCheck.INVALID
    return OTPCheck.VALID


def clear_login_otp(principal: Principal) -> None:
    principal.login_otp = None
    principal.login_otp_expires_at = None
