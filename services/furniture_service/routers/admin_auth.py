"""Admin sign-in with an emailed one-time code. There are no admin passwords."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status
from libs.common.config import get_settings
from libs.common.emails.accounts import send_admin_login_otp_email
from libs.common.emails.dispatch import dispatch_email
from libs.common.logging import get_logger
from libs.common.responses import APIResponse, ok
from libs.db.session import get_async_db
from services.furniture_service.models import Admin, AdminRole
from services.furniture_service.routers._helpers import start_session
from services.furniture_service.schemas import (
    AdminResponse,
    OTPRequest,
    OTPVerifyRequest,
    SessionResponse,
)
from services.furniture_service.services.login_otp import (
    OTPCheck,
    check_login_otp,
    clear_login_otp,
    issue_login_otp,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin/auth", tags=["admin-auth"])
logger = get_logger(__name__)


def _require_admin_email(email: str) -> str:
    email = email.lower()
    if email != get_settings().ADMIN_EMAIL.lower():
        logger.warning(f"Admin OTP requested for unauthorized email {email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized. Only the admin email can sign in here.",
        )
    return email


@router.post("/request-otp", response_model=APIResponse[None])
async def request_otp(
    payload: OTPRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_async_db),
):
    """Email a login code to the configured admin address."""
    email = _require_admin_email(payload.email)

    result = await db.execute(select(Admin).where(Admin.email == email))
    admin = result.scalar_one_or_none()
    if admin is None:
        admin = Admin(name="Admin", email=email, role=AdminRole.ADMIN)
        db.add(admin)
        logger.info(f"Created admin record for {email}")

    otp = issue_login_otp(admin)
    await db.commit()

    dispatch_email(background_tasks, send_admin_login_otp_email, email, otp)
    return ok(message="OTP sent to admin email")


@router.post("/verify-otp", response_model=APIResponse[SessionResponse])
async def verify_otp(
    payload: OTPVerifyRequest,
    response: Response,
    db: AsyncSession = Depends(get_async_db),
):
    email = _require_admin_email(payload.email)

    result = await db.execute(select(Admin).where(Admin.email == email))
    admin = result.scalar_one_or_none()
    if admin is None or check_login_otp(admin, payload.otp) != OTPCheck.VALID:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired OTP"
        )

    clear_login_otp(admin)
    await db.commit()

    token = start_session(response, admin.id, admin.role.value, admin.email)
    session = SessionResponse(
        token=token,
        role=admin.role.value,
        user=AdminResponse.model_validate(admin).model_dump(mode="json"),
    )
    return ok(session, "Login successful")
