"""
Account emails: verification links and login one-time codes.
"""

from libs.common.config import get_settings
from libs.common.emails.core import render_layout, send_email


async def send_verification_email(to_email: str, token: str) -> bool:
    settings = get_settings()
    verification_url = f"{settings.FRONTEND_URL}/verify-email?token={token}"
    subject = f"Verify Your Email - {settings.DEFAULT_FROM_NAME}"

    body = f"""Hello,

Thank you for registering with {settings.DEFAULT_FROM_NAME}. Please verify your email to activate your account:

{verification_url}

This link expires in {settings.EMAIL_VERIFICATION_EXPIRE_HOURS} hours.
"""
    html_body = render_layout(
        f"Welcome to {settings.DEFAULT_FROM_NAME}",
        "Confirm your email address",
        f"""
            <p>Hello,</p>
            <p>Thank you for registering. Please verify your email to activate your account.</p>
            <p><a href="{verification_url}">Verify Email</a></p>
            <p>Or copy this link: {verification_url}</p>
            <p style="color: #666; font-size: 12px;">This link expires in {settings.EMAIL_VERIFICATION_EXPIRE_HOURS} hours.</p>
        """,
    )
    return await send_email(to_email, subject, body, html_body)


async def _send_login_code(to_email: str, otp: str, audience: str) -> bool:
    settings = get_settings()
    subject = f"{audience} Login OTP - {settings.DEFAULT_FROM_NAME}"
    ttl = settings.LOGIN_OTP_TTL_MINUTES

    body = f"""Your {audience.lower()} login code is: {otp}

It expires in {ttl} minutes. If you did not request it, ignore this email.
"""
    html_body = render_layout(
        f"{audience} Login",
        "One-time login code",
        f"""
            <p>Use this code to finish signing in:</p>
            <div class="box"><div class="code">{otp}</div></div>
            <p>It expires in {ttl} minutes. If you did not request it, ignore this email.</p>
        """,
    )
    return await send_email(to_email, subject, body, html_body)


async def send_admin_login_otp_email(to_email: str, otp: str) -> bool:
    return await _send_login_code(to_email, otp, "Admin")


async def send_courier_login_otp_email(to_email: str, otp: str) -> bool:
    return await _send_login_code(to_email, otp, "Courier")
