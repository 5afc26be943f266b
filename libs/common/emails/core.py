"""
Core email sending over SMTP.
"""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


def _build_message(
    to_email: str,
    subject: str,
    body: str,
    html_body: Optional[str],
    sender: str,
) -> MIMEText | MIMEMultipart:
    if html_body:
        msg: MIMEText | MIMEMultipart = MIMEMultipart("alternative")
        msg.attach(MIMEText(body, "plain"))
        msg.attach(MIMEText(html_body, "html"))
    else:
        msg = MIMEText(body, "plain")

    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to_email
    return msg


def _deliver(sender_email: str, to_email: str, message: str) -> None:
    settings = get_settings()
    if settings.SMTP_PORT == 465:
        with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.sendmail(sender_email, to_email, message)
    else:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
            server.starttls()
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.sendmail(sender_email, to_email, message)


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    html_body: Optional[str] = None,
    from_email: Optional[str] = None,
    from_name: Optional[str] = None,
) -> bool:
    """
    Send an email over SMTP.

    The blocking SMTP conversation runs in a worker thread.

    Returns:
        True if email was sent successfully, False otherwise
    """
    settings = get_settings()

    if not settings.SMTP_PASSWORD or not settings.SMTP_USERNAME:
        logger.warning("SMTP credentials not configured - email not sent")
        logger.info(f"Would have sent email to {to_email}: {subject}")
        logger.debug(f"Email body: {body[:200]}...")
        return False

    sender_email = from_email or settings.DEFAULT_FROM_EMAIL
    sender_name = from_name or settings.DEFAULT_FROM_NAME
    msg = _build_message(
        to_email, subject, body, html_body, f"{sender_name} <{sender_email}>"
    )

    try:
        logger.info(f"Sending email to {to_email}: {subject}")
        await asyncio.to_thread(_deliver, sender_email, to_email, msg.as_string())
        logger.info(f"Email sent successfully to {to_email}")
        return True

    except smtplib.SMTPAuthenticationError as e:
        logger.error(f"SMTP authentication failed: {e}")
        return False
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"SMTP error sending email: {type(e).__name__}: {e}")
        return False


def render_layout(title: str, subtitle: str, content_html: str) -> str:
    """Wrap template content in the shared branded layout."""
    settings = get_settings()
    return f"""
<!DOCTYPE html>
<html>
<head>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
        .header {{ background: linear-gradient(135deg, #fbbf24 0%, #8b5cf6 100%); color: white; padding: 30px; border-radius: 12px 12px 0 0; }}
        .content {{ background: #f9f9f9; padding: 30px; border-radius: 0 0 12px 12px; }}
        .box {{ background: white; padding: 20px; border-radius: 8px; margin: 20px 0; }}
        .code {{ font-size: 32px; font-weight: bold; letter-spacing: 8px; text-align: center; color: #8b5cf6; }}
        table {{ width: 100%; border-collapse: collapse; }}
        th, td {{ padding: 10px; text-align: left; border-bottom: 1px solid #e2e8f0; }}
        .footer {{ text-align: center; color: #64748b; font-size: 14px; margin-top: 20px; }}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1 style="margin: 0;">{title}</h1>
            <p style="margin: 10px 0 0 0; opacity: 0.9;">{subtitle}</p>
        </div>
        <div class="content">
            {content_html}
            <div class="footer">
                <p>The {settings.DEFAULT_FROM_NAME} Team</p>
            </div>
        </div>
    </div>
</body>
</html>
"""
