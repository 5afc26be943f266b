"""Google Sign-In: ID token verification against Google's tokeninfo endpoint."""

from dataclasses import dataclass
from typing import Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"


@dataclass
class GoogleIdentity:
    sub: str
    email: str
    name: str
    picture: Optional[str] = None


class GoogleAuthError(Exception):
    """The ID token was rejected or was issued for another client."""


async def verify_google_id_token(
    id_token: str, transport: Optional[httpx.AsyncBaseTransport] = None
) -> GoogleIdentity:
    settings = get_settings()
    if not settings.GOOGLE_CLIENT_ID:
        raise GoogleAuthError("Google sign-in is not configured")

    try:
        async with httpx.AsyncClient(timeout=30.0, transport=transport) as client:
            response = await client.get(
                GOOGLE_TOKENINFO_URL, params={"id_token": id_token}
            )
    except httpx.HTTPError as e:
        logger.error(f"Google tokeninfo request failed: {type(e).__name__}: {e}")
        raise GoogleAuthError("Could not verify Google token") from e

    if not response.is_success:
        raise GoogleAuthError("Invalid Google token")

    claims = response.json()
    if claims.get("aud") != settings.GOOGLE_CLIENT_ID:
        logger.warning("Google token issued for a different client")
        raise GoogleAuthError("Invalid Google token")
    if not claims.get("email") or str(claims.get("email_verified")).lower() != "true":
        raise GoogleAuthError("Google account email is not verified")

    email = claims["email"].lower()
    return GoogleIdentity(
        sub=claims["sub"],
        email=email,
        name=claims.get("name") or email.split("@")[0],
        picture=claims.get("picture"),
    )
