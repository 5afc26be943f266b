"""Product image uploads to Cloudinary.

Images arrive from the admin UI as base64 ``data:`` URLs. They are pushed to
Cloudinary's signed upload API and only the returned ``secure_url`` is kept.
Anything that is not a ``data:`` URL is already hosted and passes through.
"""

import asyncio
import hashlib
import time
from typing import Optional

import httpx
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


class MediaUploadError(Exception):
    """Cloudinary upload failed or is not configured."""


def is_data_url(value: Optional[str]) -> bool:
    return bool(value) and value.startswith("data:")


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """
    Cloudinary signature: sha1 of the sorted ``key=value`` pairs joined by
    ``&`` with the API secret appended.
    """
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


async def upload_image(
    data_url: str,
    folder: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> str:
    """
    Upload one image and return its secure URL.

    Non-``data:`` URLs are returned unchanged.
    """
    if not is_data_url(data_url):
        return data_url

    settings = get_settings()
    if not (
        settings.CLOUDINARY_CLOUD_NAME
        and settings.CLOUDINARY_API_KEY
        and settings.CLOUDINARY_API_SECRET
    ):
        raise MediaUploadError("Cloudinary credentials are not configured")

    params = {
        "folder": folder or settings.CLOUDINARY_FOLDER,
        "timestamp": str(int(time.time())),
    }
    form = {
        **params,
        "file": data_url,
        "api_key": settings.CLOUDINARY_API_KEY,
        "signature": sign_params(params, settings.CLOUDINARY_API_SECRET),
    }

    url = CLOUDINARY_UPLOAD_URL.format(cloud_name=settings.CLOUDINARY_CLOUD_NAME)
    try:
        async with httpx.AsyncClient(timeout=30.0, transport=transport) as client:
            response = await client.post(url, data=form)
            response.raise_for_status()
            secure_url = response.json().get("secure_url")
    except httpx.HTTPError as e:
        logger.error(f"Cloudinary upload failed: {type(e).__name__}: {e}")
        raise MediaUploadError("Image upload failed") from e

    if not secure_url:
        raise MediaUploadError("Image upload returned no URL")
    return secure_url


async def upload_images(
    images: list[str],
    folder: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[str]:
    """Upload every ``data:`` URL in ``images`` concurrently, keeping order."""
    if not any(is_data_url(image) for image in images):
        return list(images)
    return list(
        await asyncio.gather(
            *(upload_image(image, folder, transport) for image in images)
        )
    )
