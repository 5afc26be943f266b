"""Unit tests for Cloudinary image uploads."""

import hashlib
from urllib.parse import parse_qs

import httpx
import pytest
from libs.common.config import get_settings
from libs.common.media_utils import (
    MediaUploadError,
    is_data_url,
    sign_params,
    upload_image,
    upload_images,
)

DATA_URL = "data:image/png;base64,iVBORw0KGgo="


@pytest.fixture
def cloudinary_settings(monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setattr(settings, "CLOUDINARY_API_KEY", "key123")
    monkeypatch.setattr(settings, "CLOUDINARY_API_SECRET", "shh")
    return settings


@pytest.mark.unit
def test_is_data_url():
    assert is_data_url(DATA_URL)
    assert not is_data_url("https://cdn.test/a.jpg")
    assert not is_data_url(None)


@pytest.mark.unit
def test_sign_params_sorts_keys():
    expected = hashlib.sha1(b"folder=f&timestamp=10shh").hexdigest()
    assert sign_params({"timestamp": "10", "folder": "f"}, "shh") == expected


@pytest.mark.asyncio
@pytest.mark.unit
async def test_hosted_url_is_not_uploaded():
    assert await upload_image("https://cdn.test/a.jpg") == "https://cdn.test/a.jpg"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_upload_without_credentials_fails():
    with pytest.raises(MediaUploadError):
        await upload_image(DATA_URL)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_upload_returns_secure_url(cloudinary_settings):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"secure_url": "https://res.test/x.png"})

    url = await upload_image(DATA_URL, transport=httpx.MockTransport(handler))

    assert url == "https://res.test/x.png"
    assert seen["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
    assert seen["form"]["api_key"] == ["key123"]
    assert seen["form"]["folder"] == ["furniture-products"]
    assert len(seen["form"]["signature"][0]) == 40


@pytest.mark.asyncio
@pytest.mark.unit
async def test_upload_http_error(cloudinary_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": {"message": "boom"}})

    with pytest.raises(MediaUploadError):
        await upload_image(DATA_URL, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
@pytest.mark.unit
async def test_upload_images_keeps_order(cloudinary_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"secure_url": "https://res.test/new.png"})

    images = await upload_images(
        ["https://cdn.test/old.jpg", DATA_URL],
        transport=httpx.MockTransport(handler),
    )
    assert images == ["https://cdn.test/old.jpg", "https://res.test/new.png"]
