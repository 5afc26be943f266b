import os
from typing import AsyncGenerator
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Load .env.test when present, then pin the settings tests rely on
from dotenv import load_dotenv

env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "local"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["ADMIN_EMAIL"] = "owner@furnitech.in"
os.environ["SMTP_USERNAME"] = ""
os.environ["SMTP_PASSWORD"] = ""
os.environ["RAZORPAY_KEY_ID"] = ""
os.environ["RAZORPAY_KEY_SECRET"] = ""
os.environ["CLOUDINARY_CLOUD_NAME"] = ""
os.environ["GOOGLE_CLIENT_ID"] = ""

from libs.auth.models import Role
from libs.auth.tokens import create_access_token
from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.session import get_async_db
from services.furniture_service.app.main import app

# Import all models so metadata includes every table
from services.furniture_service import models as _furniture_models  # noqa: F401

# Clear cached settings to reload with new env vars
get_settings.cache_clear()
settings = get_settings()


@pytest_asyncio.fixture
async def test_engine():
    """
    A private in-memory SQLite database per test.

    StaticPool keeps a single connection so every session sees the same data.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests to seed and inspect data."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the app.

    Each request gets its own session, as it would in production.
    """

    async def _override_get_async_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_async_db] = _override_get_async_db

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def mock_emails():
    """
    Replace every email sender used by the routers with an AsyncMock.

    Returns a dict keyed by sender name.
    """
    targets = {
        "send_verification_email": "services.furniture_service.routers.auth",
        "send_courier_login_otp_email": "services.furniture_service.routers.auth",
        "send_admin_login_otp_email": "services.furniture_service.routers.admin_auth",
        "send_booking_confirmation_email": "services.furniture_service.routers.bookings",
        "send_booking_status_email": "services.furniture_service.routers.bookings",
        "send_delivery_otp_email": "services.furniture_service.routers.delivery",
        "send_cod_order_confirmation_email": "services.furniture_service.routers.payments",
        "send_cod_order_admin_email": "services.furniture_service.routers.payments",
    }
    mocks = {name: AsyncMock(return_value=True) for name in targets}
    patchers = [
        patch(f"{module}.{name}", mocks[name]) for name, module in targets.items()
    ]
    for p in patchers:
        p.start()
    try:
        yield mocks
    finally:
        for p in patchers:
            p.stop()


# ---------------------------------------------------------------------------
# Auth headers
# ---------------------------------------------------------------------------


def bearer(subject, role: str, email: str = None) -> dict:
    token = create_access_token(str(subject), role, email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_headers():
    """Build bearer headers for an arbitrary principal."""
    return bearer


@pytest.fixture
def admin_headers() -> dict:
    return bearer("admin-test", Role.ADMIN, settings.ADMIN_EMAIL)


@pytest.fixture
def courier_headers() -> dict:
    return bearer("courier-test", Role.COURIER, "courier@furnitech.in")
