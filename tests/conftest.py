import os
from contextlib import contextmanager
from typing import AsyncGenerator, Optional

# Settings are read at import time by libs.db.config; point them at SQLite first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.auth.dependencies import get_current_user, get_optional_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.emails.client import get_email_client
from libs.db.base import Base
from libs.db.session import get_async_db

# Import all models so metadata includes every table
from services.coupon_service import models as _coupon_models  # noqa: F401
from services.loyalty_service import models as _loyalty_models  # noqa: F401
from services.store_service import models as _store_models  # noqa: F401

get_settings.cache_clear()
settings = get_settings()


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------


def make_member_user(user_id: str = "member-1", **overrides) -> AuthUser:
    defaults = {
        "user_id": user_id,
        "email": f"{user_id}@example.com",
        "name": "Test Shopper",
        "phone": "+919800000000",
        "role": "authenticated",
    }
    defaults.update(overrides)
    return AuthUser(**defaults)


def make_admin_user(user_id: str = "admin-1") -> AuthUser:
    return AuthUser(user_id=user_id, email="admin@example.com", role="service_role")


def _set_user(app, user: Optional[AuthUser]) -> None:
    if user is None:
        app.dependency_overrides.pop(get_current_user, None)
        app.dependency_overrides[get_optional_user] = lambda: None
        return
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_optional_user] = lambda: user


@contextmanager
def override_auth(app, user: Optional[AuthUser]):
    """Temporarily act as ``user`` (or as a guest when ``user`` is None)."""
    previous = {
        dep: app.dependency_overrides.get(dep)
        for dep in (get_current_user, get_optional_user)
    }
    _set_user(app, user)
    try:
        yield user
    finally:
        for dep, override in previous.items():
            if override is None:
                app.dependency_overrides.pop(dep, None)
            else:
                app.dependency_overrides[dep] = override


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeEmailClient:
    """Stands in for the Communications Service client and records calls."""

    def __init__(self, accept: bool = True, error: Optional[Exception] = None):
        self.accept = accept
        self.error = error
        self.sent: list[dict] = []

    async def send_template(
        self, template_type, to_email, template_data, subject=None, metadata=None
    ) -> bool:
        self.sent.append(
            {
                "template_type": template_type,
                "to_email": to_email,
                "template_data": template_data,
                "subject": subject,
                "metadata": metadata,
            }
        )
        if self.error:
            raise self.error
        return self.accept


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh in-memory SQLite database per test.
    StaticPool keeps one connection so every session sees the same tables.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def fake_email_client() -> FakeEmailClient:
    return FakeEmailClient()


# ---------------------------------------------------------------------------
# Service clients
# ---------------------------------------------------------------------------


@contextmanager
def _app_overrides(app, db_session, user, email_client=None):
    app.dependency_overrides[get_async_db] = lambda: db_session
    if email_client is not None:
        app.dependency_overrides[get_email_client] = lambda: email_client
    _set_user(app, user)
    try:
        yield
    finally:
        app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def loyalty_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.loyalty_service.app.main import app

    with _app_overrides(app, db_session, make_member_user()):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac


@pytest_asyncio.fixture
async def coupon_client(db_session) -> AsyncGenerator[AsyncClient, None]:
    from services.coupon_service.app.main import app

    with _app_overrides(app, db_session, make_member_user()):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac


@pytest_asyncio.fixture
async def store_client(
    db_session, fake_email_client
) -> AsyncGenerator[AsyncClient, None]:
    from services.store_service.app.main import app

    with _app_overrides(app, db_session, make_member_user(), fake_email_client):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
