"""
Storefront Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test gets its own app built by create_app() around a fresh
       SQLite file (aiosqlite) and a temporary uploads directory. Tables come
       from Base.metadata.create_all, not from Alembic.

Fixture Hierarchy (all function-scoped):
    settings ─→ app ─→ context ─→ db_session
                    ├─→ client          (anonymous)
                    ├─→ admin_client    (session cookie of an ADMIN)
                    └─→ customer_client (session cookie of a CUSTOMER)
    mock_email:  both order emails replaced by AsyncMocks
    png_bytes:   a real 2000×1000 PNG for upload tests

Sessions are sent as an explicit Cookie header rather than through httpx's
cookie jar, which does not reliably store cookies for the "test" host.
"""

import io
import os
import re
import tempfile
from decimal import Decimal
from typing import AsyncGenerator, List, Optional
from unittest.mock import AsyncMock

# Settings read the environment at import time (storefront.main builds a
# module-level app), so these must be set before any storefront import.
_TEST_ROOT = tempfile.mkdtemp(prefix="storefront_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/import.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["JWT_SECRET"] = "test-secret-key-not-for-production"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SMTP_HOST"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

from storefront.config import Settings
from storefront.context import AppContext
from storefront.database import Base
from storefront.main import create_app
from storefront.models import Category, Product, ProductStatus, ProductVariant, Review, User, UserRole
from storefront.services.auth_service import AuthService, identity_for

ADMIN_EMAIL = "admin@example.com"
CUSTOMER_EMAIL = "customer@example.com"
PASSWORD = "secret123"

_COOKIE_PATTERN = re.compile(r"auth_token=([^;]*)")


def session_token(response) -> Optional[str]:
    """The auth_token value from a response's Set-Cookie header, if any."""
    match = _COOKIE_PATTERN.search(response.headers.get("set-cookie", ""))
    return match.group(1) if match else None


def cookie_header(token: str) -> dict:
    return {"Cookie": f"auth_token={token}"}


# ══════════════════════════════════════════════════════════════════════════
# Application
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        upload_dir=str(tmp_path / "uploads"),
        jwt_secret="test-secret-key-not-for-production",
        bcrypt_rounds=4,
        smtp_host="",
        admin_notify_email="owner@example.com",
        auth_rate_limit_requests=1000,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    context: AppContext = application.state.context
    async with context.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield application
    await context.aclose()


@pytest.fixture
def context(app) -> AppContext:
    return app.state.context


@pytest_asyncio.fixture
async def db_session(context):
    async with context.session_factory() as session:
        yield session


def _client(app, headers: Optional[dict] = None) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", headers=headers)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with _client(app) as c:
        yield c


# ══════════════════════════════════════════════════════════════════════════
# Users and sessions
# ══════════════════════════════════════════════════════════════════════════

async def create_user(
    context: AppContext,
    email: str,
    role: UserRole = UserRole.CUSTOMER,
    password: str = PASSWORD,
    name: str = "Test User",
) -> User:
    auth_service = AuthService(context.password_hasher, context.token_signer)
    async with context.session_factory() as session:
        user = await auth_service.create_user(session, email=email, password=password, name=name, role=role)
        await session.commit()
    return user


def token_for(context: AppContext, user: User) -> str:
    return context.token_signer.issue(identity_for(user))


@pytest_asyncio.fixture
async def admin_user(context) -> User:
    return await create_user(context, ADMIN_EMAIL, role=UserRole.ADMIN, name="Admin")


@pytest_asyncio.fixture
async def customer_user(context) -> User:
    return await create_user(context, CUSTOMER_EMAIL)


@pytest_asyncio.fixture
async def admin_client(app, context, admin_user) -> AsyncGenerator[AsyncClient, None]:
    async with _client(app, cookie_header(token_for(context, admin_user))) as c:
        yield c


@pytest_asyncio.fixture
async def customer_client(app, context, customer_user) -> AsyncGenerator[AsyncClient, None]:
    async with _client(app, cookie_header(token_for(context, customer_user))) as c:
        yield c


# ══════════════════════════════════════════════════════════════════════════
# Catalogue data
# ══════════════════════════════════════════════════════════════════════════

async def create_product(
    context: AppContext,
    name: str = "Linen Shirt",
    slug: Optional[str] = None,
    price: str = "25.00",
    description: str = "A breathable shirt",
    status: ProductStatus = ProductStatus.ACTIVE,
    images: Optional[List[str]] = None,
    category: Optional[Category] = None,
    variants: Optional[List[dict]] = None,
    ratings: Optional[List[tuple]] = None,
) -> Product:
    """
    Insert a product directly.

    variants: [{"name": "Size", "value": "L", "price": "30.00"}, ...]
    ratings:  [(rating, approved), ...]
    """
    async with context.session_factory() as session:
        product = Product(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            description=description,
            price=Decimal(price),
            images=images if images is not None else ["/uploads/shirt.jpg", "/uploads/shirt-back.jpg"],
            category_id=category.id if category else None,
            status=status,
            variants=[
                ProductVariant(name=v["name"], value=v["value"], price=Decimal(v["price"]), stock=5)
                for v in (variants or [])
            ],
            reviews=[Review(rating=r, approved=a) for r, a in (ratings or [])],
        )
        session.add(product)
        await session.commit()
        await session.refresh(product, ["variants"])
    return product


async def create_category(context: AppContext, name: str = "Shirts", slug: str = "shirts") -> Category:
    async with context.session_factory() as session:
        category = Category(name=name, slug=slug)
        session.add(category)
        await session.commit()
    return category


# ══════════════════════════════════════════════════════════════════════════
# Collaborator doubles
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_email(context):
    """Replace both order emails on the app's EmailService with AsyncMocks."""
    email_service = context.email_service
    email_service.send_order_confirmation = AsyncMock()
    email_service.send_admin_order_alert = AsyncMock()
    return email_service


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (2000, 1000), (200, 30, 30, 255)).save(buffer, format="PNG")
    return buffer.getvalue()
