"""
Product Catalog Backend — Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session:  AsyncMock session for service unit tests
    ├── sample_product_data: dict matching the Product model fields
    ├── session_factory:  async_sessionmaker over a fresh SQLite file
    ├── seed_products:    inserts products through session_factory
    ├── auth_headers:     builds Authorization headers for a user id
    └── test_client:      HTTPX AsyncClient wired to the app and the SQLite DB
"""

import os
import tempfile

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup: must run BEFORE any `app` import reads settings
# ══════════════════════════════════════════════════════════════════════════

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="catalog_test_"), "app.db"
)
os.environ["JWT_SECRET"] = "test-secret-not-real-0123456789abcdef"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Any, Dict, Iterable, List  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from app.auth import create_access_token  # noqa: E402
from app.database import Base, get_db_session  # noqa: E402
from app.models.product import Product  # noqa: E402


OWNER_ID = "user-owner-1"
OTHER_USER_ID = "user-other-2"


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures (no database)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = product
        result = await product_service.get_product(mock_db_session, product_id, user)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_product_data() -> Dict[str, Any]:
    """A dictionary matching the Product model fields."""
    now = datetime.now(timezone.utc)
    return {
        "id": uuid4(),
        "user_id": OWNER_ID,
        "name": "Stainless Kettle",
        "price": 49.5,
        "image": "https://img.example.com/kettle.jpg",
        "fast_delivery": True,
        "in_stock": 7,
        "rating": 4.5,
        "qty": None,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def owner_id() -> str:
    return OWNER_ID


@pytest.fixture
def other_user_id() -> str:
    return OTHER_USER_ID


# ══════════════════════════════════════════════════════════════════════════
# Integration fixtures (SQLite through aiosqlite)
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """A session factory bound to a fresh SQLite database with the schema created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def seed_products(session_factory):
    """
    Inserts products and returns them (ids populated).

    Rows default to OWNER_ID and get strictly increasing created_at values,
    so insertion order is also the default listing order.

    Usage:
        products = await seed_products([{"name": "A", "price": 10}, ...])
    """
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def _seed(rows: Iterable[Dict[str, Any]]) -> List[Product]:
        products = []
        async with session_factory() as session:
            for index, row in enumerate(rows):
                fields = {
                    "user_id": OWNER_ID,
                    "name": f"Product {index}",
                    "price": 10.0,
                    "image": f"https://img.example.com/{index}.jpg",
                    "fast_delivery": False,
                    "in_stock": 1,
                    "rating": 3.0,
                    "created_at": base_time + timedelta(minutes=index),
                    "updated_at": base_time + timedelta(minutes=index),
                }
                fields.update(row)
                products.append(Product(**fields))
            session.add_all(products)
            await session.commit()
        return products

    return _seed


@pytest.fixture
def auth_headers():
    """Builds a Bearer Authorization header for the given user id."""
    def _headers(user_id: str = OWNER_ID) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    get_db_session is overridden so every request uses the per-test SQLite
    database, with the same commit/rollback behaviour as production.
    """
    from app.main import app

    async def _override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
