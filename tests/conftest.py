"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database. The app's get_db
dependency is overridden to use it, and requests go through
httpx.AsyncClient over ASGITransport (no server, no lifespan).
"""

import os

# Must be set before skycomfort reads its settings
os.environ.setdefault("ENV_MODE", "development")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("PAYMENT_LATENCY_SECONDS", "0")

import uuid
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from skycomfort.database import Base, enable_sqlite_foreign_keys, get_db
from skycomfort.main import app
from skycomfort.repositories import ServiceRepository, UserRepository
from skycomfort.services.payment import reset_payment_processor

CATALOG = [
    {"title": "Premium Coffee", "description": "Freshly brewed premium coffee",
     "price": 4.99, "type": "beverage", "category": "hot"},
    {"title": "Premium Chicken Meal", "description": "Grilled chicken with seasonal vegetables",
     "price": 15.99, "type": "meal", "category": "main"},
    {"title": "Comfort Kit", "description": "Eye mask, ear plugs and socks",
     "price": 14.99, "type": "comfort", "category": "kits"},
]


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fresh_payment_processor():
    reset_payment_processor()
    yield
    reset_payment_processor()


async def register(client: AsyncClient, **overrides: Any) -> dict[str, Any]:
    """Register a passenger over HTTP and return token, headers and user."""
    tag = uuid.uuid4().hex[:8]
    body = {
        "name": "Test Passenger",
        "email": f"passenger-{tag}@example.com",
        "username": f"passenger{tag}",
        "password": "secret123",
        "flightId": "SC101",
        "seatNumber": "12A",
    }
    body.update(overrides)

    response = await client.post("/api/auth/register", json=body)
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return {
        "token": data["token"],
        "refresh_token": data["refreshToken"],
        "headers": {"Authorization": f"Bearer {data['token']}"},
        "user": data["user"],
        "password": body["password"],
    }


@pytest.fixture
def register_user(client):
    """Factory fixture: ``await register_user(seatNumber="1A")``."""
    async def _register(**overrides: Any) -> dict[str, Any]:
        return await register(client, **overrides)
    return _register


@pytest.fixture
async def passenger(client):
    return await register(client)


@pytest.fixture
async def other_passenger(client):
    return await register(client, seatNumber="30F")


@pytest.fixture
async def staff(client):
    return await register(client, name="Cabin Crew", isStaff=True, flightId=None, seatNumber=None)


@pytest.fixture
async def catalog(session_maker) -> list[dict[str, Any]]:
    """Seed catalog items directly; returns id/title/price for each."""
    items = []
    async with session_maker() as session:
        repo = ServiceRepository(session)
        for data in CATALOG:
            service = await repo.create(data)
            items.append({"id": service.id, "title": service.title, "price": service.price})
    return items


@pytest.fixture
async def user_repo(db_session):
    return UserRepository(db_session)
