"""
Test fixtures for the Bank Portal test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - client: Async HTTP test client (unauthenticated)
  - customer_headers / second_customer_headers: Authorization headers for
    two independent customers, for ownership tests
  - admin_headers: Authorization headers for an ADMIN user
  - fund_account: Helper that credits an account through the admin API

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database - no state leaks between tests.
  - We override FastAPI's get_db dependency to inject our test session,
    so the application code works exactly as it does in production.
  - Customers are created through the signup endpoint, so every test
    exercises the real signup flow.
  - The admin is created by signing up normally and then updating the role
    in the database, the way an operator provisions back-office staff.
  - Headers are handed out as dicts rather than baked into the client so a
    single test can act as several users.
"""

import os

from cryptography.fernet import Fernet

# Settings are read at import time; set the environment before the app loads.
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("CARD_ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RESEND_API_KEY"] = ""

import uuid  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy import update  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker  # noqa: E402

from bank_portal.database import Base, get_db  # noqa: E402
from bank_portal.exceptions import BankAPIError  # noqa: E402
from bank_portal.main import app  # noqa: E402
from bank_portal.models.user import User, UserRole  # noqa: E402
from bank_portal.rate_limit import limiter  # noqa: E402


# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"

CUSTOMER = {
    "email": "testuser@example.com",
    "password": "SecurePass123!",
    "first_name": "Test",
    "last_name": "User",
}
SECOND_CUSTOMER = {
    "email": "seconduser@example.com",
    "password": "SecurePass456!",
    "first_name": "Second",
    "last_name": "User",
}
ADMIN = {
    "email": "admin@example.com",
    "password": "AdminPass123!",
    "first_name": "Admin",
    "last_name": "User",
}


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_engine):
    """
    Async HTTP test client with the test database injected.

    The override mirrors get_db: domain errors still commit, so declined
    purchases and failed transfer approvals are visible to later requests.
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except BankAPIError:
                await session.commit()
                raise
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def signup(client: AsyncClient, payload: dict) -> dict:
    """Sign up and return the response body (user_id, token, ...)."""
    response = await client.post("/auth/signup", json=payload)
    assert response.status_code == 201, f"Signup failed: {response.text}"
    return response.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def customer_headers(client):
    body = await signup(client, CUSTOMER)
    return bearer(body["token"])


@pytest_asyncio.fixture
async def second_customer_headers(client):
    body = await signup(client, SECOND_CUSTOMER)
    return bearer(body["token"])


@pytest_asyncio.fixture
async def admin_headers(client, db_engine):
    """
    Authorization headers for an ADMIN user.

    Signs up normally, then promotes the user in the database. The JWT
    carries only the user id, so the signup token works after promotion.
    """
    body = await signup(client, ADMIN)
    user_id = uuid.UUID(body["user_id"])

    async_session = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False,
    )
    async with async_session() as session:
        await session.execute(
            update(User)
            .where(User.id == user_id)
            .values(role=UserRole.ADMIN)
        )
        await session.commit()

    return bearer(body["token"])


@pytest_asyncio.fixture
async def customer_user_id(client, customer_headers) -> str:
    response = await client.get("/auth/me", headers=customer_headers)
    return response.json()["id"]


async def open_account(client: AsyncClient, headers: dict, account_type: str = "checking") -> dict:
    response = await client.post(
        "/accounts", json={"account_type": account_type}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


async def fund(
    client: AsyncClient,
    admin_headers: dict,
    account_id: str,
    amount_cents: int,
    description: str = "Initial deposit",
) -> dict:
    """Credit an account through the back-office endpoint."""
    response = await client.post(
        f"/admin/accounts/{account_id}/credit",
        json={"amount_cents": amount_cents, "description": description},
        headers=admin_headers,
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest_asyncio.fixture
async def funded_account(client, customer_headers, admin_headers) -> dict:
    """A checking account for the first customer holding $1,000.00."""
    account = await open_account(client, customer_headers)
    await fund(client, admin_headers, account["id"], 100_000)
    return account
