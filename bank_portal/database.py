"""
Database engine, session management, and base model class.

This module sets up SQLAlchemy 2.0 with async support. Key components:

  - engine: The async database engine
  - AsyncSessionLocal: Factory for creating async database sessions
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request

We use async SQLAlchemy (aiosqlite for SQLite) so the API can serve
concurrent requests without blocking. Moving to PostgreSQL only requires a
different DATABASE_URL (asyncpg driver).

Session lifecycle:
  Each API request gets its own session via get_db(). The session commits on
  success and rolls back on unexpected exceptions. Domain errors
  (BankAPIError) still commit, so audit records written before the error
  was raised (declined purchases, failed transfer approvals) are kept.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from bank_portal.config import settings
from bank_portal.exceptions import BankAPIError


# echo=True in debug mode logs all SQL statements
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

# expire_on_commit=False: attributes stay loaded after commit, otherwise
# reading them would need a lazy (synchronous) refresh, which fails in async code.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except BankAPIError:
            # Keep rows flushed before the rejection (declined purchases, failed transfers).
            await session.commit()
            raise
        except Exception:
            await session.rollback()
            raise
