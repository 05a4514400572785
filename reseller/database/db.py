"""
Database Session Management

Async SQLAlchemy engine and session factory. The engine is created lazily so
importing the package never requires a database driver.
"""

from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass

from reseller.core.conf import settings


class Base(MappedAsDataclass, DeclarativeBase):
    """Declarative dataclass base for all ORM models."""


def uuid4_str() -> str:
    """Generate a UUID4 string primary key."""
    return str(uuid4())


@lru_cache
def get_engine() -> AsyncEngine:
    return create_async_engine(
        settings.database_url,
        echo=settings.DATABASE_ECHO,
        pool_pre_ping=True,
        future=True,
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)


@asynccontextmanager
async def async_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Open a session, rolling back on error."""
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create all tables registered on ``Base``."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
