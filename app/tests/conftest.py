"""
Pytest configuration and shared fixtures for the CarShare test suite.

This module provides:
- Store fixtures (in-memory store and a SQLite-backed SQL store)
- FastAPI async client fixtures
- Seeded hosts, renters and cars (see factories.py for the helpers)
"""

from collections.abc import AsyncGenerator
from typing import Annotated

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import app.models  # noqa: F401
from app.api.deps import get_store
from app.database import Base, get_db
from app.domain.entities import CarRecord, UserRecord, UserRole
from app.main import app as fastapi_app
from app.repositories.memory import MemoryStore
from app.repositories.sql import SqlStore
from app.tests.factories import seed_car, seed_user


# ==================== STORES ====================


@pytest.fixture
def memory_store() -> MemoryStore:
    """Fresh in-memory store per test."""
    return MemoryStore(lock_timeout=1.0)


@pytest.fixture
async def sql_engine(tmp_path):
    """File-backed SQLite engine so concurrent sessions see each other's commits."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'carshare.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(sql_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(sql_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def sql_store(session_factory) -> AsyncGenerator[SqlStore, None]:
    """SQL store bound to a single session."""
    async with session_factory() as session:
        yield SqlStore(session, lock_timeout=1.0)
        await session.commit()


# ==================== SEED DATA ====================


@pytest.fixture
async def host(memory_store) -> UserRecord:
    return await seed_user(memory_store, "Hannah Host", "host@example.com", UserRole.HOST)


@pytest.fixture
async def other_host(memory_store) -> UserRecord:
    return await seed_user(memory_store, "Oscar Owner", "owner@example.com", UserRole.HOST)


@pytest.fixture
async def renter(memory_store) -> UserRecord:
    return await seed_user(memory_store, "Rita Renter", "renter@example.com", UserRole.USER)


@pytest.fixture
async def car(memory_store, host) -> CarRecord:
    return await seed_car(memory_store, host)


# ==================== HTTP CLIENTS ====================


@pytest.fixture
async def client(memory_store) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with the store dependency pointed at the memory store."""
    fastapi_app.dependency_overrides[get_store] = lambda: memory_store

    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def sql_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client running against the SQL store on SQLite."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def override_get_store(db: Annotated[AsyncSession, Depends(get_db)]) -> SqlStore:
        return SqlStore(db, lock_timeout=1.0)

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_store] = override_get_store

    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac

    fastapi_app.dependency_overrides.clear()
