import os

import pytest

# The HTTP app refuses to start without explicit origins.
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.grinta import db
from backend.grinta import models  # noqa: F401


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def session():
    """Fresh in-memory database with every table, one session on top."""

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(db.Base.metadata.create_all)

    async_session_maker = sessionmaker(
        engine, expire_on_commit=False, class_=AsyncSession
    )
    try:
        async with async_session_maker() as s:
            yield s
    finally:
        await engine.dispose()
