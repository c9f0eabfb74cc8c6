"""SQLite engines and session factories for tests."""
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from mssp.database import Base

TEST_DATABASE_URL = "sqlite+aiosqlite:///{path}"


async def create_test_engine(path: Path, **engine_kwargs: Any) -> AsyncEngine:
    """Create a SQLite engine at ``path`` with every table created."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL.format(path=path),
        connect_args={"check_same_thread": False},
        **engine_kwargs,
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return test_engine


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
