"""Database engines and session factories with async SQLAlchemy.

Business reads and writes go through ``engine`` / ``AsyncSessionLocal``.
Audit trail writes go through a separate ``audit_engine`` with its own pool,
so a request holding a business connection never waits on its own audit
write, and audit commits never touch the business transaction.
"""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from mssp.config import settings

engine = create_async_engine(
    str(settings.database_url),
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
)

# Audit writes fail fast rather than stalling the request they describe
audit_engine = create_async_engine(
    str(settings.audit_database_url or settings.database_url),
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=settings.audit_pool_size,
    max_overflow=settings.audit_max_overflow,
    pool_timeout=settings.audit_pool_timeout,
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

AuditSessionLocal = async_sessionmaker(
    audit_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a business database session.

    Commits when the request succeeds and rolls back when it raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_audit_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a session on the audit engine, for reading the trail back."""
    async with AuditSessionLocal() as session:
        yield session


# Declarative base for all models
Base = declarative_base()
