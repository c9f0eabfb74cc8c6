"""Integration tests for keeping audit writes apart from business transactions."""
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mssp.database import AuditSessionLocal, audit_engine, engine
from mssp.models.audit_log import AuditLog, DataAccessLog
from mssp.models.client import Client
from mssp.utils.audit import AuditLogger, AuditSink, RequestContext
from tests.utils.database import create_test_engine, make_session_factory


def test_default_sink_uses_audit_pool() -> None:
    """Test the default sink is bound to its own engine, not the business one."""
    sink = AuditSink()

    assert sink.session_factory is AuditSessionLocal
    assert AuditSessionLocal.kw["bind"] is audit_engine
    assert audit_engine is not engine


@pytest.mark.asyncio
async def test_business_rollback_keeps_audit_row(
    db_session: AsyncSession,
    audit_logger: AuditLogger,
    session_factory: async_sessionmaker[AsyncSession],
    audit_session_factory: async_sessionmaker[AsyncSession],
) -> None:
    """Test an audit row survives when the business transaction it describes rolls back."""
    client = Client(name="Ghost")
    db_session.add(client)
    await db_session.flush()

    await audit_logger.log_create("client", client.id, client.name, {"name": client.name})
    await db_session.rollback()

    async with session_factory() as session:
        clients = (await session.execute(select(Client))).scalars().all()
    async with audit_session_factory() as session:
        audits = (await session.execute(select(AuditLog))).scalars().all()

    assert clients == []
    assert [row.entity_name for row in audits] == ["Ghost"]


@pytest.mark.asyncio
async def test_audit_write_succeeds_with_business_pool_exhausted(
    tmp_path: Path, request_context: RequestContext
) -> None:
    """Test a request holding the only business connection can still write its audit row."""
    business_engine = await create_test_engine(tmp_path / "small.db", pool_size=1, max_overflow=0, pool_timeout=1)
    trail_engine = await create_test_engine(tmp_path / "trail.db")

    try:
        async with make_session_factory(business_engine)() as business:
            await business.execute(select(Client))

            logger = AuditLogger(context=request_context, sink=AuditSink(make_session_factory(trail_engine)))
            await logger.log_view("client", 1, "Acme")

        async with make_session_factory(trail_engine)() as session:
            rows = (await session.execute(select(DataAccessLog))).scalars().all()
        assert len(rows) == 1
        assert rows[0].entity_name == "Acme"
    finally:
        await business_engine.dispose()
        await trail_engine.dispose()
