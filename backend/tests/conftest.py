"""Pytest configuration and fixtures for async testing."""
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.ext.compiler import compiles


# SQLite has no JSONB; store it as JSON
@compiles(JSONB, "sqlite")
def compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"


from mssp import models  # noqa: E402,F401  registers every table on Base.metadata
from mssp.api.deps import get_audit_db, get_audit_sink, get_current_user, get_db  # noqa: E402
from mssp.auth.jwt import jwt_auth  # noqa: E402
from mssp.main import app  # noqa: E402
from mssp.utils.audit import AuditLogger, AuditSink, RequestContext  # noqa: E402
from tests.utils.database import create_test_engine, make_session_factory  # noqa: E402

TEST_USER_ID = 1


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a fresh business database for each test.

    Business and audit tables live in separate SQLite files, one pair per
    test, so an audit commit never touches the business transaction.

    Yields:
        AsyncEngine with all tables created
    """
    test_engine = await create_test_engine(tmp_path / "business.db")
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def audit_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Separate database for audit writes, mirroring the production audit pool."""
    test_engine = await create_test_engine(tmp_path / "audit.db")
    yield test_engine
    await test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the business test database."""
    return make_session_factory(engine)


@pytest.fixture(scope="function")
def audit_session_factory(audit_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the audit test database."""
    return make_session_factory(audit_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session for business reads and writes.

    Yields:
        AsyncSession: Database session for testing
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function")
def audit_sink(audit_session_factory: async_sessionmaker[AsyncSession]) -> AuditSink:
    """Audit sink writing to the audit test database."""
    return AuditSink(audit_session_factory)


@pytest.fixture(scope="function")
def request_context() -> RequestContext:
    return RequestContext(
        ip_address="203.0.113.7",
        user_agent="pytest",
        session_id="sess-test",
        user_id=TEST_USER_ID,
    )


@pytest.fixture(scope="function")
def audit_logger(request_context: RequestContext, audit_sink: AuditSink) -> AuditLogger:
    """Audit logger acting as the test user."""
    return AuditLogger(context=request_context, sink=audit_sink)


async def _mock_current_user() -> dict:
    """Mock current user for testing."""
    return {"sub": str(TEST_USER_ID), "username": "tester", "role": "admin", "type": "access"}


@pytest_asyncio.fixture(scope="function")
async def async_client(
    db_session: AsyncSession,
    audit_sink: AuditSink,
    audit_session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client with database, auth and audit overrides.

    Yields:
        AsyncClient: Async HTTP client for API testing
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    async def override_get_audit_db() -> AsyncGenerator[AsyncSession, None]:
        async with audit_session_factory() as session:
            yield session

    async def override_get_audit_sink() -> AuditSink:
        return audit_sink

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_audit_db] = override_get_audit_db
    app.dependency_overrides[get_current_user] = _mock_current_user
    app.dependency_overrides[get_audit_sink] = override_get_audit_sink

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def auth_headers() -> dict[str, str]:
    """Bearer header carrying a real signed token for the test user."""
    token = jwt_auth.create_access_token(TEST_USER_ID, "tester", "admin")
    return {"Authorization": f"Bearer {token}"}
