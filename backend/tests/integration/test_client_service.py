"""Integration tests for client operations and their audit trail."""
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mssp.models import Client
from mssp.models.audit_log import AuditLog, ChangeHistory
from mssp.schemas.client import ClientCreate, ClientUpdate
from mssp.services.client_service import ClientService
from mssp.utils.audit import AuditLogger, AuditSink


async def _rows(audit_session_factory, model) -> list:
    async with audit_session_factory() as session:
        result = await session.execute(select(model).order_by(model.id))
        return list(result.scalars().all())


@pytest.mark.asyncio
async def test_create_client_is_audited(
    db_session: AsyncSession, audit_logger: AuditLogger, audit_session_factory
) -> None:
    service = ClientService(db_session, audit_logger)

    client = await service.create_client(ClientCreate(name="Acme", industry="Retail"))

    assert client.id is not None
    assert client.status == "active"

    audit = (await _rows(audit_session_factory, AuditLog))[0]
    change = (await _rows(audit_session_factory, ChangeHistory))[0]
    assert audit.entity_id == client.id
    assert audit.entity_name == "Acme"
    assert audit.extra_metadata["created_data"]["industry"] == "Retail"
    assert change.rollback_data == {"action": "delete", "entity_type": "client", "entity_id": client.id}


@pytest.mark.asyncio
async def test_duplicate_name_rejected(db_session: AsyncSession, audit_logger: AuditLogger) -> None:
    service = ClientService(db_session, audit_logger)
    await service.create_client(ClientCreate(name="Acme"))

    with pytest.raises(ValueError, match="already exists"):
        await service.create_client(ClientCreate(name="Acme"))


@pytest.mark.asyncio
async def test_update_records_only_changed_fields(
    db_session: AsyncSession, audit_logger: AuditLogger, audit_session_factory
) -> None:
    """Test the change history holds one row per field that actually changed."""
    service = ClientService(db_session, audit_logger)
    client = await service.create_client(ClientCreate(name="Acme", industry="Retail", short_name="ACM"))

    await service.update_client(client.id, ClientUpdate(industry="Finance", short_name="ACM"))

    updates = [row for row in await _rows(audit_session_factory, ChangeHistory) if row.action == "update"]
    assert [(row.field_name, row.old_value, row.new_value) for row in updates] == [("industry", "Retail", "Finance")]
    assert updates[0].rollback_data["value"] == "Retail"
    assert updates[0].rollback_data["full_data"]["short_name"] == "ACM"


@pytest.mark.asyncio
async def test_update_without_changes_is_silent(
    db_session: AsyncSession, audit_logger: AuditLogger, audit_session_factory
) -> None:
    service = ClientService(db_session, audit_logger)
    client = await service.create_client(ClientCreate(name="Acme", industry="Retail"))

    await service.update_client(client.id, ClientUpdate(industry="Retail"))

    assert [row.action for row in await _rows(audit_session_factory, AuditLog)] == ["create"]


@pytest.mark.asyncio
async def test_update_missing_client(db_session: AsyncSession, audit_logger: AuditLogger) -> None:
    service = ClientService(db_session, audit_logger)

    with pytest.raises(ValueError, match="not found"):
        await service.update_client(404, ClientUpdate(industry="Retail"))


@pytest.mark.asyncio
async def test_delete_archives_and_keeps_rollback_data(
    db_session: AsyncSession, audit_logger: AuditLogger, audit_session_factory
) -> None:
    """Test deletion is soft and the change row holds the pre-delete record."""
    service = ClientService(db_session, audit_logger)
    client = await service.create_client(ClientCreate(name="Acme", industry="Retail"))

    archived = await service.delete_client(client.id)

    assert archived.status == "archived"
    assert archived.deleted_at is not None
    assert await service.get_client(client.id) is None

    delete_row = [row for row in await _rows(audit_session_factory, ChangeHistory) if row.action == "delete"][0]
    assert delete_row.rollback_data["action"] == "create"
    assert delete_row.rollback_data["data"]["status"] == "active"
    assert delete_row.rollback_data["data"]["deleted_at"] is None


@pytest.mark.asyncio
async def test_list_excludes_archived_clients(db_session: AsyncSession, audit_logger: AuditLogger) -> None:
    service = ClientService(db_session, audit_logger)
    for name in ("Initech", "Acme", "Globex"):
        await service.create_client(ClientCreate(name=name))
    globex = await service.get_client_by_name("Globex")
    await service.delete_client(globex.id)

    clients, total = await service.list_clients()
    page, _ = await service.list_clients(page=2, page_size=1)

    assert [c.name for c in clients] == ["Acme", "Initech"]
    assert total == 2
    assert [c.name for c in page] == ["Initech"]


@pytest.mark.asyncio
async def test_audit_failure_does_not_break_business_write(db_session: AsyncSession) -> None:
    """Test a broken audit store never fails the client operation."""

    def broken_factory():
        raise RuntimeError("audit database unavailable")

    service = ClientService(db_session, AuditLogger(user_id=1, sink=AuditSink(broken_factory)))

    client = await service.create_client(ClientCreate(name="Acme"))
    await service.update_client(client.id, ClientUpdate(industry="Finance"))
    await service.delete_client(client.id)

    row = (await db_session.execute(select(Client).where(Client.id == client.id))).scalar_one()
    assert row.status == "archived"
    assert row.industry == "Finance"
