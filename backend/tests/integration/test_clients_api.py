"""Integration tests for the client API."""
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from mssp.models.audit_log import AuditLog, ChangeHistory, DataAccessLog


async def _rows(audit_session_factory, model) -> list:
    async with audit_session_factory() as session:
        result = await session.execute(select(model).order_by(model.id))
        return list(result.scalars().all())


async def _create(async_client: AsyncClient, **fields) -> dict:
    response = await async_client.post("/v1/clients", json={"name": "Acme", **fields})
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_client(async_client: AsyncClient, audit_session_factory) -> None:
    """Test creating a client returns it and records the creation."""
    data = await _create(async_client, industry="Retail", contact_email="soc@acme.example")

    assert data["name"] == "Acme"
    assert data["status"] == "active"
    assert data["contact_email"] == "soc@acme.example"
    assert data["deleted_at"] is None

    audits = await _rows(audit_session_factory, AuditLog)
    assert [(a.action, a.entity_id) for a in audits] == [("create", data["id"])]


@pytest.mark.asyncio
async def test_create_client_duplicate_name(async_client: AsyncClient) -> None:
    await _create(async_client)

    response = await async_client.post("/v1/clients", json={"name": "Acme"})

    assert response.status_code == 400
    assert "already exists" in response.json()["detail"]


@pytest.mark.asyncio
async def test_create_client_invalid_email(async_client: AsyncClient) -> None:
    response = await async_client.post("/v1/clients", json={"name": "Acme", "contact_email": "not-an-email"})

    assert response.status_code == 422
    detail = response.json()["details"][0]
    assert detail["field"] == "body.contact_email"
    assert detail["code"] == "invalid_email"


@pytest.mark.asyncio
async def test_create_client_missing_name(async_client: AsyncClient) -> None:
    response = await async_client.post("/v1/clients", json={"industry": "Retail"})

    assert response.status_code == 422
    assert response.json()["details"][0]["code"] == "missing_required_field"


@pytest.mark.asyncio
async def test_get_client_logs_view(async_client: AsyncClient, audit_session_factory) -> None:
    created = await _create(async_client)

    response = await async_client.get(f"/v1/clients/{created['id']}")

    assert response.status_code == 200
    assert response.json()["name"] == "Acme"
    views = await _rows(audit_session_factory, DataAccessLog)
    assert [(v.entity_id, v.data_scope) for v in views] == [(created["id"], "full")]


@pytest.mark.asyncio
async def test_get_client_not_found(async_client: AsyncClient) -> None:
    response = await async_client.get("/v1/clients/9999")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_clients(async_client: AsyncClient, audit_session_factory) -> None:
    await _create(async_client, name="Initech", status="prospect")
    await _create(async_client, name="Globex")

    everything = await async_client.get("/v1/clients")
    prospects = await async_client.get("/v1/clients", params={"status_filter": "prospect"})

    assert everything.status_code == 200
    assert [c["name"] for c in everything.json()["items"]] == ["Globex", "Initech"]
    assert everything.json()["total"] == 2
    assert [c["name"] for c in prospects.json()["items"]] == ["Initech"]

    views = await _rows(audit_session_factory, DataAccessLog)
    assert [(v.data_scope, v.result_count) for v in views] == [("summary", 2), ("summary", 1)]


@pytest.mark.asyncio
async def test_update_client(async_client: AsyncClient, audit_session_factory) -> None:
    """Test a partial update changes one field and writes one change row for it."""
    created = await _create(async_client, industry="Retail", short_name="ACM")

    response = await async_client.patch(f"/v1/clients/{created['id']}", json={"industry": "Finance"})

    assert response.status_code == 200
    assert response.json()["industry"] == "Finance"
    assert response.json()["short_name"] == "ACM"

    updates = [row for row in await _rows(audit_session_factory, ChangeHistory) if row.action == "update"]
    assert [(row.field_name, row.old_value, row.new_value) for row in updates] == [("industry", "Retail", "Finance")]


@pytest.mark.asyncio
async def test_update_client_not_found(async_client: AsyncClient) -> None:
    response = await async_client.patch("/v1/clients/9999", json={"industry": "Finance"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_client(async_client: AsyncClient, audit_session_factory) -> None:
    """Test deleting archives the client and hides it from reads."""
    created = await _create(async_client)

    response = await async_client.delete(f"/v1/clients/{created['id']}")

    assert response.status_code == 204
    assert (await async_client.get(f"/v1/clients/{created['id']}")).status_code == 404
    assert (await async_client.delete(f"/v1/clients/{created['id']}")).status_code == 404

    audits = await _rows(audit_session_factory, AuditLog)
    deletes = [a for a in audits if a.action == "delete"]
    assert len(deletes) == 1
    assert deletes[0].severity == "medium"
    assert deletes[0].extra_metadata["deleted_data"]["name"] == "Acme"
