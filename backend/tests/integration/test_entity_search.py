"""Integration tests for cross-entity search."""
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from mssp.models import Client, Contract
from mssp.schemas.entity import EntitySearchParams
from mssp.services.relationship_service import RelationshipService
from tests.utils.factories import ClientFactory, ContractFactory


@pytest_asyncio.fixture
async def acme_rows(db_session: AsyncSession) -> None:
    """Seed 15 'Acme' clients, each with one 'Acme Deal' contract, plus an unrelated client."""
    clients = [
        Client(**ClientFactory.create({"name": f"Acme {i:02d}", "address": None, "industry": "Retail"}))
        for i in range(1, 16)
    ]
    other = Client(**ClientFactory.create({"name": "Globex", "address": None, "industry": "Energy"}))
    db_session.add_all([*clients, other])
    await db_session.flush()

    db_session.add_all(
        [Contract(**ContractFactory.create(client.id, {"name": f"Acme Deal {client.id}"})) for client in clients]
    )
    await db_session.commit()


@pytest.mark.asyncio
async def test_per_type_cap_leaves_room_for_other_types(db_session: AsyncSession, acme_rows) -> None:
    """Test no type contributes more than 10 rows, so contracts still appear."""
    service = RelationshipService(db_session)

    result = await service.search_entities(EntitySearchParams(query="acme", limit=20))

    types = [entity.type for entity in result.entities]
    assert types.count("client") == 10
    assert types.count("contract") == 10
    assert result.total == 20
    assert result.has_more is True


@pytest.mark.asyncio
async def test_limit_stops_search_early(db_session: AsyncSession, acme_rows) -> None:
    """Test a small limit is filled from the first type and stops there."""
    service = RelationshipService(db_session)

    result = await service.search_entities(EntitySearchParams(query="acme", limit=5))

    assert [entity.name for entity in result.entities] == [f"Acme {i:02d}" for i in range(1, 6)]
    assert result.total == 5
    assert result.has_more is True


@pytest.mark.asyncio
async def test_search_is_case_insensitive(db_session: AsyncSession, acme_rows) -> None:
    service = RelationshipService(db_session)

    result = await service.search_entities(EntitySearchParams(query="GLOBEX"))

    assert [entity.name for entity in result.entities] == ["Globex"]
    assert result.total == 1
    assert result.has_more is False


@pytest.mark.asyncio
async def test_search_matches_secondary_searchable_fields(db_session: AsyncSession, acme_rows) -> None:
    """Test matches on any searchable field, not only the name."""
    service = RelationshipService(db_session)

    result = await service.search_entities(EntitySearchParams(query="energy", entity_types=["client"]))

    assert [entity.name for entity in result.entities] == ["Globex"]


@pytest.mark.asyncio
async def test_unknown_types_are_skipped(db_session: AsyncSession, acme_rows) -> None:
    """Test unknown entity types in the filter are ignored."""
    service = RelationshipService(db_session)

    result = await service.search_entities(
        EntitySearchParams(query="deal", entity_types=["spaceship", "contract"], limit=20)
    )

    assert {entity.type for entity in result.entities} == {"contract"}
    assert result.total == 10


@pytest.mark.asyncio
async def test_offset_applies_per_type(db_session: AsyncSession, acme_rows) -> None:
    """Test the offset skips rows within each searched type."""
    service = RelationshipService(db_session)

    result = await service.search_entities(
        EntitySearchParams(query="acme", entity_types=["client"], limit=20, offset=10)
    )

    assert [entity.name for entity in result.entities] == [f"Acme {i:02d}" for i in range(11, 16)]
    assert result.has_more is False


@pytest.mark.asyncio
async def test_empty_query_lists_entities(db_session: AsyncSession, acme_rows) -> None:
    """Test no query matches everything, still capped per type."""
    service = RelationshipService(db_session)

    result = await service.search_entities(EntitySearchParams(entity_types=["client"], limit=50))

    assert result.total == 10


@pytest.mark.asyncio
async def test_no_matches(db_session: AsyncSession, acme_rows) -> None:
    service = RelationshipService(db_session)

    result = await service.search_entities(EntitySearchParams(query="initech"))

    assert result.entities == []
    assert result.total == 0
    assert result.has_more is False
