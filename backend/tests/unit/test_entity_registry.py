"""Unit tests for the entity registry and reference projection."""
from decimal import Decimal

import pytest

from mssp.models import Client, User
from mssp.services.entity_registry import (
    ENTITY_DEFINITIONS,
    ENTITY_REGISTRY,
    EntityType,
    create_entity_reference,
    get_entity_url,
    parse_entity_type,
)


def test_every_entity_type_is_registered() -> None:
    """Test each entity type has both a definition and a storage model."""
    for entity_type in EntityType:
        assert entity_type in ENTITY_DEFINITIONS
        assert entity_type in ENTITY_REGISTRY


def test_searchable_fields_exist_on_models() -> None:
    """Test every searchable, primary, secondary and status field is a real column."""
    for entity_type, fetcher in ENTITY_REGISTRY.items():
        definition = fetcher.definition
        fields = [*definition.searchable_fields, definition.primary_field]
        fields += [f for f in (definition.secondary_field, definition.status_field) if f]
        for field in fields:
            assert hasattr(fetcher.model, field), f"{entity_type.value}.{field}"


def test_registry_is_read_only() -> None:
    """Test the registry cannot be mutated after import."""
    with pytest.raises(TypeError):
        ENTITY_REGISTRY[EntityType.CLIENT] = None  # type: ignore[index]


@pytest.mark.parametrize(
    "value, expected",
    [
        ("client", EntityType.CLIENT),
        (EntityType.COC, EntityType.COC),
        ("service_authorization_form", EntityType.SAF),
        ("spaceship", None),
        (None, None),
    ],
)
def test_parse_entity_type(value, expected) -> None:
    """Test unknown tags parse to None instead of raising."""
    assert parse_entity_type(value) is expected


def test_reference_uses_primary_field_and_definition() -> None:
    """Test a client row is projected with name, url, status, icon and secondary text."""
    reference = create_entity_reference(
        7,
        EntityType.CLIENT,
        {"id": 7, "name": "Acme", "industry": "Retail", "status": "active"},
    )

    assert reference.id == 7
    assert reference.type == "client"
    assert reference.name == "Acme"
    assert reference.url == "/clients/7"
    assert reference.status == "active"
    assert reference.icon == "Building"
    assert reference.metadata["secondary_text"] == "Retail"
    assert reference.metadata["industry"] == "Retail"


def test_reference_name_falls_back_to_display_name() -> None:
    """Test a missing primary field yields '<Display Name> <id>'."""
    reference = create_entity_reference(3, EntityType.SAF, {})

    assert reference.name == "Service Authorization Form 3"
    assert reference.url == "/safs/3"
    assert reference.status is None
    assert reference.metadata == {"secondary_text": None}


def test_user_reference_hides_password() -> None:
    """Test hidden fields never leak into reference metadata."""
    user = User(id=5, username="jdoe", email="jdoe@example.com", password="hash", role="engineer", is_active=True)

    reference = ENTITY_REGISTRY[EntityType.USER].to_reference(user)

    assert reference.name == "jdoe"
    assert reference.status is True
    assert "password" not in reference.metadata
    assert reference.metadata["email"] == "jdoe@example.com"


def test_to_reference_from_model_row() -> None:
    """Test projecting an ORM row uses its column values."""
    client = Client(id=11, name="Globex", industry="Energy", status="prospect")

    reference = ENTITY_REGISTRY[EntityType.CLIENT].to_reference(client)

    assert reference.name == "Globex"
    assert reference.status == "prospect"
    assert reference.metadata["secondary_text"] == "Energy"


def test_get_entity_url() -> None:
    assert get_entity_url(EntityType.ASSET, 42) == "/assets/42"
    assert get_entity_url(EntityType.FINANCIAL_TRANSACTION, 1) == "/transactions/1"


def test_reference_keeps_numeric_secondary_text() -> None:
    """Test non-string secondary fields are passed through untouched."""
    reference = create_entity_reference(1, EntityType.CONTRACT, {"name": "MSA", "total_value": Decimal("10.00")})

    assert reference.metadata["secondary_text"] == Decimal("10.00")
