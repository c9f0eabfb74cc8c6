"""Pydantic schemas for entity references and relationships."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ConfigDict


class EntityReference(BaseModel):
    """Normalized, type-tagged projection of any business record."""

    id: int = Field(..., description="Primary key of the referenced record")
    type: str = Field(..., description="Entity type tag (client, contract, ...)")
    name: str = Field(..., description="Display title taken from the type's primary field")
    url: str = Field(..., description="Frontend path of the record detail page")
    status: Any | None = Field(default=None, description="Value of the type's status field")
    icon: str | None = Field(default=None, description="Icon name for the entity type")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Secondary text and raw column values")


class Relationship(BaseModel):
    """Directed edge between two entities, discovered from foreign keys."""

    id: str = Field(..., description="Deterministic edge id: '{source_type}:{source_id}->{target_type}:{target_id}'")
    source_entity: EntityReference
    target_entity: EntityReference
    relationship_type: str
    is_reverse: bool = False
    strength: int = Field(default=5, ge=1, le=10, description="Ordering weight")
    created_at: datetime
    updated_at: datetime


class RelationshipGroup(BaseModel):
    """Relationships bucketed by relationship type."""

    type: str
    display_name: str
    relationships: list[Relationship] = Field(default_factory=list)
    count: int = 0
    icon: str | None = None


class RelationshipOptions(BaseModel):
    """Options accepted by relationship queries."""

    include_types: list[str] | None = Field(default=None, description="Only keep these relationship types")
    exclude_types: list[str] | None = Field(default=None, description="Drop these relationship types")
    limit: int = Field(default=50, ge=1, le=500, description="Maximum rows fetched per traversal rule")


class RelationshipStats(BaseModel):
    """Relationship counts for one entity."""

    total_relationships: int = 0
    relationship_types: dict[str, int] = Field(default_factory=dict)


class EntitySearchParams(BaseModel):
    """Cross-entity search parameters."""

    query: str | None = Field(default=None, description="Case-insensitive substring to match")
    entity_types: list[str] | None = Field(default=None, description="Restrict the search to these entity types")
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class EntitySearchResult(BaseModel):
    """
    One page of cross-entity search results.

    ``total`` is the number of entities returned in this page, not the number
    of matching rows in storage.
    """

    entities: list[EntityReference] = Field(default_factory=list)
    total: int = 0
    has_more: bool = False


class EntityTypesResponse(BaseModel):
    """Entity and relationship type tags shared with the frontend."""

    entity_types: list[str]
    relationship_types: list[str]

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "entity_types": ["client", "contract", "service_scope"],
                    "relationship_types": ["owns", "contains", "authorizes"],
                }
            ]
        }
    )
