"""Entity relationship API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mssp.api.deps import get_audit_logger, get_current_user, get_db
from mssp.config import settings
from mssp.schemas.entity import (
    EntityReference,
    EntitySearchParams,
    EntitySearchResult,
    EntityTypesResponse,
    RelationshipGroup,
    RelationshipOptions,
    RelationshipStats,
)
from mssp.services.entity_registry import EntityType, RelationshipType, parse_entity_type
from mssp.services.relationship_service import RelationshipService
from mssp.utils.audit import AuditLogger

router = APIRouter(prefix="/entities", tags=["Entities"], dependencies=[Depends(get_current_user)])


@router.get("/types", response_model=EntityTypesResponse)
async def list_entity_types() -> EntityTypesResponse:
    """List every entity type and relationship type tag."""
    return EntityTypesResponse(
        entity_types=[entity_type.value for entity_type in EntityType],
        relationship_types=[relationship_type.value for relationship_type in RelationshipType],
    )


@router.get("/search", response_model=EntitySearchResult)
async def search_entities(
    query: str | None = None,
    types: list[str] | None = Query(default=None, description="Entity types to search (repeatable)"),
    limit: int = Query(default=settings.search_default_limit, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
) -> EntitySearchResult:
    """
    Search across entity types.

    - **query**: Case-insensitive substring matched against each type's searchable fields
    - **types**: Restrict to these entity types; unknown types are ignored
    - **limit**: Maximum entities returned (each type contributes at most 10)
    - **offset**: Rows skipped within each type
    """
    service = RelationshipService(db)
    params = EntitySearchParams(query=query, entity_types=types, limit=limit, offset=offset)
    return await service.search_entities(params)


@router.get("/{entity_type}/{entity_id}", response_model=EntityReference)
async def get_entity(
    entity_type: str,
    entity_id: int,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
) -> EntityReference:
    """
    Get one entity as a normalized reference.

    Viewing an entity is recorded in the data access log.
    """
    if parse_entity_type(entity_type) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown entity type {entity_type}",
        )

    service = RelationshipService(db)
    entity = await service.get_entity(entity_type, entity_id)

    if not entity:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity_type} {entity_id} not found",
        )

    await audit.log_view(entity.type, entity.id, entity.name)

    return entity


@router.get("/{entity_type}/{entity_id}/relationships", response_model=list[RelationshipGroup])
async def get_entity_relationships(
    entity_type: str,
    entity_id: int,
    include_types: list[str] | None = Query(default=None),
    exclude_types: list[str] | None = Query(default=None),
    limit: int = Query(default=settings.relationship_default_limit, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
) -> list[RelationshipGroup]:
    """
    Get forward and reverse relationships grouped by relationship type.

    - **include_types**: Only keep these relationship types (repeatable)
    - **exclude_types**: Drop these relationship types (repeatable)
    - **limit**: Maximum related rows per traversal rule
    """
    service = RelationshipService(db)
    options = RelationshipOptions(include_types=include_types, exclude_types=exclude_types, limit=limit)
    return await service.get_entity_relationships(entity_type, entity_id, options)


@router.get("/{entity_type}/{entity_id}/relationships/stats", response_model=RelationshipStats)
async def get_relationship_stats(
    entity_type: str,
    entity_id: int,
    db: AsyncSession = Depends(get_db),
) -> RelationshipStats:
    """Count an entity's relationships, in total and per relationship type."""
    service = RelationshipService(db)
    return await service.get_relationship_stats(entity_type, entity_id)


@router.get("/{entity_type}/{entity_id}/related/{related_type}", response_model=list[EntityReference])
async def get_related_entities(
    entity_type: str,
    entity_id: int,
    related_type: str,
    relationship_type: str | None = None,
    db: AsyncSession = Depends(get_db),
) -> list[EntityReference]:
    """
    Get distinct entities of one type related to this entity.

    - **relationship_type**: Only follow relationships of this type
    """
    service = RelationshipService(db)
    return await service.get_related_entities(entity_type, entity_id, related_type, relationship_type)
