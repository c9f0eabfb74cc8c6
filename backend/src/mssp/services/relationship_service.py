"""Relationship service: on-demand entity relationships, search and stats.

Relationships are computed from foreign keys per request rather than stored.
Every public method is a read path backing secondary UI panels, so failures
are logged and converted into empty results instead of propagating.
"""
from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mssp.config import settings
from mssp.metrics import entity_search_total, relationship_queries_total
from mssp.schemas.entity import (
    EntityReference,
    EntitySearchParams,
    EntitySearchResult,
    Relationship,
    RelationshipGroup,
    RelationshipOptions,
    RelationshipStats,
)
from mssp.services.entity_registry import (
    ENTITY_REGISTRY,
    EntityType,
    create_entity_reference,
    get_entity,
    parse_entity_type,
)
from mssp.services.relationship_rules import (
    forward_rules,
    group_relationships_by_type,
    reverse_rules,
)

logger = structlog.get_logger(__name__)


def relationship_id(source_type: str, source_id: int, target_type: str, target_id: int) -> str:
    """Deterministic edge id shared by every request that discovers the same edge."""
    return f"{source_type}:{source_id}->{target_type}:{target_id}"


class RelationshipService:
    """Service layer for entity relationship discovery."""

    def __init__(self, db: AsyncSession):
        """Initialize relationship service with database session."""
        self.db = db

    async def get_entity(self, entity_type: Any, entity_id: int) -> EntityReference | None:
        """
        Get an entity by type and ID.

        Args:
            entity_type: Entity type tag
            entity_id: Primary key

        Returns:
            EntityReference or None if unknown type, missing row or lookup failure
        """
        return await get_entity(self.db, entity_type, entity_id)

    async def get_entity_relationships(
        self,
        entity_type: Any,
        entity_id: int,
        options: Optional[RelationshipOptions] = None,
    ) -> list[RelationshipGroup]:
        """
        Get all relationships for an entity (forward and reverse), grouped by type.

        Args:
            entity_type: Entity type tag
            entity_id: Primary key
            options: Type filters and per-rule row limit

        Returns:
            Relationship groups sorted by descending count; [] on failure
        """
        options = options or RelationshipOptions(limit=settings.relationship_default_limit)
        relationship_queries_total.labels(operation="relationships").inc()

        try:
            relationships = await self.get_forward_relationships(entity_type, entity_id, options)
            relationships.extend(await self.get_reverse_relationships(entity_type, entity_id, options))

            if options.include_types:
                relationships = [r for r in relationships if r.relationship_type in options.include_types]
            if options.exclude_types:
                relationships = [r for r in relationships if r.relationship_type not in options.exclude_types]

            return group_relationships_by_type(relationships)
        except Exception as e:
            logger.error(
                "entity_relationships_failed",
                entity_type=str(entity_type),
                entity_id=entity_id,
                error=str(e),
            )
            return []

    async def get_forward_relationships(
        self,
        entity_type: Any,
        entity_id: int,
        options: Optional[RelationshipOptions] = None,
    ) -> list[Relationship]:
        """
        Get relationships where this entity owns, contains or authorizes others.

        Issues one query per traversal rule, each capped at ``options.limit``.
        Types without rules (or unknown types) have no forward relationships.
        Returns [] on failure.
        """
        options = options or RelationshipOptions(limit=settings.relationship_default_limit)
        parsed = parse_entity_type(entity_type)
        if parsed is None:
            return []

        relationships: list[Relationship] = []
        try:
            for rule in forward_rules(parsed):
                result = await self.db.execute(rule.children_statement(entity_id, options.limit))
                for row in result.scalars().all():
                    relationships.append(
                        await self.create_relationship(
                            parsed, entity_id,
                            rule.target, row.id,
                            rule.relationship_type,
                            row,
                        )
                    )
        except Exception as e:
            logger.error(
                "forward_relationships_failed",
                entity_type=parsed.value,
                entity_id=entity_id,
                error=str(e),
            )
            return []

        return relationships

    async def get_reverse_relationships(
        self,
        entity_type: Any,
        entity_id: int,
        options: Optional[RelationshipOptions] = None,
    ) -> list[Relationship]:
        """
        Get relationships where another entity owns, contains or authorizes this one.

        Follows each of the entity's own foreign keys up to the parent row. A
        null foreign key or a dangling reference emits nothing. Returns [] on failure.
        """
        options = options or RelationshipOptions(limit=settings.relationship_default_limit)
        parsed = parse_entity_type(entity_type)
        if parsed is None:
            return []

        rules = reverse_rules(parsed)
        if not rules:
            return []

        relationships: list[Relationship] = []
        try:
            child = await ENTITY_REGISTRY[parsed].fetch_by_id(self.db, entity_id)
            if child is None:
                return []

            for rule in rules:
                stmt = rule.parent_statement(child, options.limit)
                if stmt is None:
                    continue

                result = await self.db.execute(stmt)
                for parent in result.scalars().all():
                    relationships.append(
                        await self.create_relationship(
                            rule.source, parent.id,
                            parsed, entity_id,
                            rule.relationship_type,
                            child,
                            is_reverse=True,
                        )
                    )
        except Exception as e:
            logger.error(
                "reverse_relationships_failed",
                entity_type=parsed.value,
                entity_id=entity_id,
                error=str(e),
            )
            return []

        return relationships

    async def create_relationship(
        self,
        source_type: EntityType,
        source_id: int,
        target_type: EntityType,
        target_id: int,
        relationship_type: Any,
        target_row: Any,
        is_reverse: bool = False,
    ) -> Relationship:
        """
        Build a relationship object.

        The source side is re-fetched through ``get_entity``; the target side
        is projected from the row the caller already holds.
        """
        source_type = EntityType(source_type)
        target_type = EntityType(target_type)

        source_entity = await self.get_entity(source_type, source_id)
        if source_entity is None:
            source_entity = create_entity_reference(source_id, source_type, {})
        target_entity = ENTITY_REGISTRY[target_type].to_reference(target_row)

        now = datetime.utcnow()
        return Relationship(
            id=relationship_id(source_type.value, source_id, target_type.value, target_id),
            source_entity=source_entity,
            target_entity=target_entity,
            relationship_type=getattr(relationship_type, "value", relationship_type),
            is_reverse=is_reverse,
            strength=settings.relationship_strength,
            created_at=now,
            updated_at=now,
        )

    async def search_entities(self, params: EntitySearchParams) -> EntitySearchResult:
        """
        Search entities across types by substring match on searchable fields.

        Each type contributes at most ``settings.search_per_type_limit`` rows so
        no single type starves the rest. ``total`` counts the entities returned.

        Args:
            params: Query, optional entity type filter, limit and offset

        Returns:
            EntitySearchResult; empty on failure
        """
        entity_search_total.inc()

        try:
            results: list[EntityReference] = []
            limit = params.limit
            types_to_search = params.entity_types or [entity_type.value for entity_type in EntityType]

            for raw_type in types_to_search:
                if len(results) >= limit:
                    break

                entity_type = parse_entity_type(raw_type)
                if entity_type is None:
                    continue

                fetcher = ENTITY_REGISTRY[entity_type]
                model = fetcher.model
                stmt = select(model)

                if params.query:
                    pattern = f"%{params.query}%"
                    conditions = [
                        getattr(model, field).ilike(pattern)
                        for field in fetcher.definition.searchable_fields
                    ]
                    if conditions:
                        stmt = stmt.where(or_(*conditions))

                stmt = (
                    stmt.order_by(model.id)
                    .limit(min(limit - len(results), settings.search_per_type_limit))
                    .offset(params.offset)
                )

                result = await self.db.execute(stmt)
                results.extend(fetcher.to_reference(row) for row in result.scalars().all())

            entities = results[:limit]
            return EntitySearchResult(
                entities=entities,
                total=len(entities),
                has_more=len(entities) == limit,
            )
        except Exception as e:
            logger.error("entity_search_failed", query=params.query, error=str(e))
            return EntitySearchResult(entities=[], total=0, has_more=False)

    async def get_relationship_stats(self, entity_type: Any, entity_id: int) -> RelationshipStats:
        """
        Get relationship counts for an entity.

        Returns:
            Total count plus count per relationship type; zeroed on failure
        """
        relationship_queries_total.labels(operation="stats").inc()

        try:
            groups = await self.get_entity_relationships(entity_type, entity_id)

            stats = RelationshipStats()
            for group in groups:
                stats.total_relationships += group.count
                stats.relationship_types[group.type] = group.count

            return stats
        except Exception as e:
            logger.error(
                "relationship_stats_failed",
                entity_type=str(entity_type),
                entity_id=entity_id,
                error=str(e),
            )
            return RelationshipStats()

    async def get_related_entities(
        self,
        entity_type: Any,
        entity_id: int,
        related_entity_type: Any,
        relationship_type: Optional[str] = None,
    ) -> list[EntityReference]:
        """
        Get entities of one type related to the given entity.

        Args:
            entity_type: Entity type tag of the anchor entity
            entity_id: Primary key of the anchor entity
            related_entity_type: Entity type tag to keep
            relationship_type: Optional relationship type filter

        Returns:
            Related entities de-duplicated by (id, type), first occurrence wins
        """
        relationship_queries_total.labels(operation="related").inc()

        try:
            related_type = getattr(related_entity_type, "value", related_entity_type)
            rel_filter = getattr(relationship_type, "value", relationship_type)
            groups = await self.get_entity_relationships(entity_type, entity_id)

            related: list[EntityReference] = []
            seen: set[tuple[int, str]] = set()

            for group in groups:
                if rel_filter and group.type != rel_filter:
                    continue

                for relationship in group.relationships:
                    if relationship.target_entity.type == related_type:
                        candidate = relationship.target_entity
                    elif relationship.source_entity.type == related_type and relationship.is_reverse:
                        candidate = relationship.source_entity
                    else:
                        continue

                    key = (candidate.id, candidate.type)
                    if key not in seen:
                        seen.add(key)
                        related.append(candidate)

            return related
        except Exception as e:
            logger.error(
                "related_entities_failed",
                entity_type=str(entity_type),
                entity_id=entity_id,
                related_entity_type=str(related_entity_type),
                error=str(e),
            )
            return []
