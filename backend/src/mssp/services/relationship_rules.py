"""Declarative traversal rules for the relationship engine.

Each rule says "rows of ``target`` reference ``source`` through
``foreign_key``" (optionally through a join model). Forward traversal walks a
rule from parent to children; reverse traversal walks the same rule from a
child up to its parent, so every forward edge has a reverse mirror.
"""
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from sqlalchemy import Select, select

from mssp.models import ClientHardwareAssignment
from mssp.schemas.entity import Relationship, RelationshipGroup
from mssp.services.entity_registry import ENTITY_REGISTRY, EntityType, RelationshipType


@dataclass(frozen=True)
class TraversalRule:
    """One foreign-key edge between two entity types."""

    source: EntityType
    target: EntityType
    relationship_type: RelationshipType
    foreign_key: str  # Column referencing the source: on the target table, or on ``via`` when set
    via: Optional[Any] = None  # Join model for many-to-many edges
    via_target_key: Optional[str] = None  # Column on ``via`` referencing the target
    description: str = ""

    @property
    def source_model(self) -> Any:
        return ENTITY_REGISTRY[self.source].model

    @property
    def target_model(self) -> Any:
        return ENTITY_REGISTRY[self.target].model

    def children_statement(self, parent_id: int, limit: int) -> Select:
        """Select the target rows referencing ``parent_id``."""
        target = self.target_model
        if self.via is None:
            stmt = select(target).where(getattr(target, self.foreign_key) == parent_id)
        else:
            stmt = (
                select(target)
                .join(self.via, getattr(self.via, self.via_target_key) == target.id)
                .where(getattr(self.via, self.foreign_key) == parent_id)
                .distinct()
            )
        return stmt.order_by(target.id).limit(limit)

    def parent_statement(self, child_row: Any, limit: int) -> Select | None:
        """
        Select the source rows ``child_row`` points at.

        Returns None when the child's foreign key is null.
        """
        source = self.source_model
        if self.via is None:
            parent_id = getattr(child_row, self.foreign_key, None)
            if parent_id is None:
                return None
            return select(source).where(source.id == parent_id).limit(1)

        return (
            select(source)
            .join(self.via, getattr(self.via, self.foreign_key) == source.id)
            .where(getattr(self.via, self.via_target_key) == child_row.id)
            .distinct()
            .order_by(source.id)
            .limit(limit)
        )


def related_by(
    source: EntityType,
    target: EntityType,
    foreign_key: str,
    relationship_type: RelationshipType,
    via: Any = None,
    via_target_key: str | None = None,
    description: str = "",
) -> TraversalRule:
    """Declare that ``target`` rows belong to ``source`` through ``foreign_key``."""
    return TraversalRule(
        source=source,
        target=target,
        relationship_type=relationship_type,
        foreign_key=foreign_key,
        via=via,
        via_target_key=via_target_key,
        description=description,
    )


TRAVERSAL_RULES: tuple[TraversalRule, ...] = (
    # Client relationships
    related_by(
        EntityType.CLIENT, EntityType.CONTRACT, "client_id", RelationshipType.OWNS,
        description="Client has active and historical contracts",
    ),
    related_by(
        EntityType.CLIENT, EntityType.ASSET, "client_id", RelationshipType.OWNS,
        via=ClientHardwareAssignment, via_target_key="hardware_asset_id",
        description="Hardware assets assigned to this client",
    ),
    related_by(
        EntityType.CLIENT, EntityType.SAF, "client_id", RelationshipType.OWNS,
        description="Service authorization forms issued for this client",
    ),
    related_by(
        EntityType.CLIENT, EntityType.COC, "client_id", RelationshipType.OWNS,
        description="Compliance certificates issued for this client",
    ),
    # Contract relationships
    related_by(
        EntityType.CONTRACT, EntityType.SERVICE_SCOPE, "contract_id", RelationshipType.CONTAINS,
        description="Service scopes defined within this contract",
    ),
    related_by(
        EntityType.CONTRACT, EntityType.PROPOSAL, "contract_id", RelationshipType.CONTAINS,
        description="Proposals associated with this contract",
    ),
    related_by(
        EntityType.CONTRACT, EntityType.FINANCIAL_TRANSACTION, "contract_id", RelationshipType.CONTAINS,
        description="Financial transactions related to this contract",
    ),
    # SAF relationships
    related_by(
        EntityType.SAF, EntityType.COC, "saf_id", RelationshipType.AUTHORIZES,
        description="Compliance certificates authorized by this SAF",
    ),
    related_by(
        EntityType.SAF, EntityType.SERVICE_SCOPE, "saf_id", RelationshipType.AUTHORIZES,
        description="Service scopes authorized by this SAF",
    ),
)


def forward_rules(entity_type: EntityType) -> list[TraversalRule]:
    """Rules walked from ``entity_type`` down to its children."""
    return [rule for rule in TRAVERSAL_RULES if rule.source == entity_type]


def reverse_rules(entity_type: EntityType) -> list[TraversalRule]:
    """Rules walked from ``entity_type`` up to its parents."""
    return [rule for rule in TRAVERSAL_RULES if rule.target == entity_type]


# Forward and reverse labels per relationship type
RELATIONSHIP_DISPLAY_NAMES: dict[RelationshipType, tuple[str, str]] = {
    RelationshipType.OWNS: ("Owns", "Owned By"),
    RelationshipType.CONTAINS: ("Contains", "Part Of"),
    RelationshipType.AUTHORIZES: ("Authorizes", "Authorized By"),
    RelationshipType.ISSUED_FOR: ("Issued For", "Issued To"),
    RelationshipType.ATTACHED_TO: ("Attached To", "Attachments"),
    RelationshipType.USES: ("Uses", "Used By"),
}


def get_relationship_display_name(relationship_type: str, is_reverse: bool = False) -> str:
    """Human label for a relationship type, falling back to Title Case of the tag."""
    try:
        labels = RELATIONSHIP_DISPLAY_NAMES.get(RelationshipType(relationship_type))
    except ValueError:
        labels = None

    if labels:
        return labels[1] if is_reverse else labels[0]

    return " ".join(word.capitalize() for word in str(relationship_type).split("_"))


_RELATIONSHIP_ICONS: dict[RelationshipType, str] = {
    RelationshipType.OWNS: "Building",
    RelationshipType.CONTAINS: "Layers",
    RelationshipType.AUTHORIZES: "Shield",
}


def group_relationships_by_type(relationships: Iterable[Relationship]) -> list[RelationshipGroup]:
    """
    Bucket relationships by relationship type.

    Groups are sorted by descending count; ties keep first-appearance order.
    """
    groups: dict[str, RelationshipGroup] = {}

    for relationship in relationships:
        rel_type = relationship.relationship_type
        group = groups.get(rel_type)
        if group is None:
            try:
                icon = _RELATIONSHIP_ICONS.get(RelationshipType(rel_type))
            except ValueError:
                icon = None
            group = RelationshipGroup(
                type=rel_type,
                display_name=get_relationship_display_name(rel_type, relationship.is_reverse),
                relationships=[],
                count=0,
                icon=icon,
            )
            groups[rel_type] = group

        group.relationships.append(relationship)
        group.count += 1

    return sorted(groups.values(), key=lambda g: g.count, reverse=True)
