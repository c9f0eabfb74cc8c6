"""Entity registry: entity-type tags mapped to storage tables and reference builders.

The registry is built once at import time and never mutated afterwards.
Adding an entity type means one ``EntityType`` member, one
``ENTITY_DEFINITIONS`` entry and one model in ``_ENTITY_MODELS``.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mssp.models import (
    AuditLog,
    CertificateOfCompliance,
    Client,
    Contract,
    Document,
    FinancialTransaction,
    HardwareAsset,
    LicensePool,
    Proposal,
    Service,
    ServiceAuthorizationForm,
    ServiceScope,
    User,
)
from mssp.schemas.entity import EntityReference

logger = structlog.get_logger(__name__)


class EntityType(str, Enum):
    """Entity type tags shared with the route layer and the frontend."""

    CLIENT = "client"
    CONTRACT = "contract"
    SERVICE_SCOPE = "service_scope"
    ASSET = "hardware_asset"
    SAF = "service_authorization_form"
    COC = "certificate_of_compliance"
    PROPOSAL = "proposal"
    DOCUMENT = "document"
    FINANCIAL_TRANSACTION = "financial_transaction"
    LICENSE_POOL = "license_pool"
    SERVICE = "service"
    USER = "user"
    AUDIT_LOG = "audit_log"


class RelationshipType(str, Enum):
    """Relationship type tags."""

    # Direct ownership/containment
    OWNS = "owns"
    BELONGS_TO = "belongs_to"
    CONTAINS = "contains"
    PART_OF = "part_of"

    # Process relationships
    DEPENDS_ON = "depends_on"
    BLOCKS = "blocks"
    RELATES_TO = "relates_to"
    REFERENCES = "references"

    # Workflow relationships
    CREATED_BY = "created_by"
    ASSIGNED_TO = "assigned_to"
    APPROVED_BY = "approved_by"
    ISSUED_FOR = "issued_for"

    # Document relationships
    ATTACHED_TO = "attached_to"
    SUPERSEDES = "supersedes"
    SUPERSEDED_BY = "superseded_by"

    # Financial relationships
    PAID_FOR = "paid_for"
    INVOICED_TO = "invoiced_to"
    COSTS = "costs"

    # Service relationships
    PROVIDES = "provides"
    USES = "uses"
    AUTHORIZES = "authorizes"
    COMPLIES_WITH = "complies_with"


@dataclass(frozen=True)
class EntityDefinition:
    """Display and search metadata for one entity type."""

    type: EntityType
    display_name: str
    plural_name: str
    icon: str
    url_path: str
    primary_field: str
    secondary_field: Optional[str] = None
    status_field: Optional[str] = None
    searchable_fields: tuple[str, ...] = ()
    sortable_fields: tuple[str, ...] = ()
    hidden_fields: frozenset[str] = field(default_factory=frozenset)


ENTITY_DEFINITIONS: Mapping[EntityType, EntityDefinition] = MappingProxyType({
    EntityType.CLIENT: EntityDefinition(
        type=EntityType.CLIENT,
        display_name="Client",
        plural_name="Clients",
        icon="Building",
        url_path="/clients",
        primary_field="name",
        secondary_field="industry",
        status_field="status",
        searchable_fields=("name", "industry", "address", "description"),
        sortable_fields=("name", "industry", "created_at", "status"),
    ),
    EntityType.CONTRACT: EntityDefinition(
        type=EntityType.CONTRACT,
        display_name="Contract",
        plural_name="Contracts",
        icon="FileText",
        url_path="/contracts",
        primary_field="name",
        secondary_field="total_value",
        status_field="status",
        searchable_fields=("name", "notes"),
        sortable_fields=("name", "start_date", "end_date", "total_value", "status"),
    ),
    EntityType.SERVICE_SCOPE: EntityDefinition(
        type=EntityType.SERVICE_SCOPE,
        display_name="Service Scope",
        plural_name="Service Scopes",
        icon="Settings",
        url_path="/service-scopes",
        primary_field="name",
        secondary_field="description",
        status_field="status",
        searchable_fields=("name", "description"),
        sortable_fields=("name", "created_at", "status"),
    ),
    EntityType.ASSET: EntityDefinition(
        type=EntityType.ASSET,
        display_name="Hardware Asset",
        plural_name="Hardware Assets",
        icon="Monitor",
        url_path="/assets",
        primary_field="name",
        secondary_field="model",
        status_field="status",
        searchable_fields=("name", "model", "serial_number", "manufacturer"),
        sortable_fields=("name", "model", "purchase_date", "status"),
    ),
    EntityType.SAF: EntityDefinition(
        type=EntityType.SAF,
        display_name="Service Authorization Form",
        plural_name="Service Authorization Forms",
        icon="Shield",
        url_path="/safs",
        primary_field="saf_number",
        secondary_field="description",
        status_field="status",
        searchable_fields=("saf_number", "description", "scope"),
        sortable_fields=("saf_number", "created_at", "status"),
    ),
    EntityType.COC: EntityDefinition(
        type=EntityType.COC,
        display_name="Certificate of Compliance",
        plural_name="Certificates of Compliance",
        icon="Award",
        url_path="/cocs",
        primary_field="certificate_number",
        secondary_field="description",
        status_field="status",
        searchable_fields=("certificate_number", "description", "compliance_type"),
        sortable_fields=("certificate_number", "issue_date", "status"),
    ),
    EntityType.PROPOSAL: EntityDefinition(
        type=EntityType.PROPOSAL,
        display_name="Proposal",
        plural_name="Proposals",
        icon="FileCheck",
        url_path="/proposals",
        primary_field="type",
        secondary_field="proposed_value",
        status_field="status",
        searchable_fields=("type", "notes"),
        sortable_fields=("type", "proposed_value", "created_at", "status"),
    ),
    EntityType.DOCUMENT: EntityDefinition(
        type=EntityType.DOCUMENT,
        display_name="Document",
        plural_name="Documents",
        icon="File",
        url_path="/documents",
        primary_field="name",
        secondary_field="document_type",
        status_field="is_active",
        searchable_fields=("name", "description", "document_type"),
        sortable_fields=("name", "document_type", "created_at"),
    ),
    EntityType.FINANCIAL_TRANSACTION: EntityDefinition(
        type=EntityType.FINANCIAL_TRANSACTION,
        display_name="Financial Transaction",
        plural_name="Financial Transactions",
        icon="DollarSign",
        url_path="/transactions",
        primary_field="description",
        secondary_field="amount",
        status_field="status",
        searchable_fields=("description", "reference", "category"),
        sortable_fields=("description", "amount", "transaction_date", "status"),
    ),
    EntityType.LICENSE_POOL: EntityDefinition(
        type=EntityType.LICENSE_POOL,
        display_name="License Pool",
        plural_name="License Pools",
        icon="Key",
        url_path="/license-pools",
        primary_field="name",
        secondary_field="total_licenses",
        status_field="status",
        searchable_fields=("name", "description", "vendor"),
        sortable_fields=("name", "total_licenses", "created_at", "status"),
    ),
    EntityType.SERVICE: EntityDefinition(
        type=EntityType.SERVICE,
        display_name="Service",
        plural_name="Services",
        icon="Cog",
        url_path="/services",
        primary_field="name",
        secondary_field="category",
        status_field="is_active",
        searchable_fields=("name", "description", "category"),
        sortable_fields=("name", "category", "created_at"),
    ),
    EntityType.USER: EntityDefinition(
        type=EntityType.USER,
        display_name="User",
        plural_name="Users",
        icon="User",
        url_path="/users",
        primary_field="username",
        secondary_field="email",
        status_field="is_active",
        searchable_fields=("username", "email", "first_name", "last_name", "role"),
        sortable_fields=("username", "email", "role", "created_at"),
        hidden_fields=frozenset({"password"}),
    ),
    EntityType.AUDIT_LOG: EntityDefinition(
        type=EntityType.AUDIT_LOG,
        display_name="Audit Log",
        plural_name="Audit Logs",
        icon="History",
        url_path="/audit-logs",
        primary_field="action",
        secondary_field="entity_type",
        searchable_fields=("action", "entity_type", "description"),
        sortable_fields=("action", "entity_type", "timestamp"),
    ),
})


def parse_entity_type(value: Any) -> EntityType | None:
    """Coerce a tag into an ``EntityType``, returning None for unknown tags."""
    if isinstance(value, EntityType):
        return value
    try:
        return EntityType(value)
    except ValueError:
        return None


def get_entity_definition(entity_type: EntityType) -> EntityDefinition:
    """Return the display definition for an entity type."""
    return ENTITY_DEFINITIONS[entity_type]


def get_entity_url(entity_type: EntityType, entity_id: int) -> str:
    """Return the frontend path of an entity detail page."""
    return f"{get_entity_definition(entity_type).url_path}/{entity_id}"


def create_entity_reference(entity_id: int, entity_type: EntityType, data: dict[str, Any]) -> EntityReference:
    """
    Project a raw row into an ``EntityReference``.

    Args:
        entity_id: Primary key of the row
        entity_type: Entity type of the row
        data: Column values keyed by attribute name

    Returns:
        EntityReference with name, url, status, icon and metadata filled in
    """
    definition = get_entity_definition(entity_type)
    primary = data.get(definition.primary_field)
    name = str(primary) if primary not in (None, "") else f"{definition.display_name} {entity_id}"

    visible = {key: value for key, value in data.items() if key not in definition.hidden_fields}

    return EntityReference(
        id=entity_id,
        type=entity_type.value,
        name=name,
        url=get_entity_url(entity_type, entity_id),
        status=data.get(definition.status_field) if definition.status_field else None,
        icon=definition.icon,
        metadata={
            "secondary_text": data.get(definition.secondary_field) if definition.secondary_field else None,
            **visible,
        },
    )


class EntityFetcher:
    """Storage access and reference projection for one entity type."""

    def __init__(self, entity_type: EntityType, model: Any):
        """Bind an entity type to its ORM model."""
        self.entity_type = entity_type
        self.model = model

    @property
    def definition(self) -> EntityDefinition:
        """Display definition for this fetcher's entity type."""
        return get_entity_definition(self.entity_type)

    def to_reference(self, row: Any) -> EntityReference:
        """Transform an already-fetched row into an entity reference."""
        return create_entity_reference(row.id, self.entity_type, row.to_dict())

    async def fetch_by_id(self, db: AsyncSession, entity_id: int) -> Any | None:
        """Select one row by primary key."""
        result = await db.execute(select(self.model).where(self.model.id == entity_id).limit(1))
        return result.scalar_one_or_none()


_ENTITY_MODELS = {
    EntityType.CLIENT: Client,
    EntityType.CONTRACT: Contract,
    EntityType.SERVICE_SCOPE: ServiceScope,
    EntityType.ASSET: HardwareAsset,
    EntityType.SAF: ServiceAuthorizationForm,
    EntityType.COC: CertificateOfCompliance,
    EntityType.PROPOSAL: Proposal,
    EntityType.DOCUMENT: Document,
    EntityType.FINANCIAL_TRANSACTION: FinancialTransaction,
    EntityType.LICENSE_POOL: LicensePool,
    EntityType.SERVICE: Service,
    EntityType.USER: User,
    EntityType.AUDIT_LOG: AuditLog,
}

ENTITY_REGISTRY: Mapping[EntityType, EntityFetcher] = MappingProxyType(
    {entity_type: EntityFetcher(entity_type, model) for entity_type, model in _ENTITY_MODELS.items()}
)


async def get_entity(db: AsyncSession, entity_type: Any, entity_id: int) -> EntityReference | None:
    """
    Get an entity reference by type and ID.

    Never raises: unknown types, missing rows and storage failures all yield None.

    Args:
        db: Database session
        entity_type: Entity type tag
        entity_id: Primary key

    Returns:
        EntityReference or None
    """
    parsed = parse_entity_type(entity_type)
    fetcher = ENTITY_REGISTRY.get(parsed) if parsed else None
    if fetcher is None:
        logger.error("unknown_entity_type", entity_type=str(entity_type), entity_id=entity_id)
        return None

    try:
        row = await fetcher.fetch_by_id(db, entity_id)
        if row is None:
            return None
        return fetcher.to_reference(row)
    except Exception as e:
        logger.error(
            "entity_lookup_failed",
            entity_type=parsed.value,
            entity_id=entity_id,
            error=str(e),
        )
        # A failed statement leaves the transaction aborted for later queries
        await db.rollback()
        return None
