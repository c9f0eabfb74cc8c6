"""Pydantic schemas for API request/response validation."""

from mssp.schemas.audit_log import (
    AuditLog,
    AuditLogList,
    ChangeHistory,
    ChangeHistoryList,
    DataAccessLog,
    DataAccessLogList,
    DateRange,
    SecurityEvent,
    SecurityEventList,
)
from mssp.schemas.client import (
    Client,
    ClientCreate,
    ClientList,
    ClientUpdate,
)
from mssp.schemas.entity import (
    EntityReference,
    EntitySearchParams,
    EntitySearchResult,
    EntityTypesResponse,
    Relationship,
    RelationshipGroup,
    RelationshipOptions,
    RelationshipStats,
)
from mssp.schemas.error import ErrorCode, ErrorDetail, ErrorResponse

__all__ = [
    # Audit trail
    "AuditLog",
    "AuditLogList",
    "ChangeHistory",
    "ChangeHistoryList",
    "DataAccessLog",
    "DataAccessLogList",
    "DateRange",
    "SecurityEvent",
    "SecurityEventList",
    # Client
    "Client",
    "ClientCreate",
    "ClientList",
    "ClientUpdate",
    # Entity
    "EntityReference",
    "EntitySearchParams",
    "EntitySearchResult",
    "EntityTypesResponse",
    "Relationship",
    "RelationshipGroup",
    "RelationshipOptions",
    "RelationshipStats",
    # Error
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
]
