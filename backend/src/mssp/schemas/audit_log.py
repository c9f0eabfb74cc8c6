"""Pydantic schemas for audit trail listings."""
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DateRange(str, Enum):
    """Time windows accepted by the audit listings."""

    LAST_DAY = "1d"
    LAST_WEEK = "7d"
    LAST_MONTH = "30d"
    LAST_QUARTER = "90d"

    @property
    def days(self) -> int:
        return int(self.value[:-1])


class AuditLog(BaseModel):
    """One audit log row."""

    id: int
    timestamp: datetime
    user_id: int | None = None
    action: str
    entity_type: str
    entity_id: int | None = None
    entity_name: str | None = None
    description: str
    category: str
    severity: str
    metadata: dict[str, Any] | None = Field(
        default=None, validation_alias="extra_metadata", description="Action-specific payload"
    )
    ip_address: str | None = None
    user_agent: str | None = None
    session_id: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ChangeHistory(BaseModel):
    """One change history row with its rollback instructions."""

    id: int
    timestamp: datetime
    entity_type: str
    entity_id: int
    entity_name: str | None = None
    user_id: int
    action: str
    field_name: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    batch_id: str | None = None
    rollback_data: dict[str, Any] | None = None
    automatic_change: bool = False

    model_config = ConfigDict(from_attributes=True)


class SecurityEvent(BaseModel):
    """One security event row."""

    id: int
    timestamp: datetime
    user_id: int | None = None
    event_type: str
    source: str
    success: bool
    failure_reason: str | None = None
    risk_score: int = 0
    blocked: bool = False
    ip_address: str | None = None
    user_agent: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AuditLogList(BaseModel):
    """Paginated audit log listing."""

    items: list[AuditLog]
    total: int
    page: int
    page_size: int


class ChangeHistoryList(BaseModel):
    """Paginated change history listing."""

    items: list[ChangeHistory]
    total: int
    page: int
    page_size: int


class SecurityEventList(BaseModel):
    """Paginated security event listing."""

    items: list[SecurityEvent]
    total: int
    page: int
    page_size: int


class DataAccessLog(BaseModel):
    """One record-level read or export."""

    id: int
    timestamp: datetime
    user_id: int
    entity_type: str
    entity_id: int | None = None
    entity_name: str | None = None
    access_type: str
    access_method: str
    data_scope: str | None = None
    result_count: int = 1
    sensitive_data: bool = False
    filters: dict[str, Any] | None = None
    purpose: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    model_config = ConfigDict(from_attributes=True)


class DataAccessLogList(BaseModel):
    """Paginated data access listing."""

    items: list[DataAccessLog]
    total: int
    page: int
    page_size: int
