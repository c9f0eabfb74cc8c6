"""Append-only audit trail models.

None of these tables hold a foreign key to ``users`` so the trail outlives the
accounts it describes.
"""
from sqlalchemy import Boolean, Column, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB

from mssp.models.base import LogBase


class AuditLog(LogBase):
    """
    Audit log for compliance and security.

    One row per user-visible action (create, update, delete, login, export...).
    """

    __tablename__ = "audit_logs"

    user_id = Column(Integer, nullable=True, index=True)
    action = Column(String, nullable=False)
    entity_type = Column(String, nullable=False, index=True)  # client, contract, service_scope, user
    entity_id = Column(Integer, nullable=True, index=True)
    entity_name = Column(String, nullable=True)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False, index=True)  # data_modification, data_access, authentication, security
    severity = Column(String, nullable=False, default="info")  # info, medium, high, critical
    extra_metadata = Column("metadata", JSONB, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(Text, nullable=True)
    session_id = Column(String, nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<AuditLog(entity_type={self.entity_type}, entity_id={self.entity_id}, action={self.action})>"


class ChangeHistory(LogBase):
    """
    Field-level change history with rollback instructions.

    Updates fan out to one row per changed field, all sharing a batch id.
    """

    __tablename__ = "change_history"

    entity_type = Column(String, nullable=False, index=True)
    entity_id = Column(Integer, nullable=False, index=True)
    entity_name = Column(String, nullable=True)
    user_id = Column(Integer, nullable=False, index=True)
    action = Column(String, nullable=False)  # create, update, delete
    field_name = Column(String, nullable=True)
    old_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    batch_id = Column(String, nullable=True, index=True)
    rollback_data = Column(JSONB, nullable=True)  # {action, entity_type, entity_id, ...}
    automatic_change = Column(Boolean, nullable=False, default=False)
    ip_address = Column(String, nullable=True)
    user_agent = Column(Text, nullable=True)
    session_id = Column(String, nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ChangeHistory(entity_type={self.entity_type}, entity_id={self.entity_id}, "
            f"action={self.action}, field_name={self.field_name})>"
        )


class SecurityEvent(LogBase):
    """Authentication and authorization events."""

    __tablename__ = "security_events"

    user_id = Column(Integer, nullable=True, index=True)
    event_type = Column(String, nullable=False, index=True)  # login_success, login_failure, logout
    source = Column(String, nullable=False)  # web, api, ldap
    success = Column(Boolean, nullable=False)
    failure_reason = Column(String, nullable=True)
    risk_score = Column(Integer, nullable=False, default=0)
    blocked = Column(Boolean, nullable=False, default=False)
    extra_metadata = Column("metadata", JSONB, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(Text, nullable=True)
    session_id = Column(String, nullable=True)


class DataAccessLog(LogBase):
    """Record-level read and export access."""

    __tablename__ = "data_access_logs"

    user_id = Column(Integer, nullable=False, index=True)
    entity_type = Column(String, nullable=False, index=True)
    entity_id = Column(Integer, nullable=True)
    entity_name = Column(String, nullable=True)
    access_type = Column(String, nullable=False)  # view, search, export
    access_method = Column(String, nullable=False)  # web_ui, api, bulk_export
    data_scope = Column(String, nullable=True)  # full, partial, summary
    result_count = Column(Integer, nullable=False, default=1)
    sensitive_data = Column(Boolean, nullable=False, default=False)
    filters = Column(JSONB, nullable=True)
    purpose = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(Text, nullable=True)
    session_id = Column(String, nullable=True)


class SystemEvent(LogBase):
    """Operational events raised by the application itself."""

    __tablename__ = "system_events"

    event_type = Column(String, nullable=False, index=True)
    source = Column(String, nullable=False)
    severity = Column(String, nullable=False)
    category = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    details = Column(JSONB, nullable=True)
