"""Audit trail writers and change tracking.

Every audit row is written through an ``AuditSink``, which opens its own
session and commits on its own. Business transactions never see audit writes,
and a failed audit write is logged and dropped instead of propagating.
"""
import json
import random
import string
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from mssp.config import settings
from mssp.database import AuditSessionLocal
from mssp.metrics import audit_entries_written_total, audit_write_failures_total
from mssp.models.audit_log import AuditLog, ChangeHistory, DataAccessLog, SecurityEvent, SystemEvent

logger = structlog.get_logger(__name__)

SESSION_COOKIE = "session_id"
SESSION_HEADER = "x-session-id"

# Bookkeeping fields never reported as changes
DEFAULT_IGNORED_FIELDS = frozenset({"id", "created_at", "updated_at", "createdAt", "updatedAt"})

_BATCH_ALPHABET = string.ascii_lowercase + string.digits
_MISSING = object()


@dataclass
class RequestContext:
    """Client information attached to every audit row written for a request."""

    ip_address: str = "unknown"
    user_agent: str = "unknown"
    session_id: Optional[str] = None
    request_id: Optional[str] = None
    user_id: Optional[int] = None

    @classmethod
    def from_request(cls, request: Request, user_id: Optional[int] = None) -> "RequestContext":
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            ip_address = forwarded.split(",")[0].strip()
        elif request.client and request.client.host:
            ip_address = request.client.host
        else:
            ip_address = "unknown"

        return cls(
            ip_address=ip_address or "unknown",
            user_agent=request.headers.get("user-agent") or "unknown",
            session_id=request.cookies.get(SESSION_COOKIE) or request.headers.get(SESSION_HEADER),
            request_id=getattr(request.state, "request_id", None),
            user_id=user_id,
        )

    def client_info(self) -> dict[str, Any]:
        """Columns shared by every request-scoped audit table."""
        return {
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "session_id": self.session_id,
        }


def generate_batch_id() -> str:
    """Return a batch id of the form ``batch_{epoch_ms}_{9 random chars}``."""
    suffix = "".join(random.choices(_BATCH_ALPHABET, k=9))
    return f"batch_{int(time.time() * 1000)}_{suffix}"


def _json_safe(value: Any) -> Any:
    """Coerce nested dates, decimals and other objects into JSON primitives."""
    if value is None:
        return None
    return json.loads(json.dumps(value, default=str))


def _stringify(value: Any) -> str:
    """Render a field value for the text columns of change history."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


class AuditSink:
    """
    Writes audit rows in dedicated sessions.

    Args:
        session_factory: Callable returning an ``AsyncSession`` context manager.
            Defaults to ``AuditSessionLocal``, which has its own pool.
    """

    def __init__(self, session_factory: Optional[Callable[[], AsyncSession]] = None):
        self.session_factory = session_factory or AuditSessionLocal

    async def record(self, model: Any, values: dict[str, Any]) -> bool:
        """
        Insert one audit row and commit it immediately.

        Never raises. Returns False when the write was dropped.
        """
        table = model.__tablename__

        try:
            columns = dict(values)
            if "metadata" in columns:
                columns["extra_metadata"] = columns.pop("metadata")
            for key in ("extra_metadata", "rollback_data", "filters", "details"):
                if key in columns:
                    columns[key] = _json_safe(columns[key])

            row = model(**columns)
            async with self.session_factory() as session:
                session.add(row)
                await session.commit()
        except Exception as e:
            audit_write_failures_total.labels(table=table).inc()
            logger.error("audit_write_failed", table=table, error=str(e))
            return False

        audit_entries_written_total.labels(table=table).inc()
        return True


audit_sink = AuditSink()


def _merge(defaults: dict[str, Any], fields: dict[str, Any], context: Optional[RequestContext]) -> dict[str, Any]:
    values = {**defaults, **fields}
    if context is not None:
        values.update(context.client_info())
    return values


async def log_audit(
    action: str,
    entity_type: str,
    description: str,
    category: str,
    context: Optional[RequestContext] = None,
    sink: Optional[AuditSink] = None,
    **fields: Any,
) -> bool:
    """
    Log an audit entry.

    Args:
        action: Action performed (create, update, delete, login, export...)
        entity_type: Type of entity acted upon
        description: Human-readable summary
        category: data_modification, data_access, authentication or security
        context: Request client info; overrides matching fields
        sink: Destination sink (module default when omitted)
        **fields: Any other ``AuditLog`` column (user_id, entity_id, severity, metadata...)
    """
    values = _merge(
        {"severity": "info"},
        {"action": action, "entity_type": entity_type, "description": description, "category": category, **fields},
        context,
    )
    return await (sink or audit_sink).record(AuditLog, values)


async def log_security_event(
    event_type: str,
    source: str,
    success: bool,
    context: Optional[RequestContext] = None,
    sink: Optional[AuditSink] = None,
    **fields: Any,
) -> bool:
    """Log an authentication or authorization event."""
    values = _merge(
        {"risk_score": 0, "blocked": False},
        {"event_type": event_type, "source": source, "success": success, **fields},
        context,
    )
    return await (sink or audit_sink).record(SecurityEvent, values)


async def log_data_access(
    user_id: int,
    entity_type: str,
    access_type: str,
    access_method: str,
    context: Optional[RequestContext] = None,
    sink: Optional[AuditSink] = None,
    **fields: Any,
) -> bool:
    """Log a record view, search or export."""
    values = _merge(
        {"sensitive_data": False, "result_count": 1},
        {
            "user_id": user_id,
            "entity_type": entity_type,
            "access_type": access_type,
            "access_method": access_method,
            **fields,
        },
        context,
    )
    return await (sink or audit_sink).record(DataAccessLog, values)


async def log_change(
    entity_type: str,
    entity_id: int,
    user_id: int,
    action: str,
    context: Optional[RequestContext] = None,
    sink: Optional[AuditSink] = None,
    **fields: Any,
) -> bool:
    """Log one change history row, carrying the data needed to reverse it."""
    values = _merge(
        {"automatic_change": False},
        {"entity_type": entity_type, "entity_id": entity_id, "user_id": user_id, "action": action, **fields},
        context,
    )
    return await (sink or audit_sink).record(ChangeHistory, values)


async def log_system_event(
    event_type: str,
    source: str,
    severity: str,
    category: str,
    description: str,
    sink: Optional[AuditSink] = None,
    **fields: Any,
) -> bool:
    """Log an operational event. System events carry no request context."""
    values = {
        "event_type": event_type,
        "source": source,
        "severity": severity,
        "category": category,
        "description": description,
        **fields,
    }
    return await (sink or audit_sink).record(SystemEvent, values)


@dataclass(frozen=True)
class FieldChange:
    """One changed field between two snapshots of a record."""

    field: str
    old_value: Any
    new_value: Any


def detect_changes(
    old: Optional[dict[str, Any]],
    new: Optional[dict[str, Any]],
    ignore_fields: frozenset[str] | set[str] = DEFAULT_IGNORED_FIELDS,
) -> list[FieldChange]:
    """
    Compare two snapshots of a record field by field.

    Values are compared by their JSON serialization, so nested dicts and lists
    compare structurally. A key present on one side only counts as a change,
    even when the other side holds None. Keys are reported in first-seen order
    (old keys, then keys only in new).
    """
    old = old or {}
    new = new or {}

    changes = []
    for key in dict.fromkeys([*old.keys(), *new.keys()]):
        if key in ignore_fields:
            continue

        old_value = old.get(key, _MISSING)
        new_value = new.get(key, _MISSING)
        if old_value is _MISSING or new_value is _MISSING:
            if old_value is new_value:
                continue
        elif json.dumps(old_value, sort_keys=True, default=str) == json.dumps(new_value, sort_keys=True, default=str):
            continue

        changes.append(
            FieldChange(
                field=key,
                old_value=None if old_value is _MISSING else old_value,
                new_value=None if new_value is _MISSING else new_value,
            )
        )

    return changes


class AuditLogger:
    """
    Request-scoped audit helper for user-initiated operations.

    Every row written through one logger shares its batch id, so a single
    user operation can be reviewed and rolled back as a unit. Methods are
    no-ops when no user id is known, except failed logins which are always
    recorded as security events.
    """

    def __init__(
        self,
        context: Optional[RequestContext] = None,
        user_id: Optional[int] = None,
        sink: Optional[AuditSink] = None,
        batch_id: Optional[str] = None,
    ):
        self.context = context
        if user_id is None and context is not None:
            user_id = context.user_id
        self.user_id = user_id
        self.sink = sink or audit_sink
        self.batch_id = batch_id or generate_batch_id()

    def set_batch_id(self, batch_id: str) -> "AuditLogger":
        self.batch_id = batch_id
        return self

    async def _audit(self, **values: Any) -> bool:
        return await log_audit(context=self.context, sink=self.sink, user_id=self.user_id, **values)

    async def _change(self, **values: Any) -> bool:
        return await log_change(context=self.context, sink=self.sink, user_id=self.user_id, batch_id=self.batch_id, **values)

    async def log_create(self, entity_type: str, entity_id: int, entity_name: str, data: Any = None) -> None:
        if not self.user_id:
            return

        await self._audit(
            action="create",
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            description=f"Created {entity_type}: {entity_name}",
            category="data_modification",
            severity="info",
            metadata={"created_data": data},
        )
        await self._change(
            entity_type=entity_type,
            entity_id=entity_id,
            action="create",
            entity_name=entity_name,
            new_value=json.dumps(data, default=str),
            rollback_data={"action": "delete", "entity_type": entity_type, "entity_id": entity_id},
        )

    async def log_update(
        self,
        entity_type: str,
        entity_id: int,
        entity_name: str,
        changes: list[FieldChange],
        full_old_data: Any = None,
    ) -> None:
        """
        Log an update as one summary audit row plus one change row per field.

        Each change row carries enough data to restore that field's old value.
        """
        if not self.user_id or not changes:
            return

        await self._audit(
            action="update",
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            description=f"Updated {entity_type}: {entity_name} ({len(changes)} fields changed)",
            category="data_modification",
            severity="info",
            metadata={"fields_changed": [change.field for change in changes]},
        )

        for change in changes:
            await self._change(
                entity_type=entity_type,
                entity_id=entity_id,
                action="update",
                entity_name=entity_name,
                field_name=change.field,
                old_value=_stringify(change.old_value),
                new_value=_stringify(change.new_value),
                rollback_data={
                    "action": "update",
                    "entity_type": entity_type,
                    "entity_id": entity_id,
                    "field": change.field,
                    "value": change.old_value,
                    "full_data": full_old_data,
                },
            )

    async def log_delete(self, entity_type: str, entity_id: int, entity_name: str, deleted_data: Any = None) -> None:
        """Log a deletion; the change row holds the full record for re-creation."""
        if not self.user_id:
            return

        await self._audit(
            action="delete",
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            description=f"Deleted {entity_type}: {entity_name}",
            category="data_modification",
            severity="medium",
            metadata={"deleted_data": deleted_data},
        )
        await self._change(
            entity_type=entity_type,
            entity_id=entity_id,
            action="delete",
            entity_name=entity_name,
            old_value=json.dumps(deleted_data, default=str),
            rollback_data={"action": "create", "entity_type": entity_type, "data": deleted_data},
        )

    async def log_view(
        self,
        entity_type: str,
        entity_id: Optional[int] = None,
        entity_name: Optional[str] = None,
        scope: str = "full",
        result_count: int = 1,
    ) -> None:
        if not self.user_id:
            return

        await log_data_access(
            user_id=self.user_id,
            entity_type=entity_type,
            access_type="view",
            access_method="web_ui",
            context=self.context,
            sink=self.sink,
            entity_id=entity_id,
            entity_name=entity_name,
            data_scope=scope,
            result_count=result_count,
            sensitive_data=entity_type in settings.sensitive_entity_types,
        )

    async def log_bulk_operation(self, operation: str, entity_type: str, count: int, description: str) -> None:
        if not self.user_id:
            return

        await self._audit(
            action=operation,
            entity_type=entity_type,
            description=f"{description} ({count} records)",
            category="data_modification",
            severity="medium" if count > 10 else "info",
            metadata={"bulk_operation": True, "record_count": count, "batch_id": self.batch_id},
        )

    async def log_export(self, entity_type: str, export_format: str, count: int, filters: Any = None) -> None:
        if not self.user_id:
            return

        await self._audit(
            action="export",
            entity_type=entity_type,
            description=f"Exported {count} {entity_type} records to {export_format}",
            category="data_access",
            severity="medium",
            metadata={"export_format": export_format, "record_count": count, "filters": filters},
        )
        await log_data_access(
            user_id=self.user_id,
            entity_type=entity_type,
            access_type="export",
            access_method="bulk_export",
            context=self.context,
            sink=self.sink,
            data_scope="full",
            result_count=count,
            filters=filters,
            sensitive_data=True,
            purpose="Data export for business purposes",
        )

    async def log_permission_change(self, target_user_id: int, permission: str, granted: bool) -> None:
        if not self.user_id:
            return

        await self._audit(
            action="grant_permission" if granted else "revoke_permission",
            entity_type="user",
            entity_id=target_user_id,
            description=f"{'Granted' if granted else 'Revoked'} permission: {permission}",
            category="security",
            severity="high",
            metadata={"permission": permission, "granted": granted},
        )

    async def log_login(self, success: bool, failure_reason: Optional[str] = None) -> None:
        """Record a login attempt; failures score a risk of 25."""
        await log_security_event(
            event_type="login_success" if success else "login_failure",
            source="web",
            success=success,
            context=self.context,
            sink=self.sink,
            user_id=self.user_id,
            failure_reason=failure_reason,
            risk_score=0 if success else 25,
        )

        if success and self.user_id:
            await self._audit(
                action="login",
                entity_type="user",
                entity_id=self.user_id,
                description="User logged in successfully",
                category="authentication",
                severity="info",
            )

    async def log_logout(self) -> None:
        if not self.user_id:
            return

        await log_security_event(
            event_type="logout",
            source="web",
            success=True,
            context=self.context,
            sink=self.sink,
            user_id=self.user_id,
            risk_score=0,
        )
        await self._audit(
            action="logout",
            entity_type="user",
            entity_id=self.user_id,
            description="User logged out",
            category="authentication",
            severity="info",
        )
