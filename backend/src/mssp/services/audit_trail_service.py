"""Read-only queries over the audit trail tables."""
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mssp.models.audit_log import AuditLog, ChangeHistory, DataAccessLog, SecurityEvent
from mssp.schemas.audit_log import DateRange


def range_start(date_range: DateRange, now: datetime | None = None) -> datetime:
    """Start of a listing window, counted back from ``now``."""
    now = now or datetime.utcnow()
    return now - timedelta(days=date_range.days)


class AuditTrailService:
    """Service layer for browsing audit logs, change history, security events and data access."""

    def __init__(self, db: AsyncSession):
        """Initialize audit trail service with an audit database session."""
        self.db = db

    async def _paginate(
        self, query: Select, model: Any, since: datetime | None, page: int, page_size: int
    ) -> tuple[list[Any], int]:
        if since is not None:
            query = query.where(model.timestamp >= since)

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.db.scalar(count_query)

        query = query.order_by(model.timestamp.desc(), model.id.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await self.db.execute(query)
        return list(result.scalars().all()), total or 0

    async def list_audit_logs(
        self,
        entity_type: str | None = None,
        entity_id: int | None = None,
        category: str | None = None,
        page: int = 1,
        page_size: int = 50,
        since: datetime | None = None,
    ) -> tuple[list[AuditLog], int]:
        """
        List audit log rows, newest first.

        Args:
            since: Only rows at or after this time

        Returns:
            Tuple of (rows, total_count)
        """
        query = select(AuditLog)
        if entity_type:
            query = query.where(AuditLog.entity_type == entity_type)
        if entity_id is not None:
            query = query.where(AuditLog.entity_id == entity_id)
        if category:
            query = query.where(AuditLog.category == category)

        return await self._paginate(query, AuditLog, since, page, page_size)

    async def list_change_history(
        self,
        entity_type: str | None = None,
        entity_id: int | None = None,
        batch_id: str | None = None,
        page: int = 1,
        page_size: int = 50,
        since: datetime | None = None,
    ) -> tuple[list[ChangeHistory], int]:
        """
        List change history rows, newest first.

        Filtering by ``batch_id`` returns every row of one user operation.
        """
        query = select(ChangeHistory)
        if entity_type:
            query = query.where(ChangeHistory.entity_type == entity_type)
        if entity_id is not None:
            query = query.where(ChangeHistory.entity_id == entity_id)
        if batch_id:
            query = query.where(ChangeHistory.batch_id == batch_id)

        return await self._paginate(query, ChangeHistory, since, page, page_size)

    async def list_security_events(
        self,
        user_id: int | None = None,
        event_type: str | None = None,
        page: int = 1,
        page_size: int = 50,
        since: datetime | None = None,
    ) -> tuple[list[SecurityEvent], int]:
        query = select(SecurityEvent)
        if user_id is not None:
            query = query.where(SecurityEvent.user_id == user_id)
        if event_type:
            query = query.where(SecurityEvent.event_type == event_type)

        return await self._paginate(query, SecurityEvent, since, page, page_size)

    async def list_data_access_logs(
        self,
        user_id: int | None = None,
        entity_type: str | None = None,
        entity_id: int | None = None,
        sensitive_only: bool = False,
        page: int = 1,
        page_size: int = 50,
        since: datetime | None = None,
    ) -> tuple[list[DataAccessLog], int]:
        """List record views and exports, newest first."""
        query = select(DataAccessLog)
        if user_id is not None:
            query = query.where(DataAccessLog.user_id == user_id)
        if entity_type:
            query = query.where(DataAccessLog.entity_type == entity_type)
        if entity_id is not None:
            query = query.where(DataAccessLog.entity_id == entity_id)
        if sensitive_only:
            query = query.where(DataAccessLog.sensitive_data.is_(True))

        return await self._paginate(query, DataAccessLog, since, page, page_size)
