"""Audit trail API endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mssp.api.deps import get_audit_db, get_current_user
from mssp.schemas.audit_log import (
    AuditLogList,
    ChangeHistoryList,
    DataAccessLogList,
    DateRange,
    SecurityEventList,
)
from mssp.services.audit_trail_service import AuditTrailService, range_start

router = APIRouter(prefix="/audit", tags=["Audit"], dependencies=[Depends(get_current_user)])


@router.get("/logs", response_model=AuditLogList)
async def list_audit_logs(
    entity_type: str | None = None,
    entity_id: int | None = None,
    category: str | None = None,
    date_range: DateRange = DateRange.LAST_WEEK,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
    db: AsyncSession = Depends(get_audit_db),
) -> AuditLogList:
    """
    List audit log entries, newest first.

    - **entity_type** / **entity_id**: Restrict to one entity or entity type
    - **category**: data_modification, data_access, authentication or security
    - **date_range**: 1d, 7d, 30d or 90d (default 7d)
    """
    service = AuditTrailService(db)
    rows, total = await service.list_audit_logs(
        entity_type, entity_id, category, page, page_size, since=range_start(date_range)
    )
    return AuditLogList(items=rows, total=total, page=page, page_size=page_size)


@router.get("/change-history", response_model=ChangeHistoryList)
async def list_change_history(
    entity_type: str | None = None,
    entity_id: int | None = None,
    batch_id: str | None = None,
    date_range: DateRange = DateRange.LAST_WEEK,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
    db: AsyncSession = Depends(get_audit_db),
) -> ChangeHistoryList:
    """
    List field-level change history, newest first.

    - **batch_id**: Every change made by one user operation
    """
    service = AuditTrailService(db)
    rows, total = await service.list_change_history(
        entity_type, entity_id, batch_id, page, page_size, since=range_start(date_range)
    )
    return ChangeHistoryList(items=rows, total=total, page=page, page_size=page_size)


@router.get("/security-events", response_model=SecurityEventList)
async def list_security_events(
    user_id: int | None = None,
    event_type: str | None = None,
    date_range: DateRange = DateRange.LAST_WEEK,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
    db: AsyncSession = Depends(get_audit_db),
) -> SecurityEventList:
    """List login, logout and other security events, newest first."""
    service = AuditTrailService(db)
    rows, total = await service.list_security_events(
        user_id, event_type, page, page_size, since=range_start(date_range)
    )
    return SecurityEventList(items=rows, total=total, page=page, page_size=page_size)


@router.get("/data-access", response_model=DataAccessLogList)
async def list_data_access_logs(
    user_id: int | None = None,
    entity_type: str | None = None,
    entity_id: int | None = None,
    sensitive_only: bool = False,
    date_range: DateRange = DateRange.LAST_WEEK,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
    db: AsyncSession = Depends(get_audit_db),
) -> DataAccessLogList:
    """
    List record views and exports, newest first.

    - **sensitive_only**: Only access to sensitive entity types
    """
    service = AuditTrailService(db)
    rows, total = await service.list_data_access_logs(
        user_id, entity_type, entity_id, sensitive_only, page, page_size, since=range_start(date_range)
    )
    return DataAccessLogList(items=rows, total=total, page=page, page_size=page_size)
