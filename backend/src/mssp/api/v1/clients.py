"""Client API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mssp.api.deps import get_audit_logger, get_db
from mssp.schemas.client import Client, ClientCreate, ClientList, ClientUpdate
from mssp.services.client_service import ClientService
from mssp.utils.audit import AuditLogger

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    client_data: ClientCreate,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
) -> Client:
    """
    Create a new client.

    - **name**: Organization name (required, unique among active clients)
    - **status**: Lifecycle state (default: active)
    """
    service = ClientService(db, audit)

    try:
        client = await service.create_client(client_data)
        await db.commit()
        return client
    except ValueError as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.get("/{client_id}", response_model=Client)
async def get_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
) -> Client:
    """Get client by ID."""
    service = ClientService(db, audit)
    client = await service.get_client(client_id)

    if not client:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Client {client_id} not found",
        )

    await audit.log_view("client", client.id, client.name)

    return client


@router.get("", response_model=ClientList)
async def list_clients(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=100, ge=1, le=1000),
    status_filter: str | None = None,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
) -> ClientList:
    """
    List clients with pagination. Archived clients are excluded.

    - **page**: Page number (1-indexed, default: 1)
    - **page_size**: Items per page (default: 100, max: 1000)
    - **status_filter**: Filter by client status (optional)
    """
    service = ClientService(db, audit)
    clients, total = await service.list_clients(page, page_size, status_filter)

    await audit.log_view("client", scope="summary", result_count=len(clients))

    return ClientList(items=clients, total=total, page=page, page_size=page_size)


@router.patch("/{client_id}", response_model=Client)
async def update_client(
    client_id: int,
    update_data: ClientUpdate,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
) -> Client:
    """
    Update client.

    Only provided fields will be updated. All fields are optional.
    """
    service = ClientService(db, audit)

    try:
        client = await service.update_client(client_id, update_data)
        await db.commit()
        return client
    except ValueError as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: int,
    db: AsyncSession = Depends(get_db),
    audit: AuditLogger = Depends(get_audit_logger),
) -> None:
    """
    Delete client (soft delete).

    The client is archived and the full record is kept in the change history.
    """
    service = ClientService(db, audit)

    try:
        await service.delete_client(client_id)
        await db.commit()
    except ValueError as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
