"""Client service for business logic."""
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mssp.metrics import clients_archived_total, clients_created_total
from mssp.models.client import Client, ClientStatus
from mssp.schemas.client import ClientCreate, ClientUpdate
from mssp.utils.audit import AuditLogger, detect_changes

logger = structlog.get_logger(__name__)


class ClientService:
    """Service layer for client operations with audit trail."""

    def __init__(self, db: AsyncSession, audit: Optional[AuditLogger] = None):
        """Initialize client service with database session and request audit logger."""
        self.db = db
        self.audit = audit or AuditLogger()

    async def create_client(self, client_data: ClientCreate) -> Client:
        """
        Create a new client.

        Args:
            client_data: Client creation data

        Returns:
            Created client

        Raises:
            ValueError: If a non-archived client with the same name exists
        """
        existing = await self.get_client_by_name(client_data.name)
        if existing:
            raise ValueError(f"Client with name {client_data.name} already exists")

        client = Client(**client_data.model_dump())

        self.db.add(client)
        await self.db.flush()
        await self.db.refresh(client)

        clients_created_total.inc()
        logger.info("client_created", client_id=client.id)

        await self.audit.log_create("client", client.id, client.name, client.to_dict())

        return client

    async def get_client(self, client_id: int) -> Client | None:
        """
        Get client by ID.

        Args:
            client_id: Client primary key

        Returns:
            Client or None if not found or archived
        """
        result = await self.db.execute(
            select(Client).where(Client.id == client_id, Client.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get_client_by_name(self, name: str) -> Client | None:
        result = await self.db.execute(
            select(Client).where(Client.name == name, Client.deleted_at.is_(None)).limit(1)
        )
        return result.scalar_one_or_none()

    async def list_clients(
        self,
        page: int = 1,
        page_size: int = 100,
        status: str | None = None,
    ) -> tuple[list[Client], int]:
        """
        List clients with pagination.

        Args:
            page: Page number (1-indexed)
            page_size: Items per page
            status: Filter by status (optional)

        Returns:
            Tuple of (clients, total_count)
        """
        query = select(Client).where(Client.deleted_at.is_(None))

        if status:
            query = query.where(Client.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.db.scalar(count_query)

        query = query.order_by(Client.name, Client.id)
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await self.db.execute(query)
        clients = result.scalars().all()

        return list(clients), total or 0

    async def update_client(self, client_id: int, update_data: ClientUpdate) -> Client:
        """
        Update client.

        Only fields whose value actually changed are written to the change
        history; an update that changes nothing leaves no audit trail.

        Raises:
            ValueError: If client not found
        """
        client = await self.get_client(client_id)
        if not client:
            raise ValueError(f"Client {client_id} not found")

        old_data = client.to_dict()

        for field, value in update_data.model_dump(exclude_unset=True).items():
            setattr(client, field, value)

        changes = detect_changes(old_data, client.to_dict())
        if not changes:
            return client

        await self.db.flush()
        await self.db.refresh(client)

        logger.info("client_updated", client_id=client.id, fields=[change.field for change in changes])

        await self.audit.log_update("client", client.id, client.name, changes, old_data)

        return client

    async def delete_client(self, client_id: int) -> Client:
        """
        Soft delete client.

        The full row is captured before archiving so the change history can
        re-create it.

        Raises:
            ValueError: If client not found
        """
        client = await self.get_client(client_id)
        if not client:
            raise ValueError(f"Client {client_id} not found")

        deleted_data = client.to_dict()

        client.status = ClientStatus.ARCHIVED
        client.deleted_at = datetime.utcnow()

        await self.db.flush()

        clients_archived_total.inc()
        logger.info("client_archived", client_id=client.id)

        await self.audit.log_delete("client", client.id, client.name, deleted_data)

        return client
