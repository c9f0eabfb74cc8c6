"""Client model for managed security customers."""
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import relationship

from mssp.models.base import Base


class ClientStatus:
    """Client lifecycle states."""

    PROSPECT = "prospect"
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class Client(Base):
    """
    Customer organization receiving managed security services.

    Owns contracts, assigned hardware, SAFs and compliance certificates.
    """

    __tablename__ = "clients"

    name = Column(String, nullable=False, index=True)
    short_name = Column(String, nullable=True)
    domain = Column(String, nullable=True)
    industry = Column(String, nullable=True)
    company_size = Column(String, nullable=True)
    status = Column(String, nullable=False, default=ClientStatus.ACTIVE, index=True)
    source = Column(String, nullable=True)  # direct, nable, referral
    address = Column(Text, nullable=True)
    website = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    contact_email = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    deleted_at = Column(DateTime, nullable=True)  # Soft delete timestamp

    # Relationships
    contracts = relationship("Contract", back_populates="client")
    hardware_assignments = relationship("ClientHardwareAssignment", back_populates="client")

    def __repr__(self) -> str:
        """String representation."""
        return f"<Client(id={self.id}, name={self.name}, status={self.status})>"
