"""Contract, proposal and financial transaction models."""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from mssp.models.base import Base


class Contract(Base):
    """
    Service contract between the MSSP and a client.

    Contains service scopes, proposals and financial transactions.
    """

    __tablename__ = "contracts"

    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    status = Column(String, nullable=False, default="draft")  # draft, active, expired, terminated
    auto_renewal = Column(Boolean, nullable=False, default=False)
    renewal_terms = Column(Text, nullable=True)
    total_value = Column(Numeric(12, 2), nullable=True)
    notes = Column(Text, nullable=True)
    document_url = Column(String, nullable=True)

    # Relationships
    client = relationship("Client", back_populates="contracts")
    service_scopes = relationship("ServiceScope", back_populates="contract")

    def __repr__(self) -> str:
        """String representation."""
        return f"<Contract(id={self.id}, client_id={self.client_id}, status={self.status})>"


class Proposal(Base):
    """Technical or financial proposal attached to a contract."""

    __tablename__ = "proposals"

    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    type = Column(String, nullable=False)  # technical, financial
    status = Column(String, nullable=False, default="draft")
    version = Column(String, nullable=False, default="1.0")
    proposed_value = Column(Numeric(12, 2), nullable=True)
    notes = Column(Text, nullable=True)
    document_url = Column(String, nullable=True)


class FinancialTransaction(Base):
    """Cost or revenue entry, optionally tied to a client, contract or scope."""

    __tablename__ = "financial_transactions"

    type = Column(String, nullable=False)  # revenue, cost
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")
    reference = Column(String, nullable=True)
    category = Column(String, nullable=True)
    transaction_date = Column(DateTime, nullable=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=True, index=True)
    service_scope_id = Column(Integer, ForeignKey("service_scopes.id"), nullable=True)
