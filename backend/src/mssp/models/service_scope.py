"""Service scope model."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from mssp.models.base import Base


class ServiceScope(Base):
    """
    Unit of delivered service inside a contract.

    A scope may be authorized by a service authorization form.
    """

    __tablename__ = "service_scopes"

    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=True)
    saf_id = Column(Integer, ForeignKey("service_authorization_forms.id"), nullable=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="active")
    scope_definition = Column(JSONB, nullable=False, default=dict)  # Dynamic field values from the service template
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    monthly_value = Column(Numeric(12, 2), nullable=True)

    # Relationships
    contract = relationship("Contract", back_populates="service_scopes")
