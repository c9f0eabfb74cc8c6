"""Service authorization form and certificate of compliance models."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text

from mssp.models.base import Base


class ServiceAuthorizationForm(Base):
    """
    Service Authorization Form (SAF).

    Approval record authorizing a scope of work under a contract.
    """

    __tablename__ = "service_authorization_forms"

    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=True, index=True)
    saf_number = Column(String, nullable=False, unique=True)
    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    scope = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="pending")  # pending, approved, active, completed, cancelled
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_date = Column(DateTime, nullable=True)
    value = Column(Numeric(12, 2), nullable=True)
    notes = Column(Text, nullable=True)


class CertificateOfCompliance(Base):
    """
    Certificate of Compliance (COC).

    Compliance attestation, optionally traceable to the SAF that authorized the work.
    """

    __tablename__ = "certificates_of_compliance"

    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=True)
    saf_id = Column(Integer, ForeignKey("service_authorization_forms.id"), nullable=True, index=True)
    certificate_number = Column(String, nullable=False, unique=True)
    title = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    compliance_type = Column(String, nullable=True)  # ISO27001, SOC2, PCI-DSS
    status = Column(String, nullable=False, default="active")  # active, expired, revoked
    issue_date = Column(DateTime, nullable=True)
    expiry_date = Column(DateTime, nullable=True)
    issued_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    notes = Column(Text, nullable=True)
