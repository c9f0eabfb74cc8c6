"""SQLAlchemy ORM models for the MSSP client manager."""
# Import all models here to ensure they are registered with Alembic

from mssp.models.base import Base, LogBase
from mssp.models.user import User
from mssp.models.client import Client, ClientStatus
from mssp.models.catalog import Service, LicensePool
from mssp.models.contract import Contract, Proposal, FinancialTransaction
from mssp.models.compliance import ServiceAuthorizationForm, CertificateOfCompliance
from mssp.models.service_scope import ServiceScope
from mssp.models.asset import HardwareAsset, ClientHardwareAssignment
from mssp.models.document import Document
from mssp.models.audit_log import AuditLog, ChangeHistory, SecurityEvent, DataAccessLog, SystemEvent

__all__ = [
    "Base",
    "LogBase",
    "User",
    "Client",
    "ClientStatus",
    "Service",
    "LicensePool",
    "Contract",
    "Proposal",
    "FinancialTransaction",
    "ServiceAuthorizationForm",
    "CertificateOfCompliance",
    "ServiceScope",
    "HardwareAsset",
    "ClientHardwareAssignment",
    "Document",
    "AuditLog",
    "ChangeHistory",
    "SecurityEvent",
    "DataAccessLog",
    "SystemEvent",
]
