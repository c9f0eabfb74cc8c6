"""Document model."""
from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text

from mssp.models.base import Base


class Document(Base):
    """Uploaded file metadata, optionally attached to a client or contract."""

    __tablename__ = "documents"

    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    document_type = Column(String, nullable=False)  # contract, proposal, report, compliance
    file_name = Column(String, nullable=False)
    file_path = Column(String, nullable=False)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=True, index=True)
    uploaded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
