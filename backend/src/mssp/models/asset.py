"""Hardware asset and client assignment models."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from mssp.models.base import Base


class HardwareAsset(Base):
    """Physical appliance managed by the MSSP (firewalls, sensors, servers)."""

    __tablename__ = "hardware_assets"

    name = Column(String, nullable=False)
    category = Column(String, nullable=True)
    manufacturer = Column(String, nullable=True)
    model = Column(String, nullable=True)
    serial_number = Column(String, nullable=True, index=True)
    status = Column(String, nullable=False, default="available")  # available, assigned, maintenance, retired
    purchase_date = Column(DateTime, nullable=True)
    purchase_cost = Column(Numeric(12, 2), nullable=True)
    location = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    # Relationships
    assignments = relationship("ClientHardwareAssignment", back_populates="hardware_asset")


class ClientHardwareAssignment(Base):
    """Join table recording which client a hardware asset is deployed at."""

    __tablename__ = "client_hardware_assignments"

    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    hardware_asset_id = Column(Integer, ForeignKey("hardware_assets.id"), nullable=False, index=True)
    service_scope_id = Column(Integer, ForeignKey("service_scopes.id"), nullable=True)
    assigned_date = Column(DateTime, nullable=True)
    returned_date = Column(DateTime, nullable=True)
    installation_location = Column(String, nullable=True)
    status = Column(String, nullable=False, default="active")
    notes = Column(Text, nullable=True)

    # Relationships
    client = relationship("Client", back_populates="hardware_assignments")
    hardware_asset = relationship("HardwareAsset", back_populates="assignments")
