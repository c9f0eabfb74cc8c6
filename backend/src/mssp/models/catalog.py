"""Service catalog and license pool models."""
from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text

from mssp.models.base import Base


class Service(Base):
    """Catalog entry describing a sellable managed service."""

    __tablename__ = "services"

    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    delivery_model = Column(String, nullable=False, default="serverless")
    base_price = Column(Numeric(12, 2), nullable=True)
    pricing_unit = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class LicensePool(Base):
    """Vendor license inventory allocated to clients."""

    __tablename__ = "license_pools"

    name = Column(String, nullable=False)
    vendor = Column(String, nullable=False)
    product_name = Column(String, nullable=False)
    license_type = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    total_licenses = Column(Integer, nullable=False, default=0)
    available_licenses = Column(Integer, nullable=False, default=0)
    cost_per_license = Column(Numeric(12, 2), nullable=True)
    status = Column(String, nullable=False, default="active")
    ordered_date = Column(DateTime, nullable=True)
    expiry_date = Column(DateTime, nullable=True)
