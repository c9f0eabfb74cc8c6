"""Base models with common fields for all entities."""
from datetime import datetime
from typing import Any

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy import inspect as sa_inspect

from mssp.database import Base as DeclarativeBase


class SerializableMixin:
    """Column-level dict export shared by business and log models."""

    def to_dict(self) -> dict[str, Any]:
        """Return the mapped column values keyed by attribute name."""
        mapper = sa_inspect(type(self))
        return {attr.key: getattr(self, attr.key) for attr in mapper.column_attrs}


class Base(SerializableMixin, DeclarativeBase):
    """Base model class for business records."""

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class LogBase(SerializableMixin, DeclarativeBase):
    """
    Base model class for append-only log tables.

    Log rows are written once and never updated, so they carry a single
    timestamp instead of created/updated bookkeeping.
    """

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
