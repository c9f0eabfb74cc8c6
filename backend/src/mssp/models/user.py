"""User model."""
from sqlalchemy import Boolean, Column, DateTime, String

from mssp.models.base import Base


class User(Base):
    """Application user (local or directory-backed)."""

    __tablename__ = "users"

    username = Column(String, nullable=False, unique=True)
    email = Column(String, nullable=False, unique=True)
    password = Column(String, nullable=True)  # Hash; empty for directory-backed users
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="user")  # admin, manager, engineer, user
    auth_provider = Column(String, nullable=False, default="local")  # local, ldap
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
