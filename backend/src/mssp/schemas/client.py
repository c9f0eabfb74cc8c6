"""Pydantic schemas for Client model."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class ClientBase(BaseModel):
    """Base client schema with common fields."""

    name: str = Field(..., min_length=1, max_length=255, description="Organization name")
    short_name: str | None = Field(default=None, max_length=64, description="Abbreviation used in reports")
    domain: str | None = Field(default=None, description="Primary email/web domain")
    industry: str | None = Field(default=None, description="Industry vertical")
    company_size: str | None = Field(default=None, description="Headcount band (e.g. 50-100)")
    source: str | None = Field(default=None, description="Acquisition source (direct, nable, referral)")
    address: str | None = None
    website: str | None = None
    description: str | None = None
    contact_email: EmailStr | None = Field(default=None, description="Primary contact email")
    contact_phone: str | None = None


class ClientCreate(ClientBase):
    """Schema for creating a new client."""

    status: str = Field(default="active", description="prospect, pending, active or inactive")

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "Acme Corporation",
                    "short_name": "ACME",
                    "industry": "Manufacturing",
                    "company_size": "100-500",
                    "contact_email": "security@acme.example",
                },
                {
                    "name": "Northwind Health",
                    "industry": "Healthcare",
                    "status": "prospect",
                },
            ]
        }
    )


class ClientUpdate(BaseModel):
    """Schema for updating a client (all fields optional)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    short_name: str | None = Field(default=None, max_length=64)
    domain: str | None = None
    industry: str | None = None
    company_size: str | None = None
    status: str | None = None
    source: str | None = None
    address: str | None = None
    website: str | None = None
    description: str | None = None
    contact_email: EmailStr | None = None
    contact_phone: str | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"industry": "Finance"},
                {"status": "inactive", "description": "Contract lapsed"},
            ]
        }
    )


class Client(ClientBase):
    """Schema for returning client data."""

    id: int
    status: str
    deleted_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    # Stored rows may predate email validation
    contact_email: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ClientList(BaseModel):
    """Schema for paginated client list."""

    items: list[Client]
    total: int
    page: int
    page_size: int
