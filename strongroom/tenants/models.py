"""
Strongroom tenant models.

Pydantic models for tenants (organizations / clients).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..rbac.models import UserStatus


class StrongroomTenant(BaseModel):
    """
    Strongroom tenant model - represents a tenant in the strongroom_tenants table.

    Tenants are the isolation boundary: users and vaults belong to exactly one.
    The system-admin tenant is marked by ``is_system_admin_tenant`` rather than
    by a well-known id.
    """

    id: UUID
    name: str
    is_system_admin_tenant: bool = False

    # Status
    status: UserStatus = UserStatus.ACTIVE

    # Timestamps
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "name": "Acme Corp",
                "is_system_admin_tenant": False,
                "status": "active",
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-01T00:00:00Z",
            }
        },
    }

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @property
    def hex_id(self) -> str:
        return self.id.hex


class CreateTenantRequest(BaseModel):
    """Request model for creating a new tenant."""

    name: str = Field(..., min_length=1, max_length=50)


class UpdateTenantRequest(BaseModel):
    """Request model for updating an existing tenant."""

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    status: Optional[UserStatus] = None
