"""
Strongroom auth models.

Pydantic models for users and the authenticated identity.
"""

from datetime import datetime
from typing import FrozenSet, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from ..rbac.catalog import parse_roles
from ..rbac.models import UserStatus

USERNAME_PATTERN = r"^[A-Za-z0-9_-]+$"


class StrongroomUser(BaseModel):
    """
    Strongroom user model - represents a user in the strongroom_users table.

    ``password_hash`` is opaque to the core and never returned by
    ``public_dict``.
    """

    id: UUID
    tenant_id: UUID
    username: str
    password_hash: str = Field(repr=False)
    status: UserStatus = UserStatus.ACTIVE
    roles: FrozenSet[str] = Field(default_factory=frozenset)

    # Timestamps
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "tenant_id": "456e7890-e89b-12d3-a456-426614174000",
                "username": "alice",
                "status": "active",
                "roles": ["Admin"],
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-01T00:00:00Z",
            }
        },
    }

    @field_validator("roles", mode="before")
    @classmethod
    def split_roles(cls, v):
        """Roles may come back from storage as an array or a CSV string."""
        return parse_roles(v)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def public_dict(self) -> dict:
        return self.model_dump(mode="json", exclude={"password_hash"})


class CreateUserRequest(BaseModel):
    """Request model for creating a new user."""

    tenant_id: UUID
    username: str = Field(..., min_length=1, max_length=30, pattern=USERNAME_PATTERN)
    password_hash: str = Field(..., min_length=1, max_length=250)
    roles: FrozenSet[str]

    @field_validator("roles", mode="before")
    @classmethod
    def split_roles(cls, v):
        return parse_roles(v)


class UpdateUserStatusRequest(BaseModel):
    status: UserStatus


class Identity(BaseModel):
    """
    The authenticated caller, resolved from a verified token before the core runs.

    Carries everything TenantScope needs: tenant, whether that tenant is the
    system-admin tenant, the role set and the account status.
    """

    user_id: UUID
    tenant_id: UUID
    is_system_admin_tenant: bool = False
    roles: FrozenSet[str] = Field(default_factory=frozenset)
    status: UserStatus = UserStatus.ACTIVE
    username: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("roles", mode="before")
    @classmethod
    def split_roles(cls, v):
        return parse_roles(v)

    @classmethod
    def for_user(cls, user: StrongroomUser, is_system_admin_tenant: bool) -> "Identity":
        return cls(
            user_id=user.id,
            tenant_id=user.tenant_id,
            is_system_admin_tenant=is_system_admin_tenant,
            roles=user.roles,
            status=user.status,
            username=user.username,
        )
