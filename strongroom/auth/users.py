"""
User management for Strongroom.

Handles creating, reading, updating, and deleting users in strongroom_users.
Password hashing and verification happen outside the core; only the opaque
hash is stored.
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable, List, Optional, Union
from uuid import UUID, uuid4

from ..errors import LimitReached, NotFound
from ..rbac.catalog import SYSTEM_ADMIN_ROLE
from ..rbac.models import UserStatus
from ..utils.supabase import USERS_TABLE
from .models import CreateUserRequest, Identity, StrongroomUser, UpdateUserStatusRequest

if TYPE_CHECKING:
    from ..client import Strongroom

logger = logging.getLogger(__name__)


class UserManager:
    """
    Manages user CRUD operations against the strongroom_users table.

    Roles are validated against the RoleCatalog when they are assigned, never
    later: an unknown role is rejected here with UnknownRole.
    """

    def __init__(self, strongroom: "Strongroom") -> None:
        """
        Initialize UserManager.

        Args:
            strongroom: Main Strongroom client instance
        """
        self.strongroom = strongroom
        self.client = strongroom.client

    async def create(
        self,
        identity: Identity,
        tenant_id: UUID,
        username: str,
        password_hash: str,
        roles: Union[str, Iterable[str]],
    ) -> StrongroomUser:
        """
        Create a new user in a tenant.

        Args:
            identity: The caller
            tenant_id: Tenant the user will belong to
            username: Globally unique, case-sensitive username
            password_hash: Hash produced by the caller's password hasher
            roles: Role names (list or CSV string)

        Returns:
            StrongroomUser instance

        Raises:
            AccessDenied: If the caller may not create users in this tenant
            NotFound: If the tenant does not exist
            UnknownRole: If any role is not registered
            LimitReached: If the tenant already has the maximum number of users
            ValueError: If the username is taken or SystemAdmin is requested

        Example:
            ```python
            user = await sr.users.create(
                identity,
                tenant_id=acme.id,
                username="alice",
                password_hash=hasher.hash(password),
                roles=["Editor"],
            )
            ```
        """
        self.strongroom.scope.enforce(identity, tenant_id, "users.create")

        tenant = await self.strongroom.tenants.fetch(tenant_id)
        if not tenant:
            raise NotFound(f"Tenant not found: {tenant_id}")

        return await self.insert_user(tenant_id, username, password_hash, roles)

    async def insert_user(
        self,
        tenant_id: UUID,
        username: str,
        password_hash: str,
        roles: Union[str, Iterable[str]],
        allow_system_admin: bool = False,
    ) -> StrongroomUser:
        """
        Validate and insert a user row without an authorization check.

        Used by ``create`` after the scope check and by the bootstrap seed,
        which is the only caller allowed to pass ``allow_system_admin``.
        """
        request = CreateUserRequest(
            tenant_id=tenant_id,
            username=username,
            password_hash=password_hash,
            roles=roles,
        )
        role_set = self.strongroom.catalog.validate_roles(request.roles)

        if SYSTEM_ADMIN_ROLE in role_set and not allow_system_admin:
            raise ValueError("Creating a system admin not allowed")

        count = await self.count_by_tenant(tenant_id)
        if count >= self.strongroom.config.max_users_per_tenant:
            raise LimitReached("Tenant already reached the maximum number of users")

        existing = await self.get_by_username(request.username)
        if existing:
            raise ValueError("Username already exists")

        now = datetime.now(timezone.utc).isoformat()
        user_data = {
            "id": str(uuid4()),
            "tenant_id": str(tenant_id),
            "username": request.username,
            "password_hash": request.password_hash,
            "status": UserStatus.ACTIVE.value,
            "roles": sorted(role_set),
            "created_at": now,
            "updated_at": now,
        }

        result = await self.client.table(USERS_TABLE).insert(user_data).execute()

        if not result.data:
            raise ValueError("Failed to create user")

        return StrongroomUser(**result.data[0])

    async def get(self, identity: Identity, user_id: UUID) -> StrongroomUser:
        """
        Get a user by ID.

        Raises:
            NotFound: If the user does not exist or lies in another tenant
            AccessDenied: If the caller may not view users of that tenant
        """
        user = await self._require(user_id)
        self.strongroom.scope.enforce_owned(
            identity, user.tenant_id, "users.view", f"User not found: {user_id}"
        )
        return user

    async def list(
        self,
        identity: Identity,
        tenant_id: UUID,
        limit: int = 50,
        offset: int = 0,
    ) -> List[StrongroomUser]:
        """List users of a tenant ordered by username."""
        self.strongroom.scope.enforce(identity, tenant_id, "users.list")

        result = await self.client.table(USERS_TABLE).select("*").eq(
            "tenant_id", str(tenant_id)
        ).order("username").range(offset, offset + limit - 1).execute()

        if not result.data:
            return []

        return [StrongroomUser(**row) for row in result.data]

    async def update_status(
        self,
        identity: Identity,
        user_id: UUID,
        status: Union[UserStatus, str],
    ) -> StrongroomUser:
        """
        Activate or deactivate a user.

        A deactivated user fails every permission check regardless of roles.
        """
        request = UpdateUserStatusRequest(status=status)
        user = await self._require(user_id)
        self.strongroom.scope.enforce_owned(
            identity, user.tenant_id, "users.edit", f"User not found: {user_id}"
        )

        if user.id == identity.user_id and request.status != UserStatus.ACTIVE:
            raise ValueError("Cannot deactivate your own account")

        return await self._update(user_id, {"status": request.status.value})

    async def update_roles(
        self,
        identity: Identity,
        user_id: UUID,
        roles: Union[str, Iterable[str]],
    ) -> StrongroomUser:
        """
        Replace a user's role set.

        Raises:
            UnknownRole: If any role is not registered
            ValueError: If SystemAdmin is requested
        """
        user = await self._require(user_id)
        self.strongroom.scope.enforce_owned(
            identity, user.tenant_id, "users.edit", f"User not found: {user_id}"
        )

        role_set = self.strongroom.catalog.validate_roles(roles)
        if SYSTEM_ADMIN_ROLE in role_set and SYSTEM_ADMIN_ROLE not in user.roles:
            raise ValueError("Granting system admin not allowed")

        return await self._update(user_id, {"roles": sorted(role_set)})

    async def delete(self, identity: Identity, user_id: UUID) -> None:
        """Delete a user. Callers cannot delete themselves."""
        user = await self._require(user_id)
        self.strongroom.scope.enforce_owned(
            identity, user.tenant_id, "users.delete", f"User not found: {user_id}"
        )

        if user.id == identity.user_id:
            raise ValueError("Cannot delete your own account")

        result = await self.client.table(USERS_TABLE).delete().eq(
            "id", str(user_id)
        ).execute()

        if not result.data:
            raise NotFound(f"User not found: {user_id}")

    async def fetch(self, user_id: UUID) -> Optional[StrongroomUser]:
        """Load a user without authorization. Internal use only."""
        result = await self.client.table(USERS_TABLE).select("*").eq(
            "id", str(user_id)
        ).execute()

        if not result.data:
            return None

        return StrongroomUser(**result.data[0])

    async def get_by_username(self, username: str) -> Optional[StrongroomUser]:
        result = await self.client.table(USERS_TABLE).select("*").eq(
            "username", username
        ).execute()

        if not result.data:
            return None

        return StrongroomUser(**result.data[0])

    async def count_by_tenant(self, tenant_id: UUID) -> int:
        result = await self.client.table(USERS_TABLE).select("id", count="exact").eq(
            "tenant_id", str(tenant_id)
        ).execute()

        return result.count if result.count is not None else 0

    async def _require(self, user_id: UUID) -> StrongroomUser:
        user = await self.fetch(user_id)
        if not user:
            raise NotFound(f"User not found: {user_id}")
        return user

    async def _update(self, user_id: UUID, data: dict) -> StrongroomUser:
        data["updated_at"] = datetime.now(timezone.utc).isoformat()
        result = await self.client.table(USERS_TABLE).update(data).eq(
            "id", str(user_id)
        ).execute()

        if not result.data:
            raise NotFound(f"User not found: {user_id}")

        return StrongroomUser(**result.data[0])
