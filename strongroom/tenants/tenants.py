"""
Tenant management for Strongroom.

Handles CRUD operations for tenants in the strongroom_tenants table.
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional, Tuple
from uuid import UUID, uuid4

from ..auth.models import CreateUserRequest
from ..errors import NotFound, TenantNotEmpty
from ..rbac.catalog import SYSTEM_ADMIN_ROLE
from ..rbac.models import UserStatus
from ..utils.supabase import TENANTS_TABLE, USERS_TABLE, VAULTS_TABLE
from .models import CreateTenantRequest, StrongroomTenant, UpdateTenantRequest

if TYPE_CHECKING:
    from ..auth.models import Identity, StrongroomUser
    from ..client import Strongroom

logger = logging.getLogger(__name__)


class TenantManager:
    """
    Manager for tenant CRUD operations.

    Tenants are created and removed only by callers from the system-admin
    tenant. Other callers can see their own tenant and nothing else.

    Example:
        ```python
        sr = await Strongroom.create()

        # Bootstrap once, bypassing the guard
        tenant, admin = await sr.tenants.seed_system_tenant(
            name="Operators", username="root", password_hash=hashed
        )

        # Afterwards every call is authorized
        acme = await sr.tenants.create(identity, name="Acme Corp")
        ```
    """

    def __init__(self, strongroom: "Strongroom") -> None:
        """
        Initialize TenantManager.

        Args:
            strongroom: Strongroom client instance
        """
        self.strongroom = strongroom
        self.client = strongroom.client

    async def seed_system_tenant(
        self,
        name: str,
        username: str,
        password_hash: str,
    ) -> Tuple[StrongroomTenant, "StrongroomUser"]:
        """
        Create the system-admin tenant and its first SystemAdmin user.

        This is the only path that does not go through TenantScope, and it
        only works while no system-admin tenant exists.

        The user is validated before anything is written, and the tenant row
        is removed again if the user insert fails, so a failed seed can be
        retried.

        Raises:
            ValueError: If a system-admin tenant already exists, or the
                username is invalid or taken
        """
        request = CreateTenantRequest(name=name)
        tenant_id = uuid4()
        user_request = CreateUserRequest(
            tenant_id=tenant_id,
            username=username,
            password_hash=password_hash,
            roles={SYSTEM_ADMIN_ROLE},
        )
        self.strongroom.catalog.validate_roles(user_request.roles)

        existing = await self.get_system_tenant()
        if existing:
            raise ValueError("System admin tenant already exists")

        if await self.strongroom.users.get_by_username(user_request.username):
            raise ValueError("Username already exists")

        tenant = await self._insert(tenant_id, request, is_system_admin_tenant=True)
        try:
            user = await self.strongroom.users.insert_user(
                tenant_id=tenant.id,
                username=user_request.username,
                password_hash=user_request.password_hash,
                roles=user_request.roles,
                allow_system_admin=True,
            )
        except Exception:
            logger.warning("Seeding user %s failed; removing tenant %s", username, tenant.id)
            await self.client.table(TENANTS_TABLE).delete().eq("id", str(tenant.id)).execute()
            raise

        logger.info("Seeded system admin tenant %s with user %s", tenant.id, user.username)
        return tenant, user

    async def create(self, identity: "Identity", name: str) -> StrongroomTenant:
        """
        Create a new tenant.

        The new tenant is a different tenant from the caller's, so only
        callers from the system-admin tenant pass the scope check.

        Raises:
            AccessDenied: If the caller may not create tenants
        """
        request = CreateTenantRequest(name=name)
        tenant_id = uuid4()

        self.strongroom.scope.enforce(identity, tenant_id, "tenants.create")

        return await self._insert(tenant_id, request, is_system_admin_tenant=False)

    async def get(self, identity: "Identity", tenant_id: UUID) -> StrongroomTenant:
        """
        Get a tenant by ID.

        Raises:
            AccessDenied: If the caller may not view this tenant
            NotFound: If the tenant does not exist
        """
        self.strongroom.scope.enforce(identity, tenant_id, "tenants.view")

        tenant = await self.fetch(tenant_id)
        if not tenant:
            raise NotFound(f"Tenant not found: {tenant_id}")
        return tenant

    async def list(
        self,
        identity: "Identity",
        limit: int = 50,
        offset: int = 0,
    ) -> List[StrongroomTenant]:
        """
        List tenants visible to the caller.

        System-admin callers see every tenant; everybody else sees only their own.
        """
        self.strongroom.scope.enforce(identity, identity.tenant_id, "tenants.list")

        query = self.client.table(TENANTS_TABLE).select("*")

        if not identity.is_system_admin_tenant:
            query = query.eq("id", str(identity.tenant_id))

        query = query.order("name").range(offset, offset + limit - 1)

        result = await query.execute()

        if not result.data:
            return []

        return [StrongroomTenant(**row) for row in result.data]

    async def update(
        self,
        identity: "Identity",
        tenant_id: UUID,
        name: Optional[str] = None,
        status: Optional[str] = None,
    ) -> StrongroomTenant:
        """
        Update a tenant's name or status.

        Raises:
            AccessDenied: If the caller may not edit this tenant
            NotFound: If the tenant does not exist
            ValueError: If asked to deactivate the system-admin tenant
        """
        self.strongroom.scope.enforce(identity, tenant_id, "tenants.edit")

        request = UpdateTenantRequest(name=name, status=status)

        existing = await self.fetch(tenant_id)
        if not existing:
            raise NotFound(f"Tenant not found: {tenant_id}")

        if existing.is_system_admin_tenant and request.status == UserStatus.INACTIVE:
            raise ValueError("Cannot deactivate the system admin tenant")

        update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}

        if request.name is not None:
            update_data["name"] = request.name
        if request.status is not None:
            update_data["status"] = request.status.value

        result = await self.client.table(TENANTS_TABLE).update(update_data).eq(
            "id", str(tenant_id)
        ).execute()

        if not result.data:
            raise NotFound(f"Tenant not found: {tenant_id}")

        return StrongroomTenant(**result.data[0])

    async def delete(self, identity: "Identity", tenant_id: UUID) -> None:
        """
        Delete a tenant.

        Refused while the tenant still owns users or vaults.

        Raises:
            AccessDenied: If the caller may not delete this tenant
            NotFound: If the tenant does not exist
            TenantNotEmpty: If users or vaults remain
            ValueError: If asked to delete the system-admin tenant
        """
        self.strongroom.scope.enforce(identity, tenant_id, "tenants.delete")

        existing = await self.fetch(tenant_id)
        if not existing:
            raise NotFound(f"Tenant not found: {tenant_id}")

        if existing.is_system_admin_tenant:
            raise ValueError("Cannot delete the system admin tenant")

        users = await self._count(USERS_TABLE, tenant_id)
        vaults = await self._count(VAULTS_TABLE, tenant_id)
        if users or vaults:
            raise TenantNotEmpty(
                f"Tenant still owns {users} user(s) and {vaults} vault(s)"
            )

        result = await self.client.table(TENANTS_TABLE).delete().eq(
            "id", str(tenant_id)
        ).execute()

        if not result.data:
            raise NotFound(f"Tenant not found: {tenant_id}")

    async def fetch(self, tenant_id: UUID) -> Optional[StrongroomTenant]:
        """Load a tenant without authorization. Internal use only."""
        result = await self.client.table(TENANTS_TABLE).select("*").eq(
            "id", str(tenant_id)
        ).execute()

        if not result.data:
            return None

        return StrongroomTenant(**result.data[0])

    async def get_system_tenant(self) -> Optional[StrongroomTenant]:
        """Load the system-admin tenant, if it has been seeded."""
        result = await self.client.table(TENANTS_TABLE).select("*").eq(
            "is_system_admin_tenant", True
        ).execute()

        if not result.data:
            return None

        return StrongroomTenant(**result.data[0])

    async def _count(self, table: str, tenant_id: UUID) -> int:
        result = await self.client.table(table).select("id", count="exact").eq(
            "tenant_id", str(tenant_id)
        ).execute()

        return result.count if result.count is not None else 0

    async def _insert(
        self,
        tenant_id: UUID,
        request: CreateTenantRequest,
        is_system_admin_tenant: bool,
    ) -> StrongroomTenant:
        now = datetime.now(timezone.utc).isoformat()
        result = await self.client.table(TENANTS_TABLE).insert(
            {
                "id": str(tenant_id),
                "name": request.name,
                "is_system_admin_tenant": is_system_admin_tenant,
                "status": UserStatus.ACTIVE.value,
                "created_at": now,
                "updated_at": now,
            }
        ).execute()

        if not result.data:
            raise ValueError("Failed to create tenant")

        return StrongroomTenant(**result.data[0])
