"""
Vault management for Strongroom.

Handles CRUD operations for vaults in the strongroom_vaults table and the
unseal probe hand-back.
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Union
from uuid import UUID, uuid4

from ..errors import LimitReached, NotFound, VaultNotEmpty
from ..utils.supabase import ENTRIES_TABLE, VAULTS_TABLE
from .models import CreateVaultRequest, StrongroomVault, UnsealChallenge, UpdateVaultRequest

if TYPE_CHECKING:
    from ..auth.models import Identity
    from ..client import Strongroom

logger = logging.getLogger(__name__)


class VaultManager:
    """
    Manager for vault operations.

    Example:
        ```python
        sr = await Strongroom.create()

        vault = await sr.vaults.create(
            identity,
            tenant_id=identity.tenant_id,
            name="Operations",
            unseal_check=probe_bytes,
        )

        challenge = await sr.vaults.get_unseal_probe(identity, vault.id)
        ```
    """

    def __init__(self, strongroom: "Strongroom") -> None:
        """
        Initialize VaultManager.

        Args:
            strongroom: Strongroom client instance
        """
        self.strongroom = strongroom
        self.client = strongroom.client

    async def create(
        self,
        identity: "Identity",
        tenant_id: UUID,
        name: str,
        unseal_check: Union[bytes, str],
    ) -> StrongroomVault:
        """
        Create a new vault.

        The probe is validated before anything is written, so a bad probe
        never leaves a vault behind.

        Args:
            identity: The caller
            tenant_id: Tenant that will own the vault
            name: Vault name (1-50 characters)
            unseal_check: Client-made probe, raw bytes or base64

        Returns:
            Created StrongroomVault

        Raises:
            AccessDenied: If the caller may not create vaults in this tenant
            InvalidProbeFormat: If the probe has the wrong shape
            LimitReached: If the tenant already has the maximum number of vaults
        """
        self.strongroom.scope.enforce(identity, tenant_id, "vaults.create")

        request = CreateVaultRequest(name=name)
        probe = self.strongroom.seal.create_probe(unseal_check)

        count = await self.count_by_tenant(tenant_id)
        if count >= self.strongroom.config.max_vaults_per_tenant:
            raise LimitReached("Tenant already reached the maximum number of vaults")

        now = datetime.now(timezone.utc).isoformat()
        vault_data = {
            "id": str(uuid4()),
            "tenant_id": str(tenant_id),
            "name": request.name,
            "unseal_check": probe.to_base64(),
            "created_at": now,
            "updated_at": now,
        }

        result = await self.client.table(VAULTS_TABLE).insert(vault_data).execute()

        if not result.data:
            raise ValueError("Failed to create vault")

        vault = StrongroomVault(**result.data[0])
        logger.info("Created vault %s in tenant %s", vault.id, tenant_id)
        return vault

    async def get(self, identity: "Identity", vault_id: UUID) -> StrongroomVault:
        """
        Get a vault by ID.

        Raises:
            NotFound: If the vault does not exist or lies in another tenant
            AccessDenied: If the caller may not view it
        """
        vault = await self._require(vault_id)
        self.strongroom.scope.enforce_owned(
            identity, vault.tenant_id, "vaults.view", f"Vault not found: {vault_id}"
        )
        return vault

    async def list(
        self,
        identity: "Identity",
        tenant_id: UUID,
        limit: int = 50,
        offset: int = 0,
    ) -> List[StrongroomVault]:
        """List a tenant's vaults ordered by name."""
        self.strongroom.scope.enforce(identity, tenant_id, "vaults.list")

        result = await self.client.table(VAULTS_TABLE).select("*").eq(
            "tenant_id", str(tenant_id)
        ).order("name").range(offset, offset + limit - 1).execute()

        if not result.data:
            return []

        return [StrongroomVault(**row) for row in result.data]

    async def update(self, identity: "Identity", vault_id: UUID, name: str) -> StrongroomVault:
        """Rename a vault. The probe and owner never change."""
        request = UpdateVaultRequest(name=name)
        vault = await self._require(vault_id)
        self.strongroom.scope.enforce_owned(
            identity, vault.tenant_id, "vaults.edit", f"Vault not found: {vault_id}"
        )

        result = await self.client.table(VAULTS_TABLE).update(
            {
                "name": request.name,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        ).eq("id", str(vault_id)).execute()

        if not result.data:
            raise NotFound(f"Vault not found: {vault_id}")

        return StrongroomVault(**result.data[0])

    async def delete(self, identity: "Identity", vault_id: UUID) -> None:
        """
        Delete a vault.

        Refused while the vault holds active or archived entries. Rows of
        deleted entries are purged together with the vault.

        Raises:
            NotFound: If the vault does not exist or lies in another tenant
            AccessDenied: If the caller may not delete it
            VaultNotEmpty: If live entries remain
        """
        vault = await self._require(vault_id)
        self.strongroom.scope.enforce_owned(
            identity, vault.tenant_id, "vaults.delete", f"Vault not found: {vault_id}"
        )

        live = await self.strongroom.entries.count(vault_id)
        if live:
            raise VaultNotEmpty(f"Vault still holds {live} entries")

        await self.client.table(ENTRIES_TABLE).delete().eq(
            "vault_id", str(vault_id)
        ).eq("status", "deleted").execute()

        result = await self.client.table(VAULTS_TABLE).delete().eq(
            "id", str(vault_id)
        ).execute()

        if not result.data:
            raise NotFound(f"Vault not found: {vault_id}")

        logger.info("Deleted vault %s", vault_id)

    async def get_unseal_probe(
        self,
        identity: "Identity",
        vault_id: UUID,
        request: Optional[Mapping[str, Any]] = None,
    ) -> UnsealChallenge:
        """
        Hand back a vault's unseal probe.

        ``request`` is the raw body of the unseal call. Anything in it besides
        ``vault_id`` is rejected with ProtocolViolation before the vault is
        read. Unsealing requires ``vaults.view`` on the vault's tenant.

        Raises:
            ProtocolViolation: If the request carries secret material
            NotFound: If the vault does not exist or lies in another tenant
            AccessDenied: If the caller may not view the vault
            VaultCorrupted: If the stored probe is missing or damaged
        """

        async def load() -> Optional[str]:
            vault = await self._require(vault_id)
            self.strongroom.scope.enforce_owned(
                identity, vault.tenant_id, "vaults.view", f"Vault not found: {vault_id}"
            )
            return vault.unseal_check

        return await self.strongroom.seal.verify_unseal(vault_id, request, load)

    async def fetch(self, vault_id: UUID) -> Optional[StrongroomVault]:
        """Load a vault without authorization. Internal use only."""
        result = await self.client.table(VAULTS_TABLE).select("*").eq(
            "id", str(vault_id)
        ).execute()

        if not result.data:
            return None

        return StrongroomVault(**result.data[0])

    async def count_by_tenant(self, tenant_id: UUID) -> int:
        result = await self.client.table(VAULTS_TABLE).select("id", count="exact").eq(
            "tenant_id", str(tenant_id)
        ).execute()

        return result.count if result.count is not None else 0

    async def _require(self, vault_id: UUID) -> StrongroomVault:
        vault = await self.fetch(vault_id)
        if not vault:
            raise NotFound(f"Vault not found: {vault_id}")
        return vault
