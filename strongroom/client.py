"""
Main Strongroom client.

This is the primary interface users interact with.
"""

from typing import Optional, Union
from uuid import UUID

from .auth import IdentityResolver, UserManager
from .auth.models import Identity
from .config import StrongroomConfig, load_config
from .entries import EntryStore
from .rbac import PermissionGuard, RoleCatalog, TenantScope, Verdict
from .rbac.models import PermissionLike
from .tenants import TenantManager
from .utils.supabase import StrongroomSupabaseClient
from .vaults import VaultManager, VaultSeal


class Strongroom:
    """
    Main Strongroom client for multi-tenant, zero-knowledge vaults.

    Holds the read-only role catalog, the authorization chain built on it,
    and one manager per stored resource.

    Example:
        ```python
        from strongroom import Strongroom

        # Initialize from environment variables
        sr = await Strongroom.create()

        # Or with explicit config
        sr = await Strongroom.create(
            supabase_url="https://xxx.supabase.co",
            supabase_key="your-service-key",
            jwt_secret="...",
        )

        identity = await sr.identities.resolve(authorization_header)
        vault = await sr.vaults.create(identity, identity.tenant_id, "Ops", probe)
        page = await sr.entries.search(identity, vault.id, keyword="bank")
        ```
    """

    def __init__(
        self,
        config: StrongroomConfig,
        client: StrongroomSupabaseClient,
        catalog: Optional[RoleCatalog] = None,
    ) -> None:
        """
        Initialize Strongroom client.

        Args:
            config: Strongroom configuration
            client: Supabase client wrapper
            catalog: Role catalog (defaults to the one named by the config)

        Raises:
            RoleCatalogError: If the configured role catalog cannot be loaded

        Note:
            Use Strongroom.create() instead of direct instantiation.
        """
        self.config = config
        self.client = client

        # Authorization
        self.catalog = catalog or RoleCatalog.from_config(config)
        self.guard = PermissionGuard(self.catalog)
        self.scope = TenantScope(self.guard)
        self.seal = VaultSeal()

        # Stores
        self.tenants = TenantManager(self)
        self.users = UserManager(self)
        self.vaults = VaultManager(self)
        self.entries = EntryStore(self)
        self.identities = IdentityResolver(self)

    @classmethod
    async def create(
        cls,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        **kwargs,
    ) -> "Strongroom":
        """
        Create and initialize a Strongroom client.

        Args:
            supabase_url: Supabase project URL (optional, loads from env)
            supabase_key: Supabase service role key (optional, loads from env)
            **kwargs: Additional configuration options

        Returns:
            Initialized Strongroom client

        Raises:
            ValidationError: If required configuration is missing or invalid
            RoleCatalogError: If the role catalog cannot be loaded
        """
        config_kwargs = kwargs.copy()
        if supabase_url:
            config_kwargs["supabase_url"] = supabase_url
        if supabase_key:
            config_kwargs["supabase_key"] = supabase_key

        config = load_config(**config_kwargs)

        # Load the catalog before connecting so a bad catalog fails fast
        catalog = RoleCatalog.from_config(config)

        client = await StrongroomSupabaseClient.create(config)

        return cls(config=config, client=client, catalog=catalog)

    def authorize(
        self,
        identity: Identity,
        permission: PermissionLike,
        target_tenant_id: Union[UUID, str],
    ) -> Verdict:
        """
        Decide whether ``identity`` may use ``permission`` in a tenant.

        Returns a Verdict instead of raising; use ``scope.enforce`` for the
        raising form.

        Example:
            ```python
            verdict = sr.authorize(identity, "entries.view", vault.tenant_id)
            if not verdict:
                return error_response(verdict.public_message())
            ```
        """
        return self.scope.authorize(identity, target_tenant_id, permission)

    async def close(self) -> None:
        """Close the Strongroom client and cleanup resources."""
        await self.client.close()

    async def __aenter__(self) -> "Strongroom":
        """Context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        await self.close()
