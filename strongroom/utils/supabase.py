"""
Supabase client wrapper for Strongroom.

The storage collaborator: a thin wrapper around the Supabase AsyncClient that
exposes PostgREST table builders for the strongroom_* tables.
"""

from supabase import AsyncClient, acreate_client
from supabase.lib.client_options import AsyncClientOptions

from ..config import StrongroomConfig

TENANTS_TABLE = "strongroom_tenants"
USERS_TABLE = "strongroom_users"
VAULTS_TABLE = "strongroom_vaults"
ENTRIES_TABLE = "strongroom_entries"


class StrongroomSupabaseClient:
    """
    Wrapper around Supabase AsyncClient with Strongroom-specific configuration.

    Example:
        ```python
        config = StrongroomConfig()
        client = await StrongroomSupabaseClient.create(config)

        result = await client.table("strongroom_vaults").select("*").execute()
        ```
    """

    def __init__(self, config: StrongroomConfig, client: AsyncClient) -> None:
        """
        Initialize the Strongroom Supabase client.

        Args:
            config: Strongroom configuration
            client: Initialized Supabase AsyncClient

        Note:
            Use StrongroomSupabaseClient.create() instead of direct instantiation.
        """
        self.config = config
        self._client = client

    @classmethod
    async def create(cls, config: StrongroomConfig) -> "StrongroomSupabaseClient":
        """
        Create and initialize a StrongroomSupabaseClient.

        Args:
            config: Strongroom configuration with Supabase credentials

        Returns:
            Initialized StrongroomSupabaseClient
        """
        options = AsyncClientOptions(schema=config.db_schema)

        client = await acreate_client(
            config.supabase_url,
            config.supabase_key,
            options=options,
        )

        return cls(config=config, client=client)

    def table(self, table_name: str):
        """
        Create a query builder for a specific table.

        Args:
            table_name: Name of the table (e.g., "strongroom_entries")

        Returns:
            AsyncRequestBuilder for chaining queries
        """
        return self._client.table(table_name)

    async def close(self) -> None:
        """Close the client and cleanup resources."""
        # Supabase AsyncClient holds no connection that needs explicit closing
        pass
