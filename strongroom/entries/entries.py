"""
Entry storage for Strongroom.

Every operation loads the owning vault first and authorizes against the
vault's tenant. Cipher fields only ever leave through ``view``.
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID, uuid4

from ..errors import InvalidPageSize, InvalidStatusTransition, LimitReached, NotFound
from ..utils.supabase import ENTRIES_TABLE
from .models import (
    ENTRY_TRANSITIONS,
    CreateEntryRequest,
    Entry,
    EntryPage,
    EntryStatus,
    EntrySummary,
    SearchEntriesRequest,
    UpdateEntryRequest,
)
from .pagination import Pagination

if TYPE_CHECKING:
    from ..auth.models import Identity
    from ..client import Strongroom
    from ..vaults.models import StrongroomVault

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = "id,label,status"


def like_pattern(keyword: str) -> str:
    """Build an ILIKE pattern matching ``keyword`` anywhere, wildcards escaped."""
    escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class EntryStore:
    """
    Entry CRUD and search.

    Entries move active <-> archived, and either of those -> deleted.
    Deletion is logical and terminal: deleted entries are invisible to every
    operation and their rows are purged when the vault is deleted.

    Example:
        ```python
        entry = await sr.entries.create(
            identity,
            vault_id=vault.id,
            label="Bank",
            cipher_password=ciphertext,
        )

        page = await sr.entries.search(identity, vault.id, keyword="ban")
        for item in page.items:
            print(item.label)
        ```
    """

    def __init__(self, strongroom: "Strongroom") -> None:
        self.strongroom = strongroom
        self.client = strongroom.client

    async def create(
        self,
        identity: "Identity",
        vault_id: UUID,
        label: str,
        cipher_username: Optional[str] = None,
        cipher_password: Optional[str] = None,
        cipher_notes: Optional[str] = None,
        cipher_extra_notes: Optional[str] = None,
    ) -> Entry:
        """
        Create an active entry in a vault.

        Raises:
            NotFound: If the vault does not exist or lies in another tenant
            AccessDenied: If the caller may not create entries in the vault
            LimitReached: If the vault already holds the maximum number of entries
        """
        vault = await self._vault(identity, vault_id, "entries.create")

        request = CreateEntryRequest(
            label=label,
            cipher_username=cipher_username,
            cipher_password=cipher_password,
            cipher_notes=cipher_notes,
            cipher_extra_notes=cipher_extra_notes,
        )

        count = await self.count(vault.id)
        if count >= self.strongroom.config.max_entries_per_vault:
            raise LimitReached("Vault already reached the maximum number of entries")

        now = datetime.now(timezone.utc).isoformat()
        entry_data = {
            "id": str(uuid4()),
            "vault_id": str(vault.id),
            **request.model_dump(),
            "label_key": request.label.casefold(),
            "status": EntryStatus.ACTIVE.value,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.client.table(ENTRIES_TABLE).insert(entry_data).execute()

        if not result.data:
            raise ValueError("Failed to create entry")

        return Entry(**result.data[0])

    async def search(
        self,
        identity: "Identity",
        vault_id: UUID,
        keyword: Optional[str] = None,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> EntryPage:
        """
        Search a vault's entries by label.

        Matching is a case-insensitive substring match on the label. Deleted
        entries never match. Results are ordered by case-folded label, then
        label.

        Args:
            identity: The caller
            vault_id: Vault to search
            keyword: Substring to look for; empty or None matches everything
            page: 1-indexed page; a page past the end falls back to 1
            per_page: Page size, 1 to ``max_per_page`` (defaults to the maximum)

        Raises:
            InvalidPageSize: If page or per_page is out of range
            NotFound: If the vault does not exist or lies in another tenant
            AccessDenied: If the caller may not list entries in the vault
        """
        max_per_page = self.strongroom.config.max_per_page
        if per_page is None:
            per_page = max_per_page
        if not 1 <= per_page <= max_per_page:
            raise InvalidPageSize(f"per_page must be between 1 and {max_per_page}")
        if page < 1:
            raise InvalidPageSize("page must be at least 1")

        request = SearchEntriesRequest(keyword=keyword, page=page, per_page=per_page)
        vault = await self._vault(identity, vault_id, "entries.list")

        count_query = self._live(
            self.client.table(ENTRIES_TABLE).select("id", count="exact"), vault.id, request.keyword
        )
        count_result = await count_query.execute()
        total = count_result.count if count_result.count is not None else 0

        pagination = Pagination.build(total, request.page, request.per_page)

        if not total:
            return EntryPage(items=[], pagination=pagination)

        query = self._live(
            self.client.table(ENTRIES_TABLE).select(SUMMARY_COLUMNS), vault.id, request.keyword
        )
        result = await query.order("label_key").order("label").range(
            pagination.offset, pagination.offset + pagination.per_page - 1
        ).execute()

        items = [EntrySummary(**row) for row in result.data or []]
        return EntryPage(items=items, pagination=pagination)

    async def view(self, identity: "Identity", entry_id: UUID) -> Entry:
        """
        Get an entry with its cipher fields.

        Raises:
            NotFound: If the entry does not exist, is deleted or lies in another tenant
            AccessDenied: If the caller may not view entries in its vault
        """
        entry = await self._require(entry_id)
        await self._vault(identity, entry.vault_id, "entries.view", f"Entry not found: {entry_id}")
        return entry

    async def update(
        self,
        identity: "Identity",
        entry_id: UUID,
        **changes: Any,
    ) -> Entry:
        """
        Change an entry's label or cipher fields.

        Only ``label`` and the four cipher fields may be passed; the vault and
        status never change here.

        Raises:
            NotFound: If the entry does not exist, is deleted or lies in another tenant
            AccessDenied: If the caller may not edit entries in its vault
        """
        request = UpdateEntryRequest(**changes)
        entry = await self._require(entry_id)
        await self._vault(identity, entry.vault_id, "entries.edit", f"Entry not found: {entry_id}")

        update_data: Dict[str, Any] = request.model_dump(exclude_unset=True)
        if update_data.get("label") is None:
            update_data.pop("label", None)
        else:
            update_data["label_key"] = update_data["label"].casefold()

        if not update_data:
            return entry

        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        result = await self.client.table(ENTRIES_TABLE).update(update_data).eq(
            "id", str(entry_id)
        ).neq("status", EntryStatus.DELETED.value).execute()

        if not result.data:
            raise NotFound(f"Entry not found: {entry_id}")

        return Entry(**result.data[0])

    async def archive(self, identity: "Identity", entry_id: UUID) -> Entry:
        """Move an active entry to archived."""
        return await self._transition(identity, entry_id, EntryStatus.ARCHIVED, "entries.edit")

    async def restore(self, identity: "Identity", entry_id: UUID) -> Entry:
        """Move an archived entry back to active."""
        return await self._transition(identity, entry_id, EntryStatus.ACTIVE, "entries.edit")

    async def delete(self, identity: "Identity", entry_id: UUID) -> Entry:
        """Logically delete an active or archived entry. There is no undo."""
        return await self._transition(identity, entry_id, EntryStatus.DELETED, "entries.delete")

    async def count(self, vault_id: UUID) -> int:
        """Count a vault's active and archived entries."""
        result = await self.client.table(ENTRIES_TABLE).select("id", count="exact").eq(
            "vault_id", str(vault_id)
        ).neq("status", EntryStatus.DELETED.value).execute()

        return result.count if result.count is not None else 0

    async def fetch(self, entry_id: UUID) -> Optional[Entry]:
        """Load a live entry without authorization. Internal use only."""
        result = await self.client.table(ENTRIES_TABLE).select("*").eq(
            "id", str(entry_id)
        ).neq("status", EntryStatus.DELETED.value).execute()

        if not result.data:
            return None

        return Entry(**result.data[0])

    async def _transition(
        self,
        identity: "Identity",
        entry_id: UUID,
        target: EntryStatus,
        permission: str,
    ) -> Entry:
        entry = await self._require(entry_id)
        await self._vault(identity, entry.vault_id, permission, f"Entry not found: {entry_id}")

        if target not in ENTRY_TRANSITIONS[entry.status]:
            raise InvalidStatusTransition(
                f"Cannot move entry from {entry.status.value} to {target.value}"
            )

        # Guarded on the status we read so a concurrent transition is not overwritten
        result = await self.client.table(ENTRIES_TABLE).update(
            {
                "status": target.value,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        ).eq("id", str(entry_id)).eq("status", entry.status.value).execute()

        if not result.data:
            raise InvalidStatusTransition(f"Entry {entry_id} changed status concurrently")

        logger.debug("Entry %s moved from %s to %s", entry_id, entry.status.value, target.value)
        return Entry(**result.data[0])

    async def _require(self, entry_id: UUID) -> Entry:
        entry = await self.fetch(entry_id)
        if not entry:
            raise NotFound(f"Entry not found: {entry_id}")
        return entry

    async def _vault(
        self,
        identity: "Identity",
        vault_id: UUID,
        permission: str,
        not_found: Optional[str] = None,
    ) -> "StrongroomVault":
        not_found = not_found or f"Vault not found: {vault_id}"

        vault = await self.strongroom.vaults.fetch(vault_id)
        if not vault:
            raise NotFound(not_found)

        self.strongroom.scope.enforce_owned(identity, vault.tenant_id, permission, not_found)
        return vault

    @staticmethod
    def _live(query, vault_id: UUID, keyword: Optional[str]):
        query = query.eq("vault_id", str(vault_id)).neq("status", EntryStatus.DELETED.value)
        if keyword:
            query = query.ilike("label", like_pattern(keyword))
        return query
