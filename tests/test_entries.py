"""
Tests for strongroom.entries module.
"""

from uuid import uuid4

import pytest

from strongroom.auth.models import Identity
from strongroom.entries import EntryStatus
from strongroom.entries.entries import like_pattern
from strongroom.errors import (
    AccessDenied,
    InvalidPageSize,
    InvalidStatusTransition,
    LimitReached,
    NotFound,
)
from strongroom.rbac import DenyReason
from strongroom.utils.supabase import ENTRIES_TABLE


async def add_entries(strongroom, identity, vault, labels):
    return [await strongroom.entries.create(identity, vault.id, label=label) for label in labels]


class TestEntryCreate:
    """Tests for EntryStore.create."""

    @pytest.mark.asyncio
    async def test_create_entry(self, strongroom, editor_identity, vault):
        entry = await strongroom.entries.create(
            editor_identity,
            vault.id,
            label="Bank",
            cipher_username="c2VjcmV0LXVzZXI=",
            cipher_password="c2VjcmV0LXBhc3M=",
        )

        assert entry.label == "Bank"
        assert entry.vault_id == vault.id
        assert entry.status == EntryStatus.ACTIVE
        assert entry.cipher_password == "c2VjcmV0LXBhc3M="
        assert entry.cipher_notes is None

    @pytest.mark.asyncio
    async def test_cipher_fields_not_in_repr(self, strongroom, editor_identity, vault):
        entry = await strongroom.entries.create(
            editor_identity, vault.id, label="Bank", cipher_password="opaque-ciphertext"
        )
        assert "opaque-ciphertext" not in repr(entry)

    @pytest.mark.asyncio
    async def test_viewer_cannot_create(self, strongroom, viewer_identity, vault):
        with pytest.raises(AccessDenied) as exc:
            await strongroom.entries.create(viewer_identity, vault.id, label="Bank")
        assert exc.value.reason == DenyReason.INSUFFICIENT_PERMISSION

    @pytest.mark.asyncio
    async def test_other_tenant_cannot_create(
        self, strongroom, fake_supabase, other_admin_identity, vault
    ):
        with pytest.raises(NotFound) as exc:
            await strongroom.entries.create(other_admin_identity, vault.id, label="Bank")
        assert str(exc.value) == f"Vault not found: {vault.id}"
        assert fake_supabase.tables.get(ENTRIES_TABLE, []) == []

    @pytest.mark.asyncio
    async def test_missing_vault(self, strongroom, editor_identity):
        with pytest.raises(NotFound):
            await strongroom.entries.create(editor_identity, uuid4(), label="Bank")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("label", ["", "x" * 251])
    async def test_label_length(self, strongroom, editor_identity, vault, label):
        with pytest.raises(ValueError):
            await strongroom.entries.create(editor_identity, vault.id, label=label)

    @pytest.mark.asyncio
    async def test_entry_cap(self, strongroom, editor_identity, vault):
        strongroom.config.max_entries_per_vault = 2
        await add_entries(strongroom, editor_identity, vault, ["One", "Two"])

        with pytest.raises(LimitReached):
            await strongroom.entries.create(editor_identity, vault.id, label="Three")

    @pytest.mark.asyncio
    async def test_inactive_user_denied(self, strongroom, system_identity, editor_identity, vault):
        await strongroom.users.update_status(system_identity, editor_identity.user_id, "inactive")
        user = await strongroom.users.fetch(editor_identity.user_id)
        inactive = Identity.for_user(user, is_system_admin_tenant=False)

        with pytest.raises(AccessDenied) as exc:
            await strongroom.entries.create(inactive, vault.id, label="Bank")
        assert exc.value.reason == DenyReason.USER_INACTIVE


class TestEntrySearch:
    """Tests for EntryStore.search."""

    @pytest.mark.asyncio
    async def test_keyword_case_insensitive(self, strongroom, editor_identity, viewer_identity, vault):
        await add_entries(strongroom, editor_identity, vault, ["Bank", "Email", "bank2"])

        page = await strongroom.entries.search(viewer_identity, vault.id, keyword="ban")

        assert [item.label for item in page.items] == ["Bank", "bank2"]
        assert page.pagination.total_records == 2
        assert page.pagination.has_next is False
        assert page.pagination.has_previous is False

    @pytest.mark.asyncio
    async def test_order_by_folded_label_then_label(
        self, strongroom, editor_identity, viewer_identity, vault
    ):
        await add_entries(strongroom, editor_identity, vault, ["beta", "Alpha", "alpha", "Beta"])

        page = await strongroom.entries.search(viewer_identity, vault.id)

        assert [item.label for item in page.items] == ["Alpha", "alpha", "Beta", "beta"]

    @pytest.mark.asyncio
    async def test_deleted_excluded_archived_included(
        self, strongroom, admin_identity, viewer_identity, vault
    ):
        gone, archived, _ = await add_entries(
            strongroom, admin_identity, vault, ["Gone", "Archived", "Active"]
        )
        await strongroom.entries.delete(admin_identity, gone.id)
        await strongroom.entries.archive(admin_identity, archived.id)

        page = await strongroom.entries.search(viewer_identity, vault.id)

        assert [item.label for item in page.items] == ["Active", "Archived"]
        assert [item.status for item in page.items] == [EntryStatus.ACTIVE, EntryStatus.ARCHIVED]

    @pytest.mark.asyncio
    async def test_items_carry_no_ciphertext(self, strongroom, editor_identity, viewer_identity, vault):
        await strongroom.entries.create(
            editor_identity, vault.id, label="Bank", cipher_password="opaque"
        )

        page = await strongroom.entries.search(viewer_identity, vault.id)

        assert set(page.items[0].model_dump()) == {"id", "label", "status"}

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, strongroom, editor_identity, viewer_identity, vault):
        await add_entries(strongroom, editor_identity, vault, ["50% off", "Fifty", "snake_case", "snakeXcase"])

        percent = await strongroom.entries.search(viewer_identity, vault.id, keyword="%")
        underscore = await strongroom.entries.search(viewer_identity, vault.id, keyword="e_c")

        assert [item.label for item in percent.items] == ["50% off"]
        assert [item.label for item in underscore.items] == ["snake_case"]

    @pytest.mark.asyncio
    async def test_paging(self, strongroom, editor_identity, viewer_identity, vault):
        await add_entries(strongroom, editor_identity, vault, ["a1", "a2", "a3", "a4", "a5"])

        page = await strongroom.entries.search(viewer_identity, vault.id, page=3, per_page=2)

        assert [item.label for item in page.items] == ["a5"]
        assert page.pagination.page == 3
        assert page.pagination.total_pages == 3
        assert page.pagination.has_previous is True
        assert page.pagination.has_next is False

        middle = await strongroom.entries.search(viewer_identity, vault.id, page=2, per_page=2)
        assert [item.label for item in middle.items] == ["a3", "a4"]
        assert middle.pagination.previous_page == 1
        assert middle.pagination.next_page == 3

    @pytest.mark.asyncio
    async def test_page_past_end_falls_back(self, strongroom, editor_identity, viewer_identity, vault):
        await add_entries(strongroom, editor_identity, vault, ["a1", "a2", "a3"])

        page = await strongroom.entries.search(viewer_identity, vault.id, page=10, per_page=2)

        assert page.pagination.page == 1
        assert [item.label for item in page.items] == ["a1", "a2"]

    @pytest.mark.asyncio
    async def test_empty_vault(self, strongroom, viewer_identity, vault):
        page = await strongroom.entries.search(viewer_identity, vault.id, keyword="anything")

        assert page.items == []
        assert page.pagination.total_records == 0
        assert page.pagination.page == 1
        assert page.pagination.has_next is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,per_page", [(1, 0), (1, 51), (0, 10), (-1, 10)])
    async def test_invalid_page_size(self, strongroom, viewer_identity, vault, page, per_page):
        with pytest.raises(InvalidPageSize):
            await strongroom.entries.search(viewer_identity, vault.id, page=page, per_page=per_page)

    @pytest.mark.asyncio
    async def test_max_page_size_follows_config(self, strongroom, viewer_identity, vault):
        strongroom.config.max_per_page = 10
        with pytest.raises(InvalidPageSize):
            await strongroom.entries.search(viewer_identity, vault.id, per_page=11)

    @pytest.mark.asyncio
    async def test_other_tenant_sees_not_found(self, strongroom, other_admin_identity, vault):
        missing = uuid4()
        with pytest.raises(NotFound) as absent:
            await strongroom.entries.search(other_admin_identity, missing)
        with pytest.raises(NotFound) as foreign:
            await strongroom.entries.search(other_admin_identity, vault.id)

        assert str(absent.value) == f"Vault not found: {missing}"
        assert str(foreign.value) == f"Vault not found: {vault.id}"


class TestEntryViewUpdate:
    """Tests for EntryStore.view and update."""

    @pytest.mark.asyncio
    async def test_view_returns_ciphertext(self, strongroom, editor_identity, viewer_identity, vault):
        entry = await strongroom.entries.create(
            editor_identity, vault.id, label="Bank", cipher_notes="opaque-notes"
        )

        viewed = await strongroom.entries.view(viewer_identity, entry.id)

        assert viewed.cipher_notes == "opaque-notes"

    @pytest.mark.asyncio
    async def test_view_cross_tenant(self, strongroom, editor_identity, other_admin_identity, vault):
        entry = await strongroom.entries.create(editor_identity, vault.id, label="Bank")
        missing = uuid4()

        with pytest.raises(NotFound) as absent:
            await strongroom.entries.view(other_admin_identity, missing)
        with pytest.raises(NotFound) as foreign:
            await strongroom.entries.view(other_admin_identity, entry.id)

        assert type(foreign.value) is type(absent.value)
        assert str(foreign.value) == f"Entry not found: {entry.id}"

    @pytest.mark.asyncio
    async def test_cross_tenant_delete_looks_missing(
        self, strongroom, editor_identity, other_admin_identity, vault
    ):
        entry = await strongroom.entries.create(editor_identity, vault.id, label="Bank")

        with pytest.raises(NotFound):
            await strongroom.entries.delete(other_admin_identity, entry.id)

        assert (await strongroom.entries.fetch(entry.id)).status == EntryStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_view_missing(self, strongroom, viewer_identity):
        with pytest.raises(NotFound):
            await strongroom.entries.view(viewer_identity, uuid4())

    @pytest.mark.asyncio
    async def test_view_deleted(self, strongroom, admin_identity, vault):
        entry = await strongroom.entries.create(admin_identity, vault.id, label="Bank")
        await strongroom.entries.delete(admin_identity, entry.id)

        with pytest.raises(NotFound):
            await strongroom.entries.view(admin_identity, entry.id)

    @pytest.mark.asyncio
    async def test_update_label_and_cipher(self, strongroom, admin_identity, viewer_identity, vault):
        entry = await strongroom.entries.create(admin_identity, vault.id, label="Zeta")
        await strongroom.entries.create(admin_identity, vault.id, label="Mu")

        updated = await strongroom.entries.update(
            admin_identity, entry.id, label="Alpha", cipher_password="new-ciphertext"
        )

        assert updated.label == "Alpha"
        assert updated.cipher_password == "new-ciphertext"
        assert updated.vault_id == vault.id

        page = await strongroom.entries.search(viewer_identity, vault.id)
        assert [item.label for item in page.items] == ["Alpha", "Mu"]

    @pytest.mark.asyncio
    async def test_update_cannot_move_vault(self, strongroom, admin_identity, vault):
        entry = await strongroom.entries.create(admin_identity, vault.id, label="Bank")

        with pytest.raises(ValueError):
            await strongroom.entries.update(admin_identity, entry.id, vault_id=str(uuid4()))

    @pytest.mark.asyncio
    async def test_editor_cannot_update(self, strongroom, editor_identity, vault):
        entry = await strongroom.entries.create(editor_identity, vault.id, label="Bank")

        with pytest.raises(AccessDenied):
            await strongroom.entries.update(editor_identity, entry.id, label="Vault")

    @pytest.mark.asyncio
    async def test_update_deleted(self, strongroom, admin_identity, vault):
        entry = await strongroom.entries.create(admin_identity, vault.id, label="Bank")
        await strongroom.entries.delete(admin_identity, entry.id)

        with pytest.raises(NotFound):
            await strongroom.entries.update(admin_identity, entry.id, label="Back")


class TestEntryStatus:
    """Tests for the entry state machine."""

    @pytest.mark.asyncio
    async def test_archive_and_restore(self, strongroom, admin_identity, vault):
        entry = await strongroom.entries.create(admin_identity, vault.id, label="Bank")

        archived = await strongroom.entries.archive(admin_identity, entry.id)
        assert archived.status == EntryStatus.ARCHIVED

        restored = await strongroom.entries.restore(admin_identity, entry.id)
        assert restored.status == EntryStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_archive_twice(self, strongroom, admin_identity, vault):
        entry = await strongroom.entries.create(admin_identity, vault.id, label="Bank")
        await strongroom.entries.archive(admin_identity, entry.id)

        with pytest.raises(InvalidStatusTransition):
            await strongroom.entries.archive(admin_identity, entry.id)

    @pytest.mark.asyncio
    async def test_restore_active(self, strongroom, admin_identity, vault):
        entry = await strongroom.entries.create(admin_identity, vault.id, label="Bank")

        with pytest.raises(InvalidStatusTransition):
            await strongroom.entries.restore(admin_identity, entry.id)

    @pytest.mark.asyncio
    async def test_delete_archived(self, strongroom, admin_identity, vault):
        entry = await strongroom.entries.create(admin_identity, vault.id, label="Bank")
        await strongroom.entries.archive(admin_identity, entry.id)

        deleted = await strongroom.entries.delete(admin_identity, entry.id)

        assert deleted.status == EntryStatus.DELETED
        assert await strongroom.entries.count(vault.id) == 0

    @pytest.mark.asyncio
    async def test_deleted_is_terminal(self, strongroom, admin_identity, vault):
        entry = await strongroom.entries.create(admin_identity, vault.id, label="Bank")
        await strongroom.entries.delete(admin_identity, entry.id)

        for transition in (strongroom.entries.restore, strongroom.entries.archive, strongroom.entries.delete):
            with pytest.raises(NotFound):
                await transition(admin_identity, entry.id)

    @pytest.mark.asyncio
    async def test_editor_cannot_delete(self, strongroom, editor_identity, vault):
        entry = await strongroom.entries.create(editor_identity, vault.id, label="Bank")

        with pytest.raises(AccessDenied) as exc:
            await strongroom.entries.delete(editor_identity, entry.id)
        assert exc.value.reason == DenyReason.INSUFFICIENT_PERMISSION


class TestLikePattern:
    """Tests for like_pattern function."""

    def test_plain(self):
        assert like_pattern("ban") == "%ban%"

    def test_escapes_wildcards(self):
        assert like_pattern("50%_off") == "%50\\%\\_off%"

    def test_escapes_backslash(self):
        assert like_pattern("a\\b") == "%a\\\\b%"
