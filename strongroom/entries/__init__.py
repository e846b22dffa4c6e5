"""
Strongroom entries module.

Encrypted entries stored inside vaults, and their paginated search.
"""

from .entries import EntryStore
from .models import (
    CreateEntryRequest,
    Entry,
    EntryPage,
    EntryStatus,
    EntrySummary,
    UpdateEntryRequest,
)
from .pagination import PageLink, Pagination

__all__ = [
    "EntryStore",
    "Entry",
    "EntrySummary",
    "EntryPage",
    "EntryStatus",
    "CreateEntryRequest",
    "UpdateEntryRequest",
    "Pagination",
    "PageLink",
]
