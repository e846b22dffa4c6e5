"""
Strongroom entry models.

Entries hold client-side encrypted fields. The server stores them as opaque
text and only ever reads the label.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .pagination import Pagination

CIPHER_FIELDS = ("cipher_username", "cipher_password", "cipher_notes", "cipher_extra_notes")


class EntryStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


# status -> statuses it may move to
ENTRY_TRANSITIONS = {
    EntryStatus.ACTIVE: frozenset({EntryStatus.ARCHIVED, EntryStatus.DELETED}),
    EntryStatus.ARCHIVED: frozenset({EntryStatus.ACTIVE, EntryStatus.DELETED}),
    EntryStatus.DELETED: frozenset(),
}


class Entry(BaseModel):
    """
    Entry model - represents a row in the strongroom_entries table.

    Cipher fields are ciphertext produced by the client; they are excluded
    from repr so they never end up in logs.
    """

    id: UUID
    vault_id: UUID
    label: str
    cipher_username: Optional[str] = Field(default=None, repr=False)
    cipher_password: Optional[str] = Field(default=None, repr=False)
    cipher_notes: Optional[str] = Field(default=None, repr=False)
    cipher_extra_notes: Optional[str] = Field(default=None, repr=False)
    status: EntryStatus = EntryStatus.ACTIVE
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    def summary(self) -> "EntrySummary":
        return EntrySummary(id=self.id, label=self.label, status=self.status)


class EntrySummary(BaseModel):
    """What search results expose: no cipher fields."""

    id: UUID
    label: str
    status: EntryStatus


class CreateEntryRequest(BaseModel):
    label: str = Field(..., min_length=1, max_length=250)
    cipher_username: Optional[str] = None
    cipher_password: Optional[str] = None
    cipher_notes: Optional[str] = None
    cipher_extra_notes: Optional[str] = None

    model_config = {"extra": "forbid"}


class UpdateEntryRequest(BaseModel):
    """Fields left as None are not changed."""

    label: Optional[str] = Field(default=None, min_length=1, max_length=250)
    cipher_username: Optional[str] = None
    cipher_password: Optional[str] = None
    cipher_notes: Optional[str] = None
    cipher_extra_notes: Optional[str] = None

    model_config = {"extra": "forbid"}


class SearchEntriesRequest(BaseModel):
    keyword: Optional[str] = Field(default=None, max_length=50)
    page: int = 1
    per_page: int = 50


class EntryPage(BaseModel):
    items: List[EntrySummary]
    pagination: Pagination
