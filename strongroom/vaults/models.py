"""
Strongroom vault models.

Pydantic models for vaults and their unseal probes.
"""

import base64
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class SealedProbe(BaseModel):
    """
    Opaque authenticated-ciphertext artifact stored with a vault.

    The client encrypts a public marker with its derived key and submits the
    result. The server keeps the bytes verbatim (nonce followed by ciphertext
    and tag) and never interprets them.
    """

    nonce: bytes
    ciphertext: bytes = Field(repr=False)

    model_config = {"frozen": True}

    @classmethod
    def from_bytes(cls, raw: bytes, nonce_size: int) -> "SealedProbe":
        return cls(nonce=raw[:nonce_size], ciphertext=raw[nonce_size:])

    def to_bytes(self) -> bytes:
        return self.nonce + self.ciphertext

    def to_base64(self) -> str:
        return base64.b64encode(self.to_bytes()).decode("ascii")

    def __len__(self) -> int:
        return len(self.nonce) + len(self.ciphertext)


class StrongroomVault(BaseModel):
    """
    Strongroom vault model - represents a vault in the strongroom_vaults table.

    A vault belongs to exactly one tenant and is never shared.
    """

    id: UUID
    tenant_id: UUID
    name: str

    # Base64 of the SealedProbe envelope, exactly as submitted
    unseal_check: Optional[str] = Field(default=None, repr=False)

    # Timestamps
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
        "json_schema_extra": {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "tenant_id": "456e7890-e89b-12d3-a456-426614174000",
                "name": "Operations",
                "unseal_check": "3q2+7w...",
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-01T00:00:00Z",
            }
        },
    }


class CreateVaultRequest(BaseModel):
    """Request model for creating a new vault."""

    name: str = Field(..., min_length=1, max_length=50)


class UpdateVaultRequest(BaseModel):
    """Request model for renaming a vault."""

    name: str = Field(..., min_length=1, max_length=50)


class UnsealChallenge(BaseModel):
    """
    What the unseal endpoint hands back.

    The client decrypts ``unseal_check`` locally and compares the result with
    the public marker. The server never learns the outcome.
    """

    vault_id: UUID
    unseal_check: str
    nonce_size: int
    tag_size: int

    model_config = {"frozen": True}
