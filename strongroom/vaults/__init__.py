"""
Strongroom vaults module.

Vault management and the zero-knowledge unseal check.
"""

from .models import CreateVaultRequest, SealedProbe, StrongroomVault, UnsealChallenge
from .seal import NONCE_SIZE, PROBE_SIZE, TAG_SIZE, UNSEAL_MARKER, VaultSeal
from .vaults import VaultManager

__all__ = [
    "VaultManager",
    "VaultSeal",
    "StrongroomVault",
    "SealedProbe",
    "UnsealChallenge",
    "CreateVaultRequest",
    "UNSEAL_MARKER",
    "NONCE_SIZE",
    "TAG_SIZE",
    "PROBE_SIZE",
]
