"""
Strongroom - Multi-tenant, zero-knowledge password vaults on Supabase.

Role-based authorization scoped to tenants, and vaults the server can hand
out but never open.

Example:
    ```python
    from strongroom import Strongroom

    sr = await Strongroom.create()

    # Resolve the caller
    identity = await sr.identities.resolve(authorization_header)

    # Authorization as a value
    verdict = sr.authorize(identity, "vaults.create", identity.tenant_id)

    # Vaults store a client-made probe; the server never sees the key
    vault = await sr.vaults.create(identity, identity.tenant_id, "Ops", probe)
    challenge = await sr.vaults.get_unseal_probe(identity, vault.id)

    # Entries
    entry = await sr.entries.create(identity, vault.id, label="Bank")
    page = await sr.entries.search(identity, vault.id, keyword="ban")
    ```
"""

from .auth import Identity, IdentityResolver, StrongroomUser, UserManager
from .client import Strongroom
from .config import StrongroomConfig, load_config
from .entries import Entry, EntryPage, EntryStatus, EntryStore, EntrySummary, Pagination
from .errors import (
    AccessDenied,
    InvalidPageSize,
    InvalidProbeFormat,
    InvalidStatusTransition,
    InvalidToken,
    LimitReached,
    NotFound,
    ProtocolViolation,
    RoleCatalogError,
    StrongroomError,
    TenantNotEmpty,
    UnknownRole,
    VaultCorrupted,
    VaultNotEmpty,
)
from .rbac import (
    DenyReason,
    Permission,
    PermissionGuard,
    RoleCatalog,
    TenantScope,
    Verdict,
    check_permission,
)
from .tenants import StrongroomTenant, TenantManager
from .vaults import SealedProbe, StrongroomVault, UnsealChallenge, VaultManager, VaultSeal

__version__ = "0.1.0"

__all__ = [
    # Main client
    "Strongroom",
    "StrongroomConfig",
    "load_config",
    # Authorization
    "RoleCatalog",
    "PermissionGuard",
    "TenantScope",
    "Permission",
    "Verdict",
    "DenyReason",
    "check_permission",
    # Tenants and users
    "TenantManager",
    "StrongroomTenant",
    "UserManager",
    "StrongroomUser",
    "Identity",
    "IdentityResolver",
    # Vaults
    "VaultManager",
    "VaultSeal",
    "StrongroomVault",
    "SealedProbe",
    "UnsealChallenge",
    # Entries
    "EntryStore",
    "Entry",
    "EntrySummary",
    "EntryPage",
    "EntryStatus",
    "Pagination",
    # Errors
    "StrongroomError",
    "UnknownRole",
    "RoleCatalogError",
    "AccessDenied",
    "InvalidToken",
    "InvalidProbeFormat",
    "VaultCorrupted",
    "ProtocolViolation",
    "NotFound",
    "InvalidPageSize",
    "InvalidStatusTransition",
    "LimitReached",
    "TenantNotEmpty",
    "VaultNotEmpty",
]
