"""
Strongroom RBAC module.

Role catalog, permission guard and tenant scoping.
"""

from .catalog import DEFAULT_ROLES, SYSTEM_ADMIN_ROLE, RoleCatalog, parse_roles
from .guard import PermissionGuard
from .models import (
    Action,
    DenyReason,
    Permission,
    Resource,
    UserStatus,
    Verdict,
    check_permission,
)
from .scope import TenantScope

__all__ = [
    # Engine
    "RoleCatalog",
    "PermissionGuard",
    "TenantScope",
    # Models
    "Permission",
    "Resource",
    "Action",
    "UserStatus",
    "DenyReason",
    "Verdict",
    # Utilities
    "DEFAULT_ROLES",
    "SYSTEM_ADMIN_ROLE",
    "check_permission",
    "parse_roles",
]
