"""
Strongroom RBAC models.

Pydantic models for permissions and authorization verdicts.
"""

from enum import Enum
from typing import Iterable, Optional, Union

from pydantic import BaseModel


class Resource(str, Enum):
    """Resource kinds a permission can target."""

    TENANTS = "tenants"
    USERS = "users"
    VAULTS = "vaults"
    ENTRIES = "entries"
    BUCKETS = "buckets"
    DIRS = "dirs"
    FILES = "files"


class Action(str, Enum):
    """Actions a permission can grant. MANAGE implies every other action."""

    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    LIST = "list"
    VIEW = "view"
    MANAGE = "manage"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class DenyReason(str, Enum):
    """Why an authorization check was denied."""

    USER_INACTIVE = "UserInactive"
    INVALID_ROLE_CONFIGURATION = "InvalidRoleConfiguration"
    INSUFFICIENT_PERMISSION = "InsufficientPermission"
    CROSS_TENANT_ACCESS = "CrossTenantAccess"


class Permission(BaseModel):
    """
    Represents a single permission in the resource.action format.

    Examples:
        - entries.view - View a single entry
        - vaults.list - List vaults
        - users.manage - Every action on users
    """

    resource: Resource
    action: Action

    model_config = {"frozen": True}

    @classmethod
    def from_string(cls, permission: str) -> "Permission":
        """Parse a permission string into a Permission object."""
        resource, sep, action = permission.partition(".")
        if not sep:
            raise ValueError(
                f"Invalid permission format: {permission}. Expected 'resource.action'"
            )
        try:
            return cls(resource=Resource(resource), action=Action(action))
        except ValueError:
            raise ValueError(f"Invalid permission: {permission}") from None

    def to_string(self) -> str:
        """Convert to permission string format."""
        return f"{self.resource.value}.{self.action.value}"

    def __str__(self) -> str:
        return self.to_string()

    def manage_permission(self) -> "Permission":
        """The manage permission for this permission's resource."""
        return Permission(resource=self.resource, action=Action.MANAGE)

    def implies(self, required: "Permission") -> bool:
        """
        Check if this permission grants the required permission.

        A manage permission grants every action on its own resource. Nothing
        grants manage except manage itself.
        """
        if self.resource != required.resource:
            return False
        return self.action == required.action or self.action == Action.MANAGE


PermissionLike = Union[str, Permission]


def to_permission(permission: PermissionLike) -> Permission:
    if isinstance(permission, Permission):
        return permission
    return Permission.from_string(permission)


def check_permission(granted: Iterable[str], required: PermissionLike) -> bool:
    """
    Check if any granted permission satisfies the required permission.

    Args:
        granted: Permission strings the user has
        required: The permission being checked

    Returns:
        True if permission is granted, False otherwise

    Examples:
        >>> check_permission(["entries.view"], "entries.view")
        True
        >>> check_permission(["entries.manage"], "entries.delete")
        True
        >>> check_permission(["entries.delete"], "entries.manage")
        False
    """
    required_perm = to_permission(required)
    granted = set(granted)
    if required_perm.to_string() in granted:
        return True
    return required_perm.manage_permission().to_string() in granted


_DENY_MESSAGES = {
    DenyReason.USER_INACTIVE: "User account is inactive.",
    DenyReason.INVALID_ROLE_CONFIGURATION: "User has an invalid role configuration.",
}


class Verdict(BaseModel):
    """
    Result of an authorization check.

    Verdicts are values: checks never raise for an ordinary denial. Truthiness
    follows ``allowed``.
    """

    allowed: bool
    permission: str
    reason: Optional[DenyReason] = None

    model_config = {"frozen": True}

    @classmethod
    def allow(cls, permission: PermissionLike) -> "Verdict":
        return cls(allowed=True, permission=str(permission))

    @classmethod
    def deny(cls, reason: DenyReason, permission: PermissionLike) -> "Verdict":
        return cls(allowed=False, permission=str(permission), reason=reason)

    def __bool__(self) -> bool:
        return self.allowed

    def public_message(self) -> str:
        """
        Message safe to show the caller.

        Cross-tenant denials stay generic so they never confirm that a
        resource exists in another tenant.
        """
        if self.allowed:
            return "Allowed."
        if self.reason == DenyReason.CROSS_TENANT_ACCESS:
            return "Access denied."
        if self.reason in _DENY_MESSAGES:
            return _DENY_MESSAGES[self.reason]
        return f"You do not have permission: {self.permission}."
