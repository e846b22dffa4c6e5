"""
Permission guard for Strongroom.

Maps a role set and account status to an allow/deny verdict for one permission.
"""

import logging
from typing import Union

from ..errors import UnknownRole
from .catalog import RoleCatalog, RolesInput
from .models import (
    DenyReason,
    PermissionLike,
    UserStatus,
    Verdict,
    check_permission,
    to_permission,
)

logger = logging.getLogger(__name__)


class PermissionGuard:
    """
    Pure permission check over a RoleCatalog.

    Never touches storage, so the same inputs always give the same verdict.

    Example:
        ```python
        guard = PermissionGuard(RoleCatalog.default())

        verdict = guard.check({"Editor"}, "active", "entries.create")
        if verdict:
            ...
        ```
    """

    def __init__(self, catalog: RoleCatalog) -> None:
        self.catalog = catalog

    def check(
        self,
        roles: RolesInput,
        status: Union[UserStatus, str],
        required: PermissionLike,
    ) -> Verdict:
        """
        Decide whether a user holding ``roles`` may use ``required``.

        Args:
            roles: Role names held by the user
            status: Account status; anything but active is denied
            required: Permission being requested

        Returns:
            Verdict.allow, or Verdict.deny with UserInactive,
            InvalidRoleConfiguration or InsufficientPermission

        Raises:
            ValueError: If ``required`` is not a valid permission string
        """
        permission = to_permission(required)

        if status != UserStatus.ACTIVE:
            return Verdict.deny(DenyReason.USER_INACTIVE, permission)

        try:
            granted = self.catalog.expand(roles)
        except UnknownRole as e:
            logger.warning("Denied %s: %s", permission, e)
            return Verdict.deny(DenyReason.INVALID_ROLE_CONFIGURATION, permission)

        if check_permission(granted, permission):
            return Verdict.allow(permission)

        return Verdict.deny(DenyReason.INSUFFICIENT_PERMISSION, permission)
