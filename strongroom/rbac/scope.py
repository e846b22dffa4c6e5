"""
Tenant scoping for Strongroom.

Confines every resource access to the caller's own tenant, with the single
exception of callers from the system-admin tenant.
"""

import logging
from typing import TYPE_CHECKING, Union
from uuid import UUID

from ..errors import AccessDenied, NotFound
from .guard import PermissionGuard
from .models import DenyReason, PermissionLike, Verdict, to_permission

if TYPE_CHECKING:
    from ..auth.models import Identity

logger = logging.getLogger(__name__)


class TenantScope:
    """
    Two-stage authorization: permission first, then tenant boundary.

    A capability such as ``vaults.edit`` never crosses a tenant boundary
    unless the caller belongs to the system-admin tenant.

    Example:
        ```python
        scope = TenantScope(PermissionGuard(RoleCatalog.default()))

        verdict = scope.authorize(identity, vault.tenant_id, "vaults.view")

        # Raising form used by the stores
        scope.enforce(identity, vault.tenant_id, "vaults.edit")
        ```
    """

    def __init__(self, guard: PermissionGuard) -> None:
        self.guard = guard

    def authorize(
        self,
        caller: "Identity",
        target_tenant_id: Union[UUID, str],
        required: PermissionLike,
    ) -> Verdict:
        """
        Decide whether ``caller`` may use ``required`` on a resource owned by
        ``target_tenant_id``.

        A Deny from the permission check is returned unchanged. After an
        Allow, callers outside the system-admin tenant must match the target
        tenant, otherwise the verdict is Deny(CrossTenantAccess).
        """
        verdict = self.guard.check(caller.roles, caller.status, required)
        if not verdict.allowed:
            return verdict

        if caller.is_system_admin_tenant:
            return verdict

        if caller.tenant_id != UUID(str(target_tenant_id)):
            return Verdict.deny(DenyReason.CROSS_TENANT_ACCESS, verdict.permission)

        return verdict

    def enforce(
        self,
        caller: "Identity",
        target_tenant_id: Union[UUID, str],
        required: PermissionLike,
    ) -> Verdict:
        """
        Raising form of ``authorize``.

        Raises:
            AccessDenied: Carrying the deny verdict
        """
        verdict = self.authorize(caller, target_tenant_id, required)
        if not verdict.allowed:
            self._log_denial(caller, target_tenant_id, verdict)
            raise AccessDenied(verdict)
        return verdict

    def enforce_owned(
        self,
        caller: "Identity",
        owner_tenant_id: Union[UUID, str],
        required: PermissionLike,
        not_found: str,
    ) -> Verdict:
        """
        Raising form for a resource that was looked up by id.

        A resource owned by another tenant is reported exactly like a missing
        one, whatever the caller's roles, so ids cannot be probed across
        tenants. Same-tenant denials still raise AccessDenied.

        Args:
            not_found: Message of the NotFound raised for a missing resource

        Raises:
            NotFound: If the resource belongs to a tenant the caller cannot reach
            AccessDenied: For any other deny verdict
        """
        if not caller.is_system_admin_tenant and caller.tenant_id != UUID(str(owner_tenant_id)):
            self._log_denial(
                caller,
                owner_tenant_id,
                Verdict.deny(DenyReason.CROSS_TENANT_ACCESS, to_permission(required)),
            )
            raise NotFound(not_found)

        return self.enforce(caller, owner_tenant_id, required)

    def _log_denial(
        self,
        caller: "Identity",
        target_tenant_id: Union[UUID, str],
        verdict: Verdict,
    ) -> None:
        logger.info(
            "Denied %s for user %s (tenant %s -> %s): %s",
            verdict.permission,
            caller.user_id,
            caller.tenant_id,
            target_tenant_id,
            verdict.reason.value,
        )
