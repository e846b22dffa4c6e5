"""
Permission decorators for Strongroom.

Provides decorators that run the tenant-scoped permission check before the
wrapped function executes.
"""

import functools
from typing import Any, Callable, List, Optional, Union
from uuid import UUID

from ..auth.models import Identity
from .auth import _find_strongroom


def require_permission(
    permission: Union[str, List[str]],
    *,
    strongroom=None,
    tenant_id_param: str = "tenant_id",
):
    """
    Decorator requiring permission(s) on the tenant named by a keyword argument.

    Every listed permission must be granted. The check goes through
    TenantScope, so a denial raises AccessDenied with the same public message
    a store would produce.

    Args:
        permission: Permission string or list of permissions
        strongroom: Strongroom client instance
        tenant_id_param: Name of the keyword carrying the target tenant id

    Usage:
        ```python
        @require_identity(strongroom=sr)
        @require_permission("vaults.create", strongroom=sr)
        async def create_vault(authorization: str, tenant_id: UUID, identity: Identity = None):
            ...
        ```

    Note:
        - Requires @require_identity to be applied first
        - Expects 'identity' and the tenant id parameter in kwargs
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            identity: Optional[Identity] = kwargs.get("identity")
            if not identity:
                raise ValueError(
                    "Identity not found in request. "
                    "Apply @require_identity decorator before @require_permission."
                )

            tenant_id = kwargs.get(tenant_id_param)
            if not tenant_id:
                raise ValueError(
                    f"Tenant ID not found. "
                    f"Pass '{tenant_id_param}' parameter to the function."
                )

            if isinstance(tenant_id, str):
                tenant_id = UUID(tenant_id)

            instance = _find_strongroom(strongroom, args, kwargs)
            if not instance:
                raise ValueError(
                    "Strongroom instance not provided. "
                    "Pass it via decorator: @require_permission(..., strongroom=sr)"
                )

            permissions_list = [permission] if isinstance(permission, str) else permission
            for required in permissions_list:
                instance.scope.enforce(identity, tenant_id, required)

            return await func(*args, **kwargs)

        return wrapper

    return decorator
