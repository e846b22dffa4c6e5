"""
Authentication decorators for Strongroom.

Provides decorators that resolve the caller's Identity from an access token.
"""

import functools
from typing import Any, Callable, Optional

from ..auth.models import Identity
from ..errors import InvalidToken


def _find_strongroom(strongroom, args, kwargs):
    if strongroom:
        return strongroom
    if "strongroom" in kwargs:
        return kwargs["strongroom"]
    if args and hasattr(args[0], "identities"):
        # Might be a method on the client itself
        return args[0]
    return None


def require_identity(func: Optional[Callable] = None, *, strongroom=None):
    """
    Decorator that resolves the access token and injects ``identity``.

    The token is read from the ``authorization`` keyword (``Bearer`` prefix
    optional), or from ``token`` / ``access_token``.

    Args:
        func: The function to decorate
        strongroom: Strongroom client instance (optional, can be passed during decoration)

    Usage:
        ```python
        @require_identity(strongroom=sr)
        async def list_vaults(authorization: str, identity: Identity = None):
            return await sr.vaults.list(identity, identity.tenant_id)
        ```
    """

    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            token = (
                kwargs.get("authorization")
                or kwargs.get("token")
                or kwargs.get("access_token")
            )

            if not token:
                raise InvalidToken(
                    "No authentication token provided. "
                    "Pass token via 'authorization', 'token', or 'access_token' parameter."
                )

            instance = _find_strongroom(strongroom, args, kwargs)
            if not instance:
                raise ValueError(
                    "Strongroom instance not provided. "
                    "Pass it via decorator: @require_identity(strongroom=sr)"
                )

            kwargs["identity"] = await instance.identities.resolve(token)

            return await f(*args, **kwargs)

        return wrapper

    # Support both @require_identity and @require_identity(strongroom=sr)
    if func is None:
        return decorator
    else:
        return decorator(func)


class RequireIdentity:
    """
    Class-based variant bound to one Strongroom client.

    Example:
        ```python
        require_identity = RequireIdentity(sr)

        @require_identity
        async def handler(authorization: str, identity: Identity = None):
            ...

        identity = await require_identity.dependency(request.headers["Authorization"])
        ```
    """

    def __init__(self, strongroom) -> None:
        self.strongroom = strongroom

    def __call__(self, func: Callable) -> Callable:
        return require_identity(func, strongroom=self.strongroom)

    async def dependency(self, authorization: str) -> Identity:
        """
        Resolve an Authorization header value directly.

        Raises:
            InvalidToken: If the token is invalid
        """
        return await self.strongroom.identities.resolve(authorization)
