"""
Access token verification for Strongroom.

Turns a signed access token into an Identity. Tokens are issued elsewhere;
this module only verifies the signature and claims and then loads the user
and tenant the claims point at.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict
from uuid import UUID

import jwt

from ..errors import InvalidToken
from .models import Identity

if TYPE_CHECKING:
    from ..client import Strongroom

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["sub", "tid", "exp"]


class IdentityResolver:
    """
    Resolves the caller's Identity from a bearer token.

    Claims:
        - ``sub``: user id
        - ``tid``: tenant id
        - ``exp``: expiry (required)

    Example:
        ```python
        identity = await sr.identities.resolve(token)
        verdict = sr.authorize(identity, "vaults.view", vault.tenant_id)
        ```
    """

    def __init__(self, strongroom: "Strongroom") -> None:
        self.strongroom = strongroom
        self.config = strongroom.config

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify a token's signature and required claims.

        Raises:
            InvalidToken: If no secret is configured or the token is invalid
        """
        if not self.config.jwt_secret:
            raise InvalidToken("Token verification is not configured (jwt_secret missing)")

        if token.startswith("Bearer "):
            token = token[7:]

        try:
            return jwt.decode(
                token,
                self.config.jwt_secret,
                algorithms=[self.config.jwt_algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidToken("Token has expired") from None
        except jwt.InvalidTokenError as e:
            logger.info("Rejected access token: %s", e)
            raise InvalidToken("Invalid access token") from None

    async def resolve(self, token: str) -> Identity:
        """
        Verify a token and load the identity it names.

        The tenant must exist and be active, and the user must exist and
        belong to that tenant. An inactive user still resolves: the guard
        denies every permission for it.

        Raises:
            InvalidToken: On any verification or lookup failure
        """
        claims = self.decode(token)

        try:
            user_id = UUID(str(claims["sub"]))
            tenant_id = UUID(str(claims["tid"]))
        except ValueError:
            raise InvalidToken("Invalid access token") from None

        tenant = await self.strongroom.tenants.fetch(tenant_id)
        if not tenant or not tenant.is_active:
            raise InvalidToken("Invalid tenant")

        user = await self.strongroom.users.fetch(user_id)
        if not user or user.tenant_id != tenant.id:
            raise InvalidToken("User not found")

        return Identity.for_user(user, is_system_admin_tenant=tenant.is_system_admin_tenant)
