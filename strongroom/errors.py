"""
Strongroom exceptions.

Every error raised by the core derives from StrongroomError and also from the
builtin exception the caller would naturally catch for that situation.
"""

from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from .rbac.models import Verdict


class StrongroomError(Exception):
    """Base class for all Strongroom errors."""

    code = "StrongroomError"


# Authorization


class UnknownRole(StrongroomError, ValueError):
    """Raised when a role name is not registered in the role catalog."""

    code = "UnknownRole"

    def __init__(self, roles: Iterable[str]) -> None:
        self.roles = sorted(roles)
        super().__init__(f"Invalid roles: {', '.join(self.roles)}")


class RoleCatalogError(StrongroomError):
    """The role catalog could not be loaded. Fatal at startup."""

    code = "RoleCatalogError"


class AccessDenied(StrongroomError, PermissionError):
    """
    Raised by stores when TenantScope denies an operation.

    The verdict keeps the precise reason for logging. The message shown to the
    caller is generic for cross-tenant denials so that resource existence in
    other tenants is never confirmed.
    """

    code = "AccessDenied"

    def __init__(self, verdict: "Verdict") -> None:
        self.verdict = verdict
        super().__init__(verdict.public_message())

    @property
    def reason(self):
        return self.verdict.reason


class InvalidToken(StrongroomError, PermissionError):
    code = "InvalidToken"


# Vault seal


class InvalidProbeFormat(StrongroomError, ValueError):
    """The submitted unseal check does not have the expected envelope shape."""

    code = "InvalidProbeFormat"


class VaultCorrupted(StrongroomError):
    """A stored vault has no usable unseal check."""

    code = "VaultCorrupted"


class ProtocolViolation(StrongroomError, PermissionError):
    """A client tried to send secret material (password, key, plaintext) to the server."""

    code = "ProtocolViolation"

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None) -> None:
        self.fields = sorted(fields or [])
        super().__init__(message)


# Stores


class NotFound(StrongroomError, LookupError):
    code = "NotFound"


class InvalidPageSize(StrongroomError, ValueError):
    code = "InvalidPageSize"


class InvalidStatusTransition(StrongroomError, ValueError):
    code = "InvalidStatusTransition"


class LimitReached(StrongroomError, ValueError):
    code = "LimitReached"


class TenantNotEmpty(StrongroomError, ValueError):
    code = "TenantNotEmpty"


class VaultNotEmpty(StrongroomError, ValueError):
    code = "VaultNotEmpty"
