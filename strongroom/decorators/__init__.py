"""
Strongroom decorators module.

Provides decorators for authentication and authorization.
"""

from .auth import RequireIdentity, require_identity
from .permissions import require_permission

__all__ = [
    # Auth decorators
    "require_identity",
    "RequireIdentity",
    # Permission decorators
    "require_permission",
]
