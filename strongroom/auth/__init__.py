"""
Strongroom auth module.

Handles users and the authenticated identity.
"""

from .models import CreateUserRequest, Identity, StrongroomUser, UpdateUserStatusRequest
from .tokens import IdentityResolver
from .users import UserManager

__all__ = [
    "UserManager",
    "IdentityResolver",
    "StrongroomUser",
    "Identity",
    "CreateUserRequest",
    "UpdateUserStatusRequest",
]
