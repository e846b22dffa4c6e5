"""
Role catalog for Strongroom.

Static role -> permission table, loaded once at process start and read-only
afterwards.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, Mapping, Optional, Union

from ..errors import RoleCatalogError, UnknownRole
from .models import Action, Permission, Resource

if TYPE_CHECKING:
    from ..config import StrongroomConfig

logger = logging.getLogger(__name__)

SYSTEM_ADMIN_ROLE = "SystemAdmin"

RolesInput = Union[str, Iterable[str], None]


def _all(resource: Resource) -> list:
    return [f"{resource.value}.{action.value}" for action in Action]


def _read(resource: Resource) -> list:
    return [f"{resource.value}.list", f"{resource.value}.view"]


DEFAULT_ROLES: Dict[str, list] = {
    SYSTEM_ADMIN_ROLE: (
        _all(Resource.TENANTS)
        + _all(Resource.USERS)
        + _all(Resource.VAULTS)
        + _all(Resource.BUCKETS)
    ),
    "Admin": (
        _read(Resource.TENANTS)
        + _read(Resource.VAULTS)
        + _read(Resource.USERS)
        + _read(Resource.BUCKETS)
        + _all(Resource.ENTRIES)
        + _all(Resource.DIRS)
        + _all(Resource.FILES)
    ),
    "Editor": (
        _read(Resource.TENANTS)
        + _read(Resource.VAULTS)
        + _read(Resource.BUCKETS)
        + ["entries.create", "entries.list", "entries.view"]
        + ["dirs.create", "dirs.list", "dirs.view"]
        + ["files.create", "files.list", "files.view"]
    ),
    "Viewer": (
        _read(Resource.TENANTS)
        + _read(Resource.VAULTS)
        + _read(Resource.BUCKETS)
        + _read(Resource.ENTRIES)
        + _read(Resource.DIRS)
        + _read(Resource.FILES)
    ),
}


def parse_roles(roles: RolesInput) -> FrozenSet[str]:
    """
    Normalise a role list as stored or submitted.

    Accepts a CSV string ("Admin,Viewer") or any iterable of names. Whitespace
    is stripped, blanks dropped, duplicates collapse.
    """
    if roles is None:
        return frozenset()
    if isinstance(roles, str):
        roles = roles.split(",")
    return frozenset(name.strip() for name in roles if name and name.strip())


class RoleCatalog:
    """
    Immutable mapping of role names to permission sets.

    Build one at startup and share it by reference. There is no mutation API;
    the underlying mapping is a read-only proxy over frozensets.

    Example:
        ```python
        catalog = RoleCatalog.default()

        catalog.permissions_for("Viewer")
        # frozenset({"entries.list", "entries.view", ...})

        catalog.expand({"Editor", "Viewer"})
        ```
    """

    def __init__(self, roles: Mapping[str, Iterable[str]]) -> None:
        """
        Build a catalog from a role -> permissions mapping.

        Raises:
            RoleCatalogError: If the mapping is empty, a role name is blank,
                or any permission string is malformed
        """
        if not roles:
            raise RoleCatalogError("Role catalog is empty")

        table: Dict[str, FrozenSet[str]] = {}
        for name, permissions in roles.items():
            if not isinstance(name, str) or not name.strip() or "," in name:
                raise RoleCatalogError(f"Invalid role name: {name!r}")
            if isinstance(permissions, str):
                raise RoleCatalogError(f"Permissions for {name} must be a list")
            try:
                parsed = {Permission.from_string(p).to_string() for p in permissions}
            except (AttributeError, TypeError, ValueError) as e:
                raise RoleCatalogError(f"Role {name}: {e}") from e
            table[name] = frozenset(parsed)

        self._roles: Mapping[str, FrozenSet[str]] = MappingProxyType(table)

    @classmethod
    def default(cls) -> "RoleCatalog":
        """Catalog with the built-in SystemAdmin, Admin, Editor and Viewer roles."""
        return cls(DEFAULT_ROLES)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "RoleCatalog":
        """
        Load a catalog from a JSON file of the form ``{"Role": ["res.action", ...]}``.

        Raises:
            RoleCatalogError: If the file is missing, unreadable or invalid
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise RoleCatalogError(f"Cannot read role catalog {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise RoleCatalogError(f"Role catalog {path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise RoleCatalogError(f"Role catalog {path} must be a JSON object")

        catalog = cls(data)
        logger.info("Loaded %d roles from %s", len(catalog), path)
        return catalog

    @classmethod
    def from_config(cls, config: Optional["StrongroomConfig"]) -> "RoleCatalog":
        """Load from ``config.roles_file`` when set, otherwise the built-in table."""
        if config is not None and config.roles_file is not None:
            return cls.from_file(config.roles_file)
        return cls.default()

    def __contains__(self, role: object) -> bool:
        return role in self._roles

    def __len__(self) -> int:
        return len(self._roles)

    def role_names(self) -> FrozenSet[str]:
        return frozenset(self._roles)

    def permissions_for(self, role: str) -> FrozenSet[str]:
        """
        Get the permission set of a single role.

        Raises:
            UnknownRole: If the role is not registered
        """
        try:
            return self._roles[role]
        except KeyError:
            raise UnknownRole([role]) from None

    def expand(self, roles: RolesInput) -> FrozenSet[str]:
        """
        Union of the permissions of every role in ``roles``.

        Fails closed: a single unknown role invalidates the whole set.

        Raises:
            UnknownRole: Naming every unregistered role
        """
        names = parse_roles(roles)
        self._ensure_known(names)
        granted: set = set()
        for name in names:
            granted.update(self._roles[name])
        return frozenset(granted)

    def validate_roles(self, roles: RolesInput) -> FrozenSet[str]:
        """
        Validate a role list at assignment time.

        Returns:
            The normalised, deduplicated role set

        Raises:
            UnknownRole: If any role is unregistered
            ValueError: If the list is empty
        """
        names = parse_roles(roles)
        if not names:
            raise ValueError("At least one role is required")
        self._ensure_known(names)
        return names

    def _ensure_known(self, names: Iterable[str]) -> None:
        unknown = [name for name in names if name not in self._roles]
        if unknown:
            raise UnknownRole(unknown)
