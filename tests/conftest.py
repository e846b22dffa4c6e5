"""
Pytest configuration and fixtures for Strongroom tests.

Provides an in-memory stand-in for the Supabase PostgREST table builder and
fixtures for tenants, identities and vaults.
"""

import os
import re
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, Mock
from uuid import UUID

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from strongroom.auth.models import Identity
from strongroom.client import Strongroom
from strongroom.config import StrongroomConfig
from strongroom.utils.supabase import StrongroomSupabaseClient
from strongroom.vaults.seal import UNSEAL_MARKER

JWT_SECRET = "test-jwt-secret-0123456789abcdef0123456789"


def _norm(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    return value


def _like_regex(pattern: str) -> "re.Pattern":
    """Translate a SQL LIKE pattern (backslash escapes) into a regex."""
    out = []
    chars = iter(pattern)
    for ch in chars:
        if ch == "\\":
            out.append(re.escape(next(chars, "\\")))
        elif ch == "%":
            out.append(".*")
        elif ch == "_":
            out.append(".")
        else:
            out.append(re.escape(ch))
    return re.compile("".join(out), re.IGNORECASE | re.DOTALL)


class FakeResult:
    def __init__(self, data: List[Dict[str, Any]], count: Optional[int] = None) -> None:
        self.data = data
        self.count = count


class FakeQuery:
    """Chainable builder mimicking the PostgREST calls Strongroom makes."""

    def __init__(self, backend: "FakeSupabase", table: str) -> None:
        self.backend = backend
        self.table = table
        self.rows = backend.tables.setdefault(table, [])
        self.op = "select"
        self.columns = "*"
        self.count_mode: Optional[str] = None
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orders: List[tuple] = []
        self.bounds: Optional[tuple] = None

    def select(self, columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self.op = "select"
        self.columns = columns
        self.count_mode = count
        return self

    def insert(self, data: Any) -> "FakeQuery":
        self.op = "insert"
        self.payload = data
        return self

    def update(self, data: Dict[str, Any]) -> "FakeQuery":
        self.op = "update"
        self.payload = data
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: _norm(row.get(column)) == _norm(value))
        return self

    def neq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: _norm(row.get(column)) != _norm(value))
        return self

    def ilike(self, column: str, pattern: str) -> "FakeQuery":
        regex = _like_regex(pattern)
        self.filters.append(lambda row: bool(regex.fullmatch(str(row.get(column, "")))))
        return self

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        wanted = {_norm(v) for v in values}
        self.filters.append(lambda row: _norm(row.get(column)) in wanted)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.orders.append((column, desc))
        return self

    def range(self, start: int, end: int) -> "FakeQuery":
        self.bounds = (start, end + 1)
        return self

    def limit(self, size: int) -> "FakeQuery":
        self.bounds = (0, size)
        return self

    def _matching(self) -> List[Dict[str, Any]]:
        return [row for row in self.rows if all(f(row) for f in self.filters)]

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.columns == "*":
            return dict(row)
        keep = [c.strip() for c in self.columns.split(",")]
        return {k: row.get(k) for k in keep}

    async def execute(self) -> FakeResult:
        self.backend.calls.append((self.table, self.op))

        if self.op == "insert":
            new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
            for row in new_rows:
                self.rows.append(dict(row))
            return FakeResult([dict(row) for row in new_rows])

        matched = self._matching()

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResult([dict(row) for row in matched])

        if self.op == "delete":
            for row in matched:
                self.rows.remove(row)
            return FakeResult([dict(row) for row in matched])

        for column, desc in reversed(self.orders):
            matched.sort(key=lambda row: row.get(column), reverse=desc)

        count = len(matched) if self.count_mode else None
        if self.bounds:
            matched = matched[self.bounds[0]:self.bounds[1]]

        return FakeResult([self._project(row) for row in matched], count)


class FakeSupabase:
    """In-memory tables keyed by name; every executed request is recorded."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client with a per-table query builder cache."""
    client = AsyncMock()

    query_builders = {}

    def table_mock(table_name: str):
        if table_name not in query_builders:
            query_builder = Mock()
            # Make all methods return self for chaining
            for name in ("select", "insert", "update", "delete", "eq", "neq",
                         "ilike", "order", "range", "limit"):
                setattr(query_builder, name, Mock(return_value=query_builder))
            # Default execute returns empty result
            query_builder.execute = AsyncMock(return_value=Mock(data=[], count=0))
            query_builders[table_name] = query_builder
        return query_builders[table_name]

    client.table = Mock(side_effect=table_mock)
    client._query_builders = query_builders  # Expose for test configuration

    return client


@pytest.fixture
def strongroom_config():
    """Create a test StrongroomConfig."""
    return StrongroomConfig(
        supabase_url="https://test.supabase.co",
        supabase_key="test-service-key-12345678901234567890",
        db_schema="public",
        jwt_secret=JWT_SECRET,
        debug=True,
    )


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def strongroom(strongroom_config, fake_supabase):
    """Create a Strongroom instance backed by in-memory tables."""
    client = StrongroomSupabaseClient(config=strongroom_config, client=fake_supabase)
    return Strongroom(config=strongroom_config, client=client)


@pytest.fixture
async def system_seed(strongroom):
    """Seed the system admin tenant; returns (tenant, user)."""
    return await strongroom.tenants.seed_system_tenant(
        name="Operators",
        username="root",
        password_hash="$argon2id$v=19$root-hash",
    )


@pytest.fixture
def system_identity(system_seed):
    _, user = system_seed
    return Identity.for_user(user, is_system_admin_tenant=True)


@pytest.fixture
async def tenant(strongroom, system_identity):
    return await strongroom.tenants.create(system_identity, name="Acme Corp")


@pytest.fixture
async def other_tenant(strongroom, system_identity):
    return await strongroom.tenants.create(system_identity, name="Globex")


async def make_identity(strongroom, creator, tenant, username, roles) -> Identity:
    user = await strongroom.users.create(
        creator,
        tenant_id=tenant.id,
        username=username,
        password_hash=f"hash-of-{username}",
        roles=roles,
    )
    return Identity.for_user(user, is_system_admin_tenant=False)


@pytest.fixture
def identity_factory(strongroom, system_identity):
    """Create a user in a tenant and return its Identity."""

    async def factory(tenant, username, roles):
        return await make_identity(strongroom, system_identity, tenant, username, roles)

    return factory


@pytest.fixture
async def admin_identity(strongroom, system_identity, tenant):
    return await make_identity(strongroom, system_identity, tenant, "alice", ["Admin"])


@pytest.fixture
async def editor_identity(strongroom, system_identity, tenant):
    return await make_identity(strongroom, system_identity, tenant, "eddie", ["Editor"])


@pytest.fixture
async def viewer_identity(strongroom, system_identity, tenant):
    return await make_identity(strongroom, system_identity, tenant, "vera", ["Viewer"])


@pytest.fixture
async def other_admin_identity(strongroom, system_identity, other_tenant):
    return await make_identity(strongroom, system_identity, other_tenant, "mallory", ["Admin"])


@pytest.fixture
def vault_key():
    """A client-side derived key. The server side of the tests never sees it."""
    return AESGCM.generate_key(bit_length=256)


def make_probe(key: bytes) -> bytes:
    nonce = os.urandom(12)
    return nonce + AESGCM(key).encrypt(nonce, UNSEAL_MARKER, None)


@pytest.fixture
def probe_factory():
    return make_probe


@pytest.fixture
def unseal_probe(vault_key):
    """Probe built the way a client builds it: the marker sealed under the vault key."""
    return make_probe(vault_key)


@pytest.fixture
async def vault(strongroom, system_identity, tenant, unseal_probe):
    return await strongroom.vaults.create(
        system_identity,
        tenant_id=tenant.id,
        name="Operations",
        unseal_check=unseal_probe,
    )
