"""
Tests for strongroom.cli module.
"""

import json
import logging
import time
from unittest.mock import AsyncMock, patch

import jwt
import pytest
from typer.testing import CliRunner

from strongroom.cli.main import app
from strongroom.utils.supabase import TENANTS_TABLE, USERS_TABLE

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI callback reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestRolesCommands:
    """Tests for the roles command group."""

    def test_list_default_roles(self):
        result = runner.invoke(app, ["roles", "list"])

        assert result.exit_code == 0
        for role in ("SystemAdmin", "Admin", "Editor", "Viewer"):
            assert role in result.output

    def test_list_from_file(self, tmp_path):
        path = tmp_path / "roles.json"
        path.write_text(json.dumps({"Auditor": ["entries.list"]}))

        result = runner.invoke(app, ["roles", "list", "--roles-file", str(path)])

        assert result.exit_code == 0
        assert "Auditor" in result.output
        assert "Viewer" not in result.output

    def test_list_bad_file(self, tmp_path):
        path = tmp_path / "roles.json"
        path.write_text("not json")

        result = runner.invoke(app, ["roles", "list", "-r", str(path)])

        assert result.exit_code == 1
        assert "Error loading role catalog" in result.output

    def test_check_allowed(self):
        result = runner.invoke(app, ["roles", "check", "Editor", "--permission", "entries.create"])

        assert result.exit_code == 0
        assert "Allowed" in result.output

    def test_check_denied(self):
        result = runner.invoke(app, ["roles", "check", "Viewer", "Editor", "-p", "entries.delete"])

        assert result.exit_code == 1
        assert "InsufficientPermission" in result.output

    def test_check_unknown_role(self):
        result = runner.invoke(app, ["roles", "check", "Ghost", "-p", "entries.view"])

        assert result.exit_code == 1
        assert "InvalidRoleConfiguration" in result.output

    def test_check_inactive(self):
        result = runner.invoke(app, ["roles", "check", "Admin", "-p", "entries.view", "--inactive"])

        assert result.exit_code == 1
        assert "UserInactive" in result.output

    def test_check_malformed_permission(self):
        result = runner.invoke(app, ["roles", "check", "Admin", "-p", "entries"])

        assert result.exit_code == 2


class TestSetupAndTenants:
    """Tests for setup and tenants commands against in-memory storage."""

    def test_setup_then_list(self, strongroom, fake_supabase):
        with patch("strongroom.client.Strongroom.create", AsyncMock(return_value=strongroom)):
            result = runner.invoke(
                app, ["setup", "Operators", "root", "--password-hash", "$argon2id$v=19$x"]
            )
            assert result.exit_code == 0
            assert "System admin tenant created" in result.output

            user = fake_supabase.tables[USERS_TABLE][0]
            token = jwt.encode(
                {"sub": user["id"], "tid": user["tenant_id"], "exp": int(time.time()) + 60},
                strongroom.config.jwt_secret,
                algorithm="HS256",
            )
            result = runner.invoke(app, ["tenants", "list", "--token", token])

        assert result.exit_code == 0
        assert "Operators" in result.output
        assert len(fake_supabase.tables[TENANTS_TABLE]) == 1

    def test_setup_twice_fails(self, strongroom):
        with patch("strongroom.client.Strongroom.create", AsyncMock(return_value=strongroom)):
            first = runner.invoke(app, ["setup", "Operators", "root", "--password-hash", "h"])
            second = runner.invoke(app, ["setup", "Again", "root2", "--password-hash", "h"])

        assert first.exit_code == 0
        assert second.exit_code == 1
        assert "already exists" in second.output

    def test_tenants_list_bad_token(self, strongroom):
        with patch("strongroom.client.Strongroom.create", AsyncMock(return_value=strongroom)):
            result = runner.invoke(app, ["tenants", "list", "-t", "not-a-token"])

        assert result.exit_code == 1
        assert "Error" in result.output
