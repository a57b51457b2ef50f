"""
Integration tests for the command line interface.

Runs commands through typer's CliRunner against a SQLite database in a
temporary directory.
"""

import json

import pytest
import yaml
from typer.testing import CliRunner

from userservice.adapters.cli.main import app


class TestUsersCommands:
    """Test suite for the users command group."""

    @pytest.fixture
    def runner(self):
        """Create CLI runner."""
        return CliRunner()

    @pytest.fixture
    def config_path(self, tmp_path):
        """Config file pointing at a fresh SQLite database."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({
            "storage": {"provider": "sqlite", "path": str(tmp_path / "users.sqlite3")},
            "logging": {"console": False},
        }))
        return str(path)

    def invoke(self, runner, config_path, *args):
        return runner.invoke(app, ["users", *args, "--config", config_path])

    def create_user(self, runner, config_path, email="test@example.com", name="Jane Doe"):
        result = self.invoke(runner, config_path, "create", email, name, "--json")
        assert result.exit_code == 0, result.stdout
        return json.loads(result.stdout)

    def test_create_and_get(self, runner, config_path):
        """Test creating a user and reading it back by id and email."""
        user = self.create_user(runner, config_path, name="  Jane Doe  ")
        assert user["name"] == "Jane Doe"

        by_id = self.invoke(runner, config_path, "get", user["id"], "--json")
        by_email = self.invoke(runner, config_path, "get-by-email", "test@example.com", "--json")

        assert json.loads(by_id.stdout) == user
        assert json.loads(by_email.stdout)["id"] == user["id"]

    def test_create_table_output(self, runner, config_path):
        """Test the human-readable output of create."""
        result = self.invoke(runner, config_path, "create", "table@example.com", "Jane")

        assert result.exit_code == 0
        assert "User created" in result.stdout

    def test_create_invalid_email(self, runner, config_path):
        """Test that validation failures exit non-zero with a friendly message."""
        result = self.invoke(runner, config_path, "create", "not-an-email", "Jane")

        assert result.exit_code == 1
        assert "Invalid email address" in result.stdout
        assert "Traceback" not in result.stdout

    def test_create_duplicate(self, runner, config_path):
        """Test that a duplicate email is reported."""
        self.create_user(runner, config_path, email="x@y.com")

        result = self.invoke(runner, config_path, "create", "x@y.com", "Other")

        assert result.exit_code == 1
        assert "already exists" in result.stdout

    def test_get_missing_user_verbose(self, runner, config_path):
        """Test that --verbose adds technical details."""
        result = runner.invoke(
            app, ["users", "get", "missing", "--config", config_path, "--verbose"]
        )

        assert result.exit_code == 1
        assert "User not found" in result.stdout
        assert "UserNotFoundError" in result.stdout

    def test_list_newest_first(self, runner, config_path):
        """Test listing with limit and offset."""
        for i in range(3):
            self.create_user(runner, config_path, email=f"user{i}@example.com")

        result = self.invoke(runner, config_path, "list", "--limit", "2", "--json")
        rest = self.invoke(runner, config_path, "list", "--limit", "2", "--offset", "2", "--json")

        assert [u["email"] for u in json.loads(result.stdout)] == [
            "user2@example.com",
            "user1@example.com",
        ]
        assert [u["email"] for u in json.loads(rest.stdout)] == ["user0@example.com"]

    def test_update(self, runner, config_path):
        """Test renaming a user."""
        user = self.create_user(runner, config_path)

        result = self.invoke(runner, config_path, "update", user["id"], "Janet", "--json")

        assert result.exit_code == 0
        assert json.loads(result.stdout)["name"] == "Janet"

    def test_delete_with_yes(self, runner, config_path):
        """Test deleting without a prompt."""
        user = self.create_user(runner, config_path)

        result = self.invoke(runner, config_path, "delete", user["id"], "--yes")
        after = self.invoke(runner, config_path, "get", user["id"])

        assert result.exit_code == 0
        assert "deleted" in result.stdout
        assert after.exit_code == 1

    def test_delete_prompt_declined(self, runner, config_path):
        """Test that answering no keeps the user."""
        user = self.create_user(runner, config_path)

        result = runner.invoke(
            app,
            ["users", "delete", user["id"], "--config", config_path],
            input="n\n",
        )
        after = self.invoke(runner, config_path, "get", user["id"])

        assert result.exit_code != 0
        assert after.exit_code == 0


class TestServiceCommands:
    """Test suite for health and config commands."""

    @pytest.fixture
    def runner(self):
        """Create CLI runner."""
        return CliRunner()

    def test_health_ready(self, runner, tmp_path):
        """Test that health exits 0 when storage is reachable."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({
            "storage": {"provider": "memory"},
            "logging": {"console": False},
        }))

        result = runner.invoke(app, ["health", "--config", str(config_path)])

        assert result.exit_code == 0
        assert "Service is ready" in result.stdout

    def test_missing_config_file(self, runner, tmp_path):
        """Test that a missing config file is reported."""
        result = runner.invoke(app, ["health", "--config", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "File not found" in result.stdout

    def test_config_init_and_show(self, runner, tmp_path):
        """Test creating and then showing a configuration file."""
        path = tmp_path / "generated.yaml"

        init = runner.invoke(app, ["config", "--init", "--path", str(path)])
        show = runner.invoke(app, ["config", "--show", "--path", str(path)])

        assert init.exit_code == 0
        assert path.exists()
        assert show.exit_code == 0
        assert "max_page_size: 100" in show.stdout

    def test_no_arguments_shows_help(self, runner):
        """Test that running without a command prints usage."""
        result = runner.invoke(app, [])

        assert "Usage" in result.output
