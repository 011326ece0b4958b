"""Tests for envtree CLI."""

import json

import pytest
import yaml

from envtree.cli import main, create_parser


@pytest.fixture
def clean_db_env(monkeypatch):
    """Remove any DB_* variables from the process environment."""
    import os

    for key in list(os.environ):
        if key.startswith("DB_"):
            monkeypatch.delenv(key)
    return monkeypatch


class TestCLIParser:
    """Tests for CLI argument parsing."""

    def test_parser_creation(self):
        """Test that parser is created correctly."""
        parser = create_parser()
        assert parser.prog == "envtree"

    def test_help_no_error(self):
        """Test that help doesn't raise an error."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_no_args_shows_help(self):
        """Test that no arguments shows help and exits 0."""
        assert main([]) == 0

    def test_version_flag(self):
        """Test --version flag."""
        assert main(["--version"]) == 0


class TestVersionCommand:
    """Tests for the version command."""

    def test_version_output(self, capsys):
        """Test that version command outputs expected info."""
        assert main(["version"]) == 0
        captured = capsys.readouterr()
        assert "envtree" in captured.out
        assert "Python" in captured.out
        assert "pydantic" in captured.out


class TestSchemasCommand:
    """Tests for the schemas command."""

    def test_schemas_list(self, capsys):
        """Test schemas list command."""
        assert main(["schemas", "list"]) == 0
        captured = capsys.readouterr()
        assert "database" in captured.out
        assert "envtree.schemas.database:DATABASE" in captured.out


class TestResolveCommand:
    """Tests for the resolve command."""

    def test_resolve_yaml(self, clean_db_env, capsys):
        """Resolved tree is printed as YAML with derived values."""
        clean_db_env.setenv("DB_SQLITE_POOL_SIZE", "3")
        assert main(["resolve", "-s", "database"]) == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["sqlite"]["pool_size"] == 3
        assert data["sqlite"]["enable_wal"] is True
        assert data["derived"] == {"is_legacy_sqlite": False}

    def test_resolve_json_masks_password(self, clean_db_env, capsys):
        """Passwords are masked unless --show-secrets is given."""
        clean_db_env.setenv("DB_POSTGRESDB_PASSWORD", "hunter2")
        assert main(["resolve", "--format", "json"]) == 0
        out = capsys.readouterr().out
        assert "hunter2" not in out
        assert json.loads(out)["postgresdb"]["password"] == "********"

        assert main(["resolve", "--format", "json", "--show-secrets"]) == 0
        assert json.loads(capsys.readouterr().out)["postgresdb"]["password"] == "hunter2"

    def test_resolve_with_env_file(self, clean_db_env, tmp_path, capsys):
        """An env file is overlaid on the process environment."""
        path = tmp_path / "env.yaml"
        path.write_text("env:\n  DB_TYPE: mysqldb\n  DB_MYSQLDB_PORT: 3307\n", encoding="utf-8")
        assert main(["resolve", "-e", str(path), "--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["type"] == "mysqldb"
        assert data["mysqldb"]["port"] == 3307

    def test_resolve_failure(self, clean_db_env, capsys):
        """Invalid input exits 1 with the variable in the message."""
        clean_db_env.setenv("DB_POSTGRESDB_PORT", "54x")
        assert main(["resolve"]) == 1
        err = capsys.readouterr().err
        assert "DB_POSTGRESDB_PORT" in err
        assert "InvalidNumber" in err


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_environment(self, clean_db_env, capsys):
        """A valid environment exits 0 and lists overrides."""
        clean_db_env.setenv("DB_TYPE", "postgresdb")
        assert main(["validate", "-s", "database"]) == 0
        out = capsys.readouterr().out
        assert "Configuration is valid." in out
        assert "type" in out

    def test_invalid_enum(self, clean_db_env, capsys):
        """An invalid enum names the variable and the allowed values."""
        clean_db_env.setenv("DB_LOGGING_OPTIONS", "bogus")
        assert main(["validate"]) == 1
        err = capsys.readouterr().err
        assert "DB_LOGGING_OPTIONS" in err
        assert "query, error, schema, warn, info, log, all" in err

    def test_missing_env_file(self, clean_db_env, tmp_path, capsys):
        """A missing env file is reported and exits 1."""
        assert main(["validate", "-e", str(tmp_path / "missing.yaml")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_unknown_schema(self, capsys):
        """An unknown schema exits 1."""
        assert main(["validate", "-s", "nope"]) == 1
        assert "nope" in capsys.readouterr().err


class TestDescribeCommand:
    """Tests for the describe command."""

    def test_describe_database(self, capsys):
        """Every variable is listed with its type and default."""
        assert main(["describe", "-s", "database"]) == 0
        out = capsys.readouterr().out
        assert "DB_SQLITE_ENABLE_WAL" in out
        assert "computed from pool_size" in out
        assert "allowed: sqlite, mariadb, mysqldb, postgresdb" in out
        assert "is_legacy_sqlite" in out

    def test_describe_unknown_schema(self, capsys):
        """An unknown schema exits 1."""
        assert main(["describe", "-s", "nope"]) == 1
