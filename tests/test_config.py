"""Tests for envtree environment files."""

import os

import pytest

from envtree.config import (
    EnvFileError,
    EnvFileSchema,
    load_env_file,
    load_env_string,
    merged_environment,
    substitute_env_vars,
)
from envtree.resolver import resolve
from envtree.schemas.database import DATABASE


class TestSubstituteEnvVars:
    """Tests for environment variable substitution."""

    def test_simple_var(self):
        """Test simple variable substitution."""
        assert substitute_env_vars("${TEST_VAR}", {"TEST_VAR": "hello"}) == "hello"

    def test_var_with_default(self):
        """Test variable with default value."""
        assert substitute_env_vars("${MISSING_VAR:-default}", {}) == "default"

    def test_var_with_default_when_set(self):
        """Test that set variable takes precedence over default."""
        assert substitute_env_vars("${SET_VAR:-default}", {"SET_VAR": "actual"}) == "actual"

    def test_missing_required_var_raises(self):
        """Test that missing required variable raises KeyError."""
        with pytest.raises(KeyError, match="REQUIRED_VAR"):
            substitute_env_vars("${REQUIRED_VAR}", {})

    def test_nested_structures(self):
        """Test substitution in nested dictionaries and lists."""
        data = {"outer": {"inner": "${V}"}, "items": ["${V}", "static"]}
        assert substitute_env_vars(data, {"V": "x"}) == {
            "outer": {"inner": "x"},
            "items": ["x", "static"],
        }

    def test_non_string_passthrough(self):
        """Test that non-string values pass through unchanged."""
        assert substitute_env_vars(42, {}) == 42
        assert substitute_env_vars(True, {}) is True
        assert substitute_env_vars(None, {}) is None

    def test_process_environment_default(self, monkeypatch):
        """Without a mapping, the process environment is used."""
        monkeypatch.setenv("ENVTREE_SUB_VAR", "proc")
        assert substitute_env_vars("${ENVTREE_SUB_VAR}") == "proc"


class TestEnvFileSchema:
    """Tests for the pydantic env file model."""

    def test_scalars_rendered(self):
        """YAML scalars are rendered as shell-style strings."""
        schema = EnvFileSchema(env={"A": True, "B": False, "C": 5432, "D": 0.5, "E": "x"})
        assert schema.as_environ() == {
            "A": "true",
            "B": "false",
            "C": "5432",
            "D": "0.5",
            "E": "x",
        }

    def test_version_validation(self):
        """Unsupported versions are rejected."""
        with pytest.raises(ValueError, match="Unsupported env file version"):
            EnvFileSchema(version="2.0")

    def test_null_rejected(self):
        """Null values are not valid environment values."""
        with pytest.raises(ValueError):
            EnvFileSchema(env={"A": None})

    def test_unknown_top_level_key_rejected(self):
        """Only version and env are allowed at the top level."""
        with pytest.raises(ValueError):
            EnvFileSchema.model_validate({"env": {}, "extra": 1})


class TestLoadEnv:
    """Tests for loading env files."""

    def test_load_string(self):
        """A YAML document becomes a string mapping."""
        env = load_env_string(
            'version: "1.0"\n'
            "env:\n"
            "  DB_TYPE: postgresdb\n"
            "  DB_POSTGRESDB_PORT: 5433\n"
            "  DB_LOGGING_ENABLED: true\n"
            '  DB_TABLE_PREFIX: ""\n'
        )
        assert env == {
            "DB_TYPE": "postgresdb",
            "DB_POSTGRESDB_PORT": "5433",
            "DB_LOGGING_ENABLED": "true",
            "DB_TABLE_PREFIX": "",
        }

    def test_load_file_and_resolve(self, tmp_path):
        """A loaded file resolves to the expected tree."""
        path = tmp_path / "env.yaml"
        path.write_text(
            "env:\n"
            "  DB_TYPE: postgresdb\n"
            "  DB_POSTGRESDB_HOST: ${PG_HOST:-db.internal}\n"
            "  DB_POSTGRESDB_SSL_CA: ca.pem\n",
            encoding="utf-8",
        )
        env = load_env_file(path, environ={})
        db = resolve(DATABASE, env)
        assert db.postgresdb.host == "db.internal"
        assert db.postgresdb.ssl.enabled is True

    def test_missing_file(self, tmp_path):
        """A missing file is an EnvFileError."""
        with pytest.raises(EnvFileError, match="not found"):
            load_env_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self):
        """Malformed YAML is an EnvFileError."""
        with pytest.raises(EnvFileError, match="Invalid YAML"):
            load_env_string("env: [unclosed")

    def test_empty_document(self):
        """An empty document is rejected."""
        with pytest.raises(EnvFileError, match="Empty"):
            load_env_string("")

    def test_non_mapping_root(self):
        """The root must be a mapping."""
        with pytest.raises(EnvFileError, match="dictionary"):
            load_env_string("- a\n- b\n")

    def test_missing_substitution_variable(self):
        """A required ${VAR} that is unset is an EnvFileError."""
        with pytest.raises(EnvFileError, match="NOT_SET"):
            load_env_string("env:\n  A: ${NOT_SET}\n", environ={})

    def test_nested_value_rejected(self):
        """Nested values fail validation."""
        with pytest.raises(EnvFileError, match="validation failed"):
            load_env_string("env:\n  A:\n    b: 1\n")


class TestMergedEnvironment:
    """Tests for overlaying file variables."""

    def test_overlay_wins(self):
        """File values take precedence over the base environment."""
        merged = merged_environment({"A": "file"}, {"A": "base", "B": "base"})
        assert merged == {"A": "file", "B": "base"}

    def test_process_environment_base(self, monkeypatch):
        """The process environment is the default base."""
        monkeypatch.setenv("ENVTREE_BASE_VAR", "1")
        merged = merged_environment({})
        assert merged["ENVTREE_BASE_VAR"] == "1"
        assert merged == dict(os.environ)
