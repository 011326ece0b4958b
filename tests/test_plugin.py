"""Tests for schema discovery."""

import pytest

from envtree.errors import SchemaError
from envtree.plugin import SCHEMAS_GROUP, discover_schemas, load_schema
from envtree.schemas.database import DATABASE, SQLITE


class TestDiscovery:
    """Tests for discover_schemas."""

    def test_group_name(self):
        """The entry point group is envtree.schemas."""
        assert SCHEMAS_GROUP == "envtree.schemas"

    def test_builtin_database_present(self):
        """The database schema is always discoverable."""
        assert "database" in discover_schemas()


class TestLoadSchema:
    """Tests for load_schema."""

    def test_load_by_name(self):
        """A discovered name loads its NodeSpec."""
        assert load_schema("database") is DATABASE

    def test_load_by_reference(self):
        """A module:attr reference is imported directly."""
        assert load_schema("envtree.schemas.database:SQLITE") is SQLITE

    def test_unknown_name(self):
        """Unknown names raise KeyError listing available schemas."""
        with pytest.raises(KeyError, match="database"):
            load_schema("does-not-exist")

    def test_reference_to_non_spec(self):
        """References must point at a NodeSpec."""
        with pytest.raises(SchemaError, match="not a NodeSpec"):
            load_schema("envtree.schemas.database:DB_TYPES")

    def test_bad_module(self):
        """Unimportable references raise ImportError."""
        with pytest.raises(ImportError):
            load_schema("envtree_no_such_module:THING")
