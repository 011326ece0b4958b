"""Tests for the built-in database schema."""

import pytest

from envtree.errors import InvalidEnumValueError
from envtree.nodes import SchemaRegistry, check_unique_keys, iter_fields
from envtree.resolver import resolve
from envtree.schemas.database import DATABASE, DB_LOGGING_OPTIONS


class TestDefaults:
    """Tests for the database defaults."""

    def test_empty_environment(self):
        """With nothing set, every field takes its documented default."""
        db = resolve(DATABASE, {})
        assert db.to_dict() == {
            "type": "sqlite",
            "table_prefix": "",
            "ping_interval_seconds": 2,
            "logging": {
                "enabled": False,
                "options": "error",
                "max_query_execution_time": 0,
            },
            "postgresdb": {
                "database": "n8n",
                "host": "localhost",
                "password": "",
                "port": 5432,
                "user": "postgres",
                "schema": "public",
                "pool_size": 2,
                "connection_timeout_ms": 20_000,
                "idle_timeout_ms": 30_000,
                "ssl": {
                    "ca": "",
                    "cert": "",
                    "key": "",
                    "reject_unauthorized": True,
                    "enabled": False,
                },
            },
            "mysqldb": {
                "database": "n8n",
                "host": "localhost",
                "password": "",
                "port": 3306,
                "user": "root",
            },
            "sqlite": {
                "database": "database.sqlite",
                "pool_size": 0,
                "enable_wal": False,
                "execute_vacuum_on_startup": False,
            },
        }

    def test_schema_is_well_formed(self):
        """Keys are unique and the schema registers cleanly."""
        check_unique_keys(DATABASE)
        registry = SchemaRegistry()
        registry.register(DATABASE)
        registry.validate()
        keys = [f.key for _, f in iter_fields(DATABASE)]
        assert all(key.startswith("DB_") for key in keys)


class TestScenarios:
    """Concrete resolution scenarios."""

    def test_ssl_enabled_from_ca(self):
        """Providing a CA turns SSL on without DB_POSTGRESDB_SSL_ENABLED."""
        db = resolve(
            DATABASE,
            {"DB_TYPE": "postgresdb", "DB_POSTGRESDB_SSL_CA": "/etc/ssl/ca.pem"},
        )
        assert db.type == "postgresdb"
        assert db.postgresdb.ssl.enabled is True

    @pytest.mark.parametrize("key", ["DB_POSTGRESDB_SSL_CERT", "DB_POSTGRESDB_SSL_KEY"])
    def test_ssl_enabled_from_cert_or_key(self, key):
        """Cert or key material also enables SSL."""
        assert resolve(DATABASE, {key: "material"}).postgresdb.ssl.enabled is True

    def test_ssl_explicitly_disabled(self):
        """An explicit override beats the computed default."""
        db = resolve(
            DATABASE,
            {"DB_POSTGRESDB_SSL_CA": "ca", "DB_POSTGRESDB_SSL_ENABLED": "false"},
        )
        assert db.postgresdb.ssl.enabled is False

    def test_empty_ssl_material_does_not_enable(self):
        """Empty strings are present but provide no material."""
        db = resolve(DATABASE, {"DB_POSTGRESDB_SSL_CA": ""})
        assert db.postgresdb.ssl.enabled is False

    def test_sqlite_pool_absent(self):
        """Absent pool size defaults to 0, so WAL stays off."""
        db = resolve(DATABASE, {})
        assert db.sqlite.pool_size == 0
        assert db.sqlite.enable_wal is False

    def test_sqlite_pool_enables_wal(self):
        """A pool size above 1 turns WAL on."""
        db = resolve(DATABASE, {"DB_SQLITE_POOL_SIZE": "2"})
        assert db.sqlite.enable_wal is True

    def test_bogus_logging_option(self):
        """An unknown logging level fails with the seven allowed levels."""
        with pytest.raises(InvalidEnumValueError) as exc_info:
            resolve(DATABASE, {"DB_LOGGING_OPTIONS": "bogus"})
        error = exc_info.value
        assert error.key == "DB_LOGGING_OPTIONS"
        assert error.value == "bogus"
        assert error.allowed_values == DB_LOGGING_OPTIONS
        assert len(error.allowed_values) == 7
        assert error.path == "logging.options"

    def test_bogus_db_type(self):
        """DB_TYPE only accepts the four supported databases."""
        with pytest.raises(InvalidEnumValueError, match="postgresdb"):
            resolve(DATABASE, {"DB_TYPE": "oracle"})


class TestLegacySqlite:
    """Tests for the is_legacy_sqlite derived property."""

    def test_default_is_legacy(self):
        """sqlite with no pool is the legacy data source."""
        assert resolve(DATABASE, {}).is_legacy_sqlite is True

    def test_pooled_sqlite_is_not_legacy(self):
        """A pooled sqlite data source is not legacy."""
        assert resolve(DATABASE, {"DB_SQLITE_POOL_SIZE": "4"}).is_legacy_sqlite is False

    def test_postgres_is_not_legacy(self):
        """Other database types are never legacy sqlite."""
        assert resolve(DATABASE, {"DB_TYPE": "postgresdb"}).is_legacy_sqlite is False
