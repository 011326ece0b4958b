"""Database connection settings.

Environment variables (all optional):

    DB_TYPE                                sqlite | mariadb | mysqldb | postgresdb
    DB_TABLE_PREFIX                        table name prefix
    DB_PING_INTERVAL_SECONDS               connection keep-alive ping interval
    DB_LOGGING_*                           query logging
    DB_POSTGRESDB_*                        Postgres connection
    DB_POSTGRESDB_SSL_*                    Postgres TLS material
    DB_MYSQLDB_*                           MySQL / MariaDB connection
    DB_SQLITE_*                            SQLite file and pooling

Example:
    >>> from envtree import resolve
    >>> from envtree.schemas.database import DATABASE
    >>> db = resolve(DATABASE, {"DB_TYPE": "postgresdb", "DB_POSTGRESDB_SSL_CA": "ca.pem"})
    >>> db.postgresdb.ssl.enabled
    True
"""

from envtree.fields import boolean, enum, integer, string
from envtree.nodes import NodeSpec

DB_TYPES = ("sqlite", "mariadb", "mysqldb", "postgresdb")
DB_LOGGING_OPTIONS = ("query", "error", "schema", "warn", "info", "log", "all")


def _any_ssl_material(siblings) -> bool:
    return bool(siblings["ca"] or siblings["cert"] or siblings["key"])


LOGGING = NodeSpec(
    "database_logging",
    fields={
        "enabled": boolean(
            "DB_LOGGING_ENABLED", False, description="Enable database logging."
        ),
        "options": enum(
            "DB_LOGGING_OPTIONS",
            DB_LOGGING_OPTIONS,
            "error",
            description="Database log level. Requires DB_LOGGING_MAX_EXECUTION_TIME > 0.",
        ),
        "max_query_execution_time": integer(
            "DB_LOGGING_MAX_EXECUTION_TIME",
            0,
            description="Only log queries slower than this many milliseconds. 0 disables.",
        ),
    },
)

POSTGRES_SSL = NodeSpec(
    "postgres_ssl",
    fields={
        "ca": string("DB_POSTGRESDB_SSL_CA", "", description="SSL certificate authority."),
        "cert": string("DB_POSTGRESDB_SSL_CERT", "", description="SSL certificate."),
        "key": string("DB_POSTGRESDB_SSL_KEY", "", description="SSL key."),
        "reject_unauthorized": boolean(
            "DB_POSTGRESDB_SSL_REJECT_UNAUTHORIZED",
            True,
            description="Reject unauthorized SSL connections.",
        ),
        "enabled": boolean(
            "DB_POSTGRESDB_SSL_ENABLED",
            default_fn=_any_ssl_material,
            depends_on=("ca", "cert", "key"),
            description="Enable SSL. Defaults to true when CA, cert or key is set.",
        ),
    },
)

POSTGRES = NodeSpec(
    "postgresdb",
    fields={
        "database": string("DB_POSTGRESDB_DATABASE", "n8n", description="Postgres database name."),
        "host": string("DB_POSTGRESDB_HOST", "localhost", description="Postgres host."),
        "password": string("DB_POSTGRESDB_PASSWORD", "", description="Postgres password."),
        "port": integer("DB_POSTGRESDB_PORT", 5432, description="Postgres port."),
        "user": string("DB_POSTGRESDB_USER", "postgres", description="Postgres user."),
        "schema": string("DB_POSTGRESDB_SCHEMA", "public", description="Postgres schema."),
        "pool_size": integer(
            "DB_POSTGRESDB_POOL_SIZE", 2, description="Postgres connection pool size."
        ),
        "connection_timeout_ms": integer(
            "DB_POSTGRESDB_CONNECTION_TIMEOUT",
            20_000,
            description="Connection timeout in milliseconds.",
        ),
        "idle_timeout_ms": integer(
            "DB_POSTGRESDB_IDLE_CONNECTION_TIMEOUT",
            30_000,
            description="Idle connection timeout in milliseconds.",
        ),
    },
    children={"ssl": POSTGRES_SSL},
)

MYSQL = NodeSpec(
    "mysqldb",
    fields={
        "database": string(
            "DB_MYSQLDB_DATABASE", "n8n", description="MySQL database name (deprecated)."
        ),
        "host": string("DB_MYSQLDB_HOST", "localhost", description="MySQL host."),
        "password": string("DB_MYSQLDB_PASSWORD", "", description="MySQL password."),
        "port": integer("DB_MYSQLDB_PORT", 3306, description="MySQL port."),
        "user": string("DB_MYSQLDB_USER", "root", description="MySQL user."),
    },
)

SQLITE = NodeSpec(
    "sqlite",
    fields={
        "database": string(
            "DB_SQLITE_DATABASE", "database.sqlite", description="SQLite database file name."
        ),
        "pool_size": integer(
            "DB_SQLITE_POOL_SIZE", 0, description="SQLite pool size. 0 disables pooling."
        ),
        "enable_wal": boolean(
            "DB_SQLITE_ENABLE_WAL",
            default_fn=lambda s: s["pool_size"] > 1,
            depends_on=("pool_size",),
            description="Enable WAL mode. Defaults to true when pool size > 1.",
        ),
        "execute_vacuum_on_startup": boolean(
            "DB_SQLITE_VACUUM_ON_STARTUP",
            False,
            description="Run VACUUM on startup. Blocks startup while it runs.",
        ),
    },
)


def is_legacy_sqlite(db) -> bool:
    """True when the single-connection SQLite data source is in use."""
    return db.type == "sqlite" and db.sqlite.pool_size == 0


DATABASE = NodeSpec(
    "database",
    fields={
        "type": enum("DB_TYPE", DB_TYPES, "sqlite", description="Database type."),
        "table_prefix": string("DB_TABLE_PREFIX", "", description="Table name prefix."),
        "ping_interval_seconds": integer(
            "DB_PING_INTERVAL_SECONDS",
            2,
            description="Interval in seconds between connection liveness pings.",
        ),
    },
    children={
        "logging": LOGGING,
        "postgresdb": POSTGRES,
        "mysqldb": MYSQL,
        "sqlite": SQLITE,
    },
    derived={"is_legacy_sqlite": is_legacy_sqlite},
    description="Database connection settings.",
)


__all__ = [
    "DATABASE",
    "DB_LOGGING_OPTIONS",
    "DB_TYPES",
    "LOGGING",
    "MYSQL",
    "POSTGRES",
    "POSTGRES_SSL",
    "SQLITE",
    "is_legacy_sqlite",
]
