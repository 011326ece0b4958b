"""envtree - Typed configuration trees from environment variables.

envtree declares configuration as explicit data: a tree of nodes whose
leaves read environment variables, are validated and coerced to typed
values, and fall back to static or computed defaults.

Quick Start:
    >>> import envtree as et
    >>>
    >>> SQLITE = et.NodeSpec(
    ...     "sqlite",
    ...     fields={
    ...         "pool_size": et.integer("DB_SQLITE_POOL_SIZE", 0),
    ...         "enable_wal": et.boolean(
    ...             "DB_SQLITE_ENABLE_WAL",
    ...             default_fn=lambda s: s["pool_size"] > 1,
    ...             depends_on=("pool_size",),
    ...         ),
    ...     },
    ... )
    >>> tree = et.resolve(SQLITE, {"DB_SQLITE_POOL_SIZE": "4"})
    >>> tree.enable_wal
    True

For advanced usage, see:
- envtree.nodes: SchemaRegistry, named child references, cycle checks
- envtree.store: ConfigStore, serialized reloads
- envtree.config: YAML environment files
- envtree.schemas.database: the built-in database schema
"""

__version__ = "0.1.0"

# =============================================================================
# Declarations
# =============================================================================
from envtree.fields import (
    FieldKind,
    FieldSpec,
    boolean,
    integer,
    number,
    string,
    enum,
)
from envtree.nodes import NodeSpec, SchemaRegistry

# =============================================================================
# Resolution
# =============================================================================
from envtree.environment import ABSENT, EnvironmentSnapshot, Present
from envtree.resolver import Resolver, resolve
from envtree.tree import ConfigTree, ResolvedNode
from envtree.store import ConfigStore

# =============================================================================
# Errors
# =============================================================================
from envtree.errors import (
    ConfigError,
    FieldValidationError,
    InvalidBooleanError,
    InvalidNumberError,
    InvalidEnumValueError,
    SchemaError,
    MissingRequiredDependencyError,
    CyclicNodeReferenceError,
    UnknownNodeReferenceError,
    EnvFileError,
)

__all__ = [
    # Declarations
    "FieldKind",
    "FieldSpec",
    "NodeSpec",
    "SchemaRegistry",
    "boolean",
    "integer",
    "number",
    "string",
    "enum",
    # Resolution
    "ABSENT",
    "EnvironmentSnapshot",
    "Present",
    "Resolver",
    "resolve",
    "ConfigTree",
    "ResolvedNode",
    "ConfigStore",
    # Errors
    "ConfigError",
    "FieldValidationError",
    "InvalidBooleanError",
    "InvalidNumberError",
    "InvalidEnumValueError",
    "SchemaError",
    "MissingRequiredDependencyError",
    "CyclicNodeReferenceError",
    "UnknownNodeReferenceError",
    "EnvFileError",
]
