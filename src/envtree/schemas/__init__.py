"""Built-in configuration schemas."""

from envtree.schemas.database import DATABASE

BUILTIN_SCHEMAS = {
    "database": "envtree.schemas.database:DATABASE",
}

__all__ = ["BUILTIN_SCHEMAS", "DATABASE"]
