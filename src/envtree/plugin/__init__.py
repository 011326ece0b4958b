"""Schema discovery and loading.

This module discovers root configuration schemas published via Python
entry points.
"""

from envtree.plugin.discovery import (
    discover_schemas,
    load_schema,
    SCHEMAS_GROUP,
)

__all__ = [
    "discover_schemas",
    "load_schema",
    "SCHEMAS_GROUP",
]
