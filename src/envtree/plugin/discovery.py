"""Schema discovery for envtree.

Packages publish root NodeSpecs through the `envtree.schemas` entry
point group in their pyproject.toml:

```toml
[project.entry-points."envtree.schemas"]
queue = "myservice.settings:QUEUE"
```

Example:
    >>> from envtree.plugin import discover_schemas, load_schema
    >>> for name in discover_schemas():
    ...     print(f"Found schema: {name}")
    >>> DATABASE = load_schema("database")
    >>> CUSTOM = load_schema("myservice.settings:QUEUE")
"""

import importlib
import logging
from importlib.metadata import EntryPoint, entry_points
from typing import Dict, Union

from envtree.errors import SchemaError
from envtree.nodes import NodeSpec
from envtree.schemas import BUILTIN_SCHEMAS

logger = logging.getLogger(__name__)

# Entry point group name
SCHEMAS_GROUP = "envtree.schemas"


def _get_entry_points(group: str) -> Dict[str, EntryPoint]:
    """Get entry points for a group."""
    return {ep.name: ep for ep in entry_points(group=group)}


def discover_schemas() -> Dict[str, Union[EntryPoint, str]]:
    """Discover available root schemas.

    Built-in schemas are always present; entry points with the same
    name take precedence.

    Returns:
        Dict mapping schema names to entry points or ``module:attr``
        references.
    """
    schemas: Dict[str, Union[EntryPoint, str]] = dict(BUILTIN_SCHEMAS)
    schemas.update(_get_entry_points(SCHEMAS_GROUP))
    return schemas


def _import_reference(reference: str) -> object:
    module_name, _, attr_path = reference.partition(":")
    if not module_name or not attr_path:
        raise ValueError(f"Schema reference must look like 'module:attribute', got {reference!r}")
    obj: object = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        obj = getattr(obj, attr)
    return obj


def load_schema(name: str) -> NodeSpec:
    """Load a root schema by registered name or ``module:attr`` reference.

    Args:
        name: A discovered schema name or an import reference.

    Returns:
        The NodeSpec.

    Raises:
        KeyError: If the name is neither discovered nor a reference.
        ImportError: If the reference cannot be imported.
        SchemaError: If the loaded object is not a NodeSpec.
    """
    schemas = discover_schemas()
    if name in schemas:
        target = schemas[name]
        obj = _import_reference(target) if isinstance(target, str) else target.load()
    elif ":" in name:
        obj = _import_reference(name)
    else:
        raise KeyError(
            f"No schema registered with name '{name}'. "
            f"Available: {sorted(schemas.keys())}"
        )

    if not isinstance(obj, NodeSpec):
        raise SchemaError(f"Schema '{name}' is a {type(obj).__name__}, not a NodeSpec")
    logger.debug(f"Loaded schema '{name}' ({obj.name})")
    return obj


__all__ = [
    "SCHEMAS_GROUP",
    "discover_schemas",
    "load_schema",
]
