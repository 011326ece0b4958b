"""Describe command for envtree CLI."""

import sys

from envtree.errors import ConfigError, describe_error
from envtree.fields import FieldKind
from envtree.nodes import iter_fields
from envtree.plugin import load_schema


def cmd_describe(schema_name: str) -> int:
    """List the environment variables a schema reads.

    Returns:
        Exit code (0 for success, 1 if the schema cannot be loaded).
    """
    try:
        spec = load_schema(schema_name)
        fields = list(iter_fields(spec))
    except KeyError as e:
        print(f"Error: {e.args[0] if e.args else e}", file=sys.stderr)
        return 1
    except (ImportError, AttributeError, ValueError, ConfigError) as e:
        message = describe_error(e) if isinstance(e, ConfigError) else e
        print(f"Error: cannot load schema '{schema_name}': {message}", file=sys.stderr)
        return 1

    print(f"Schema: {spec.name}")
    if spec.description:
        print(f"  {spec.description}")
    print()

    for path, field_spec in fields:
        print(f"{field_spec.key}")
        print(f"    field:   {path}")
        print(f"    type:    {field_spec.kind.value}")
        if field_spec.kind is FieldKind.ENUM:
            print(f"    allowed: {', '.join(field_spec.allowed_values)}")
        print(f"    default: {field_spec.describe_default()}")
        if field_spec.description:
            print(f"    {field_spec.description}")

    if spec.derived:
        print()
        print("Derived properties:")
        for name, fn in spec.derived:
            doc = (fn.__doc__ or "").strip().splitlines()
            summary = f"  {doc[0]}" if doc else ""
            print(f"  {name}{summary}")

    return 0
