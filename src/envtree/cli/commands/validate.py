"""Validate command for envtree CLI."""

import sys
from typing import Optional

from envtree.cli.commands.common import load_inputs
from envtree.errors import ConfigError, FieldValidationError, describe_error
from envtree.resolver import SOURCE_ENV, Resolver


def cmd_validate(schema_name: str, env_file: Optional[str] = None) -> int:
    """Validate the environment against a schema.

    Args:
        schema_name: Registered schema name or ``module:attr`` reference.
        env_file: Optional YAML environment file.

    Returns:
        Exit code (0 for success, 1 for validation errors).
    """
    spec, environ = load_inputs(schema_name, env_file)
    if spec is None:
        return 1

    print(f"Validating: {spec.name}")
    if env_file:
        print(f"  Env file: {env_file}")

    resolver = Resolver(environ)
    try:
        resolver.resolve(spec)
    except FieldValidationError as e:
        print(f"Validation failed: {describe_error(e)}", file=sys.stderr)
        print(f"  Variable: {e.key}", file=sys.stderr)
        print(f"  Expected: {e.expected}", file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"Validation failed: {describe_error(e)}", file=sys.stderr)
        return 1

    overrides = sorted(path for path, source in resolver.sources.items() if source == SOURCE_ENV)
    print(f"  Fields: {len(resolver.sources)}")
    print(f"  Set from environment: {len(overrides)}")
    for path in overrides:
        print(f"    - {path}")

    print("\nConfiguration is valid.")
    return 0
