"""Resolve command for envtree CLI."""

import json
import sys
from typing import Optional

import yaml

from envtree.cli.commands.common import load_inputs
from envtree.errors import ConfigError, describe_error
from envtree.resolver import resolve


def cmd_resolve(
    schema_name: str,
    env_file: Optional[str] = None,
    output_format: str = "yaml",
    show_secrets: bool = False,
) -> int:
    """Resolve a schema against the environment and print the tree.

    Args:
        schema_name: Registered schema name or ``module:attr`` reference.
        env_file: Optional YAML environment file overlaid on the process
            environment.
        output_format: "yaml" or "json".
        show_secrets: Print secret-looking values unmasked.

    Returns:
        Exit code (0 for success, 1 for errors).
    """
    spec, environ = load_inputs(schema_name, env_file)
    if spec is None:
        return 1

    try:
        tree = resolve(spec, environ)
    except ConfigError as e:
        print(f"Resolution failed: {describe_error(e)}", file=sys.stderr)
        return 1

    data = tree.to_dict(mask_secrets=not show_secrets)
    derived = tree.derived
    if derived:
        data["derived"] = derived

    if output_format == "json":
        print(json.dumps(data, indent=2))
    else:
        print(yaml.safe_dump(data, sort_keys=False, default_flow_style=False), end="")
    return 0
