"""Helpers shared by CLI commands."""

import sys
from typing import Dict, Optional, Tuple

from envtree.config import load_env_file, merged_environment
from envtree.errors import ConfigError, describe_error
from envtree.nodes import NodeSpec
from envtree.plugin import load_schema


def load_inputs(
    schema_name: str,
    env_file: Optional[str] = None,
) -> Tuple[Optional[NodeSpec], Optional[Dict[str, str]]]:
    """Load the schema and the environment for a command.

    Prints an error to stderr and returns (None, None) on failure.
    """
    try:
        spec = load_schema(schema_name)
    except (KeyError, ImportError, AttributeError, ValueError, ConfigError) as e:
        message = e.args[0] if isinstance(e, KeyError) and e.args else e
        print(f"Error: cannot load schema '{schema_name}': {message}", file=sys.stderr)
        return None, None

    if env_file is None:
        return spec, merged_environment({})

    try:
        file_env = load_env_file(env_file)
    except ConfigError as e:
        print(f"Error: {describe_error(e)}", file=sys.stderr)
        return None, None
    return spec, merged_environment(file_env)
