"""Environment file loader with variable substitution.

Loads an environment snapshot from a YAML file so a configuration can
be resolved (or validated) without exporting variables into the shell.

Substitution syntax inside values:
    ${VAR}          - Required variable, raises error if not set
    ${VAR:-default} - Optional variable with default value

Example:
    >>> file_env = load_env_file("staging.yaml")
    >>> tree = resolve(DATABASE, merged_environment(file_env))
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from envtree.config.schema import EnvFileSchema
from envtree.errors import EnvFileError

# Pattern for environment variables: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def substitute_env_vars(value: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """Recursively substitute environment variables in a value.

    Args:
        value: Value to process (string, dict, list, or other).
        environ: Variables to substitute from (defaults to ``os.environ``).

    Returns:
        Value with environment variables substituted.

    Raises:
        KeyError: If a required environment variable is not set.

    Examples:
        >>> substitute_env_vars("${MISSING:-default}", {})
        'default'
        >>> substitute_env_vars({"key": "${HOST}"}, {"HOST": "db"})
        {'key': 'db'}
    """
    environ = os.environ if environ is None else environ
    if isinstance(value, str):
        return _substitute_string(value, environ)
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v, environ) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(item, environ) for item in value]
    else:
        return value


def _substitute_string(s: str, environ: Mapping[str, str]) -> str:
    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        default = match.group(2)  # None if no default specified

        value = environ.get(var_name)
        if value is not None:
            return value
        elif default is not None:
            return default
        else:
            raise KeyError(
                f"Environment variable '{var_name}' is not set "
                f"and no default provided"
            )

    return ENV_VAR_PATTERN.sub(replacer, s)


def load_env_file(
    path: Union[str, Path],
    substitute_vars: bool = True,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Load and validate a YAML environment file.

    Args:
        path: Path to the YAML file.
        substitute_vars: Whether to substitute ``${VAR}`` references.
        environ: Variables used for substitution (defaults to ``os.environ``).

    Returns:
        Mapping of variable names to string values.

    Raises:
        EnvFileError: If the file cannot be read, parsed or validated.
    """
    path = Path(path)

    if not path.exists():
        raise EnvFileError(f"Environment file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise EnvFileError(f"Cannot read {path}: {e}") from e

    return load_env_string(content, substitute_vars, environ, source=str(path))


def load_env_string(
    content: str,
    substitute_vars: bool = True,
    environ: Optional[Mapping[str, str]] = None,
    source: str = "<string>",
) -> Dict[str, str]:
    """Load and validate an environment file from a string.

    Args:
        content: YAML content.
        substitute_vars: Whether to substitute ``${VAR}`` references.
        environ: Variables used for substitution (defaults to ``os.environ``).
        source: Name used in error messages.

    Returns:
        Mapping of variable names to string values.

    Raises:
        EnvFileError: If the content cannot be parsed or validated.
    """
    try:
        raw_data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise EnvFileError(f"Invalid YAML in {source}: {e}") from e

    if raw_data is None:
        raise EnvFileError(f"Empty environment file: {source}")

    if not isinstance(raw_data, dict):
        raise EnvFileError(
            f"Environment file must be a dictionary, got {type(raw_data).__name__}"
        )

    if substitute_vars:
        try:
            raw_data = substitute_env_vars(raw_data, environ)
        except KeyError as e:
            raise EnvFileError(f"Environment variable error in {source}: {e}") from e

    try:
        schema = EnvFileSchema.model_validate(raw_data)
    except ValidationError as e:
        raise EnvFileError(f"Environment file validation failed for {source}: {e}") from e

    return schema.as_environ()


def merged_environment(
    overlay: Mapping[str, str],
    base: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Overlay file variables on top of a base environment.

    Args:
        overlay: Variables that take precedence (usually from a file).
        base: Base environment (defaults to ``os.environ``).
    """
    merged = dict(os.environ if base is None else base)
    merged.update(overlay)
    return merged


__all__ = [
    "ENV_VAR_PATTERN",
    "load_env_file",
    "load_env_string",
    "merged_environment",
    "substitute_env_vars",
]
