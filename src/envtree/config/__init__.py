"""Environment files for envtree.

Provides YAML environment files with:
- Pydantic validation of the file layout
- Environment variable substitution (${VAR} and ${VAR:-default})
- Overlay onto the process environment

Example env file:
    version: "1.0"
    env:
      DB_TYPE: postgresdb
      DB_POSTGRESDB_HOST: "${PG_HOST:-localhost}"
      DB_POSTGRESDB_PORT: 5433
      DB_POSTGRESDB_SSL_CA: /etc/ssl/ca.pem

Example usage:
    >>> from envtree.config import load_env_file, merged_environment
    >>> env = merged_environment(load_env_file("staging.yaml"))
"""

from envtree.config.schema import EnvFileSchema
from envtree.config.loader import (
    load_env_file,
    load_env_string,
    merged_environment,
    substitute_env_vars,
)
from envtree.errors import EnvFileError

__all__ = [
    "EnvFileSchema",
    "EnvFileError",
    "load_env_file",
    "load_env_string",
    "merged_environment",
    "substitute_env_vars",
]
