"""Pydantic validation model for environment files.

An environment file is a YAML document of the form:

    version: "1.0"
    env:
      DB_TYPE: postgresdb
      DB_POSTGRESDB_PORT: 5433
      DB_LOGGING_ENABLED: true
"""

import math
from typing import Dict, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Scalar = Union[bool, int, float, str]


def render_scalar(value: Scalar) -> str:
    """Render a YAML scalar the way it would be written in a shell."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class EnvFileSchema(BaseModel):
    """Root schema of an environment file.

    Attributes:
        version: File format version (currently "1.0").
        env: Mapping of environment variable names to scalar values.
    """

    model_config = ConfigDict(extra="forbid")

    version: str = "1.0"
    env: Dict[str, Union[bool, int, float, str]] = Field(default_factory=dict)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate file format version."""
        supported = {"1.0"}
        if v not in supported:
            raise ValueError(
                f"Unsupported env file version: {v}. Supported: {supported}"
            )
        return v

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: Dict[str, Scalar]) -> Dict[str, Scalar]:
        """Validate variable names and reject non-finite numbers."""
        for key, value in v.items():
            if not key or "=" in key or "\x00" in key:
                raise ValueError(f"Invalid environment variable name: {key!r}")
            if isinstance(value, float) and not math.isfinite(value):
                raise ValueError(f"{key}: non-finite numbers are not allowed")
        return v

    def as_environ(self) -> Dict[str, str]:
        """Return the variables as strings."""
        return {key: render_scalar(value) for key, value in self.env.items()}


__all__ = ["EnvFileSchema", "render_scalar"]
