"""Coercion of environment readings into typed field values."""

from typing import Any

from envtree.environment import Present
from envtree.errors import FieldValidationError
from envtree.fields import FieldSpec


def coerce(spec: FieldSpec, reading: Present, path: str = "") -> Any:
    """Coerce a present reading to the kind of a field.

    Args:
        spec: The field declaration.
        reading: A present environment reading.
        path: Dotted path of the field, attached to validation errors.

    Returns:
        The typed value.

    Raises:
        FieldValidationError: If the raw value is invalid. The error
            carries ``path``.
    """
    try:
        return spec.validate(reading.raw)
    except FieldValidationError as e:
        if path and not e.path:
            raise e.with_path(path) from None
        raise


__all__ = ["coerce"]
