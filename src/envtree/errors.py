"""Error hierarchy for envtree.

Two families of errors exist:

- FieldValidationError: a present environment value could not be
  coerced to the declared kind of its field. Raised at resolution time.
- SchemaError: a node or field declaration is malformed. Raised when
  the declaration is built or registered.

Both are fatal. A failed resolution never yields a partial tree.
"""

from typing import Sequence, Tuple


class ConfigError(Exception):
    """Base class for all envtree errors."""

    kind: str = "ConfigError"


class FieldValidationError(ConfigError):
    """A raw environment value failed validation for its field.

    Attributes:
        key: Environment variable name.
        value: The offending raw value.
        expected: Human-readable description of the accepted format.
        path: Dotted path of the field within the tree (may be empty
            until the resolver attaches it).
    """

    kind = "ValidationError"

    def __init__(
        self,
        key: str,
        value: str,
        expected: str,
        path: str = "",
    ):
        self.key = key
        self.value = value
        self.expected = expected
        self.path = path
        super().__init__(self._format())

    def _format(self) -> str:
        where = f" (field '{self.path}')" if self.path else ""
        return (
            f"{self.kind}: environment variable {self.key}{where} "
            f"has value {self.value!r}, expected {self.expected}"
        )

    def with_path(self, path: str) -> "FieldValidationError":
        """Return a copy of this error bound to a field path."""
        clone = self.__class__.__new__(self.__class__)
        clone.__dict__.update(self.__dict__)
        clone.path = path
        Exception.__init__(clone, clone._format())
        return clone


class InvalidBooleanError(FieldValidationError):
    """Raw value is not one of the accepted boolean tokens."""

    kind = "InvalidBoolean"


class InvalidNumberError(FieldValidationError):
    """Raw value is not a complete numeric literal."""

    kind = "InvalidNumber"


class InvalidEnumValueError(FieldValidationError):
    """Raw value is not a member of the allowed set.

    Attributes:
        allowed_values: The allowed values, in declaration order.
    """

    kind = "InvalidEnumValue"

    def __init__(
        self,
        key: str,
        value: str,
        allowed_values: Sequence[str],
        path: str = "",
    ):
        self.allowed_values: Tuple[str, ...] = tuple(allowed_values)
        expected = "one of: " + ", ".join(self.allowed_values)
        super().__init__(key, value, expected, path)


class SchemaError(ConfigError):
    """A node or field declaration is invalid."""

    kind = "SchemaError"


class MissingRequiredDependencyError(SchemaError):
    """A computed default references a sibling that is not resolved yet.

    Attributes:
        field: Name of the field whose default is computed.
        dependency: Name of the sibling that was not available.
        node: Name of the node declaring the field.
    """

    kind = "MissingRequiredDependency"

    def __init__(self, node: str, field: str, dependency: str, reason: str = ""):
        self.node = node
        self.field = field
        self.dependency = dependency
        message = (
            f"Field '{node}.{field}' computes its default from "
            f"'{dependency}', which is not declared before it"
        )
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class CyclicNodeReferenceError(SchemaError):
    """A node graph nests a node inside itself.

    Attributes:
        cycle: Node names along the cycle, first name repeated at the end.
    """

    kind = "CyclicNodeReference"

    def __init__(self, cycle: Sequence[str]):
        self.cycle: Tuple[str, ...] = tuple(cycle)
        super().__init__(f"Cyclic node reference: {' -> '.join(self.cycle)}")


class UnknownNodeReferenceError(SchemaError):
    """A child references a node name that is not registered."""

    kind = "UnknownNodeReference"

    def __init__(self, parent: str, child: str, reference: str):
        self.parent = parent
        self.child = child
        self.reference = reference
        super().__init__(
            f"Node '{parent}' nests '{child}' as '{reference}', "
            f"which is not registered"
        )


class EnvFileError(ConfigError):
    """An environment file could not be loaded or validated."""

    kind = "EnvFileError"


def describe_error(error: ConfigError) -> str:
    """Render an error as a single user-facing line."""
    if isinstance(error, FieldValidationError):
        return str(error)
    return f"{error.kind}: {error}"


__all__ = [
    "ConfigError",
    "FieldValidationError",
    "InvalidBooleanError",
    "InvalidNumberError",
    "InvalidEnumValueError",
    "SchemaError",
    "MissingRequiredDependencyError",
    "CyclicNodeReferenceError",
    "UnknownNodeReferenceError",
    "EnvFileError",
    "describe_error",
]
