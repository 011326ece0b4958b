"""Field declarations and per-kind validation.

A FieldSpec declares one leaf of a configuration node: the environment
variable it reads, its kind, and how its default is obtained. Field kinds
form a closed set; validation for each kind is a plain function keyed by
the kind.

Example:
    >>> pool_size = integer("DB_SQLITE_POOL_SIZE", default=0)
    >>> pool_size.validate("4")
    4
    >>> enable_wal = boolean(
    ...     "DB_SQLITE_ENABLE_WAL",
    ...     default_fn=lambda s: s["pool_size"] > 1,
    ...     depends_on=("pool_size",),
    ... )
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from envtree.errors import (
    InvalidBooleanError,
    InvalidEnumValueError,
    InvalidNumberError,
    SchemaError,
)

# (resolved prior siblings) -> value
DefaultFn = Callable[[Mapping[str, Any]], Any]

TRUTHY = frozenset({"true", "1", "yes", "on"})
FALSY = frozenset({"false", "0", "no", "off"})

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

_SECRET_MARKERS = frozenset({"PASSWORD", "SECRET", "TOKEN", "KEY"})


class FieldKind(str, Enum):
    """Closed set of field kinds."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    ENUM = "enum"


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def _parse_boolean(spec: "FieldSpec", raw: str) -> bool:
    lowered = raw.lower()
    if lowered in TRUTHY:
        return True
    if lowered in FALSY:
        return False
    raise InvalidBooleanError(spec.key, raw, _BOOLEAN_EXPECTED)


def _is_finite(value: Any) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _parse_integer(spec: "FieldSpec", raw: str) -> int:
    if not _INTEGER_PATTERN.fullmatch(raw):
        raise InvalidNumberError(spec.key, raw, "an integer literal")
    try:
        return int(raw)
    except ValueError as e:
        # Longer than the interpreter digit limit.
        raise InvalidNumberError(spec.key, raw, "an integer literal") from e


def _parse_float(spec: "FieldSpec", raw: str) -> float:
    if not _FLOAT_PATTERN.fullmatch(raw):
        raise InvalidNumberError(spec.key, raw, "a numeric literal")
    value = float(raw)
    if not math.isfinite(value):
        raise InvalidNumberError(spec.key, raw, "a finite numeric literal")
    return value


def _parse_string(spec: "FieldSpec", raw: str) -> str:
    return raw


def _parse_enum(spec: "FieldSpec", raw: str) -> str:
    if raw not in spec.allowed_values:
        raise InvalidEnumValueError(spec.key, raw, spec.allowed_values)
    return raw


_BOOLEAN_EXPECTED = "one of (case-insensitive): " + ", ".join(
    sorted(TRUTHY) + sorted(FALSY)
)

_PARSERS: Dict[FieldKind, Callable[["FieldSpec", str], Any]] = {
    FieldKind.BOOLEAN: _parse_boolean,
    FieldKind.INTEGER: _parse_integer,
    FieldKind.FLOAT: _parse_float,
    FieldKind.STRING: _parse_string,
    FieldKind.ENUM: _parse_enum,
}


@dataclass(frozen=True)
class FieldSpec:
    """Declaration of one leaf configuration value.

    Exactly one of ``default`` or ``default_fn`` must be given.

    Attributes:
        key: Environment variable name.
        kind: Field kind.
        default: Static default, used verbatim when the key is absent.
        default_fn: Computes the default from already-resolved siblings.
        depends_on: Sibling names ``default_fn`` reads. When given, they
            must be declared before this field and ``default_fn`` only
            sees those siblings.
        allowed_values: Allowed raw values (enum only).
        description: Free text shown by ``envtree describe``.
    """

    key: str
    kind: FieldKind
    default: Any = MISSING
    default_fn: Optional[DefaultFn] = None
    depends_on: Optional[Tuple[str, ...]] = None
    allowed_values: Tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        if not self.key:
            raise SchemaError("Field key must be a non-empty string")
        if not isinstance(self.kind, FieldKind):
            raise SchemaError(f"Field {self.key}: unknown kind {self.kind!r}")

        has_static = self.default is not MISSING
        has_computed = self.default_fn is not None
        if has_static == has_computed:
            raise SchemaError(
                f"Field {self.key} must declare exactly one of "
                f"'default' or 'default_fn'"
            )
        if self.depends_on is not None and not has_computed:
            raise SchemaError(
                f"Field {self.key}: 'depends_on' requires 'default_fn'"
            )

        if self.kind is FieldKind.ENUM:
            if not self.allowed_values:
                raise SchemaError(f"Enum field {self.key} has no allowed values")
            if len(set(self.allowed_values)) != len(self.allowed_values):
                raise SchemaError(f"Enum field {self.key} repeats an allowed value")
        elif self.allowed_values:
            raise SchemaError(
                f"Field {self.key}: allowed values only apply to enum fields"
            )

        if has_static and not self.accepts(self.default):
            raise SchemaError(
                f"Field {self.key}: default {self.default!r} is not a valid "
                f"{self.kind.value} value"
            )

    @property
    def computed(self) -> bool:
        """Whether the default is computed from siblings."""
        return self.default_fn is not None

    @property
    def secret(self) -> bool:
        """Whether the value should be masked in logs and output."""
        upper = self.key.upper()
        return any(token in _SECRET_MARKERS for token in upper.split("_"))

    def validate(self, raw: str) -> Any:
        """Coerce a raw environment string to the kind of this field.

        Args:
            raw: Raw string, taken literally (no trimming).

        Returns:
            The typed value.

        Raises:
            FieldValidationError: If the raw string is not valid for
                the kind.
        """
        return _PARSERS[self.kind](self, raw)

    def accepts(self, value: Any) -> bool:
        """Check that an already-typed value fits this field."""
        if self.kind is FieldKind.BOOLEAN:
            return isinstance(value, bool)
        if self.kind is FieldKind.INTEGER:
            return isinstance(value, int) and not isinstance(value, bool)
        if self.kind is FieldKind.FLOAT:
            return (
                isinstance(value, (int, float))
                and not isinstance(value, bool)
                and _is_finite(value)
            )
        if self.kind is FieldKind.ENUM:
            return isinstance(value, str) and value in self.allowed_values
        return isinstance(value, str)

    def describe_default(self) -> str:
        """Short description of the default strategy."""
        if not self.computed:
            return repr(self.default)
        if self.depends_on:
            return f"computed from {', '.join(self.depends_on)}"
        return "computed"


def _field(kind: FieldKind, key: str, default: Any, default_fn, depends_on, **kwargs) -> FieldSpec:
    if depends_on is not None:
        depends_on = tuple(depends_on)
    return FieldSpec(
        key=key,
        kind=kind,
        default=default,
        default_fn=default_fn,
        depends_on=depends_on,
        **kwargs,
    )


def boolean(key, default=MISSING, *, default_fn=None, depends_on=None, description=""):
    """Declare a boolean field."""
    return _field(FieldKind.BOOLEAN, key, default, default_fn, depends_on, description=description)


def integer(key, default=MISSING, *, default_fn=None, depends_on=None, description=""):
    """Declare an integer field."""
    return _field(FieldKind.INTEGER, key, default, default_fn, depends_on, description=description)


def number(key, default=MISSING, *, default_fn=None, depends_on=None, description=""):
    """Declare a float field."""
    return _field(FieldKind.FLOAT, key, default, default_fn, depends_on, description=description)


def string(key, default=MISSING, *, default_fn=None, depends_on=None, description=""):
    """Declare a string field."""
    return _field(FieldKind.STRING, key, default, default_fn, depends_on, description=description)


def enum(key, allowed_values, default=MISSING, *, default_fn=None, depends_on=None, description=""):
    """Declare an enum field with a fixed set of allowed values."""
    return _field(
        FieldKind.ENUM,
        key,
        default,
        default_fn,
        depends_on,
        allowed_values=tuple(allowed_values),
        description=description,
    )


__all__ = [
    "DefaultFn",
    "FieldKind",
    "FieldSpec",
    "MISSING",
    "TRUTHY",
    "FALSY",
    "boolean",
    "integer",
    "number",
    "string",
    "enum",
]
