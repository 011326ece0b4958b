"""Resolved, immutable configuration trees.

A ResolvedNode is a read-only mapping of field and child names to
values. Fields and children are also reachable as attributes, and
derived properties declared on the NodeSpec are evaluated on every
attribute access.

Example:
    >>> tree = resolve(DATABASE, {"DB_TYPE": "postgresdb"})
    >>> tree.type
    'postgresdb'
    >>> tree.postgresdb.ssl.enabled
    False
    >>> tree.is_legacy_sqlite
    False
    >>> tree.type = "sqlite"
    Traceback (most recent call last):
    ...
    AttributeError: ResolvedNode is immutable
"""

from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping

from envtree.nodes import NodeSpec

MASK = "********"


class ResolvedNode(Mapping[str, Any]):
    """The typed result of resolving one NodeSpec.

    Equality is structural: two nodes are equal when they hold the same
    names and values, recursively.
    """

    __slots__ = ("_spec", "_values")

    def __init__(self, spec: NodeSpec, values: Mapping[str, Any]):
        object.__setattr__(self, "_spec", spec)
        object.__setattr__(self, "_values", MappingProxyType(dict(values)))

    @property
    def spec(self) -> NodeSpec:
        """The NodeSpec this node was resolved from."""
        return self._spec

    @property
    def fields(self) -> Dict[str, Any]:
        """Scalar field values, in declaration order."""
        return {name: self._values[name] for name, _ in self._spec.fields}

    @property
    def children(self) -> Dict[str, "ResolvedNode"]:
        """Child nodes, in declaration order."""
        return {name: self._values[name] for name, _ in self._spec.children}

    @property
    def derived(self) -> Dict[str, Any]:
        """Evaluate every derived property."""
        return {name: fn(self) for name, fn in self._spec.derived}

    def __getattr__(self, name: str) -> Any:
        try:
            values = object.__getattribute__(self, "_values")
            spec = object.__getattribute__(self, "_spec")
        except AttributeError:
            raise AttributeError(name) from None

        if name in values:
            return values[name]
        for derived_name, fn in spec.derived:
            if derived_name == name:
                return fn(self)
        raise AttributeError(
            f"'{spec.name}' has no field, child or derived property '{name}'"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("ResolvedNode is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("ResolvedNode is immutable")

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ResolvedNode({self._spec.name}, {self.to_dict(mask_secrets=True)!r})"

    def to_dict(self, mask_secrets: bool = False) -> Dict[str, Any]:
        """Convert to plain nested dicts.

        Args:
            mask_secrets: Replace non-empty values of secret-looking
                fields with a mask.
        """
        result: Dict[str, Any] = {}
        for name, field_spec in self._spec.fields:
            value = self._values[name]
            if mask_secrets and field_spec.secret and value:
                value = MASK
            result[name] = value
        for name, _ in self._spec.children:
            result[name] = self._values[name].to_dict(mask_secrets=mask_secrets)
        return result


# The root of a resolution is an ordinary ResolvedNode.
ConfigTree = ResolvedNode


__all__ = ["ConfigTree", "MASK", "ResolvedNode"]
