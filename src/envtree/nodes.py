"""Node declarations and the schema registry.

A NodeSpec groups ordered fields, nested child nodes and derived
properties. Children are either NodeSpec values or the name of a
NodeSpec held by a SchemaRegistry; named references are what make it
possible to declare a cycle, so the registry checks the graph whenever
a spec is registered.

Example:
    >>> sqlite = NodeSpec(
    ...     "sqlite",
    ...     fields={
    ...         "pool_size": integer("DB_SQLITE_POOL_SIZE", 0),
    ...         "enable_wal": boolean(
    ...             "DB_SQLITE_ENABLE_WAL",
    ...             default_fn=lambda s: s["pool_size"] > 1,
    ...             depends_on=("pool_size",),
    ...         ),
    ...     },
    ... )
    >>> registry = SchemaRegistry()
    >>> registry.register(sqlite)
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from envtree.errors import (
    CyclicNodeReferenceError,
    MissingRequiredDependencyError,
    SchemaError,
    UnknownNodeReferenceError,
)
from envtree.fields import FieldSpec

# (resolved node) -> value
DerivedFn = Callable[[Any], Any]
ChildRef = Union["NodeSpec", str]

# Names that would shadow ResolvedNode members.
RESERVED_NAMES = frozenset(
    {"spec", "to_dict", "keys", "items", "values", "get", "fields", "children", "derived"}
)


def _freeze(entries: Any) -> tuple:
    if entries is None:
        return ()
    if isinstance(entries, Mapping):
        return tuple(entries.items())
    return tuple(tuple(entry) for entry in entries)


@dataclass(frozen=True)
class NodeSpec:
    """Declaration of one configuration group.

    Field order is significant: a computed default may only read fields
    declared before it.

    Attributes:
        name: Node type name (used in error messages and registry lookups).
        fields: Ordered (name, FieldSpec) pairs. A dict is accepted.
        children: Ordered (name, NodeSpec or registered name) pairs.
        derived: Ordered (name, function of the resolved node) pairs.
        description: Free text shown by ``envtree describe``.
    """

    name: str
    fields: Tuple[Tuple[str, FieldSpec], ...] = ()
    children: Tuple[Tuple[str, ChildRef], ...] = ()
    derived: Tuple[Tuple[str, DerivedFn], ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _freeze(self.fields))
        object.__setattr__(self, "children", _freeze(self.children))
        object.__setattr__(self, "derived", _freeze(self.derived))
        self._check_names()
        self._check_dependencies()

    def _check_names(self) -> None:
        seen: Dict[str, str] = {}
        groups = (
            ("field", self.fields),
            ("child", self.children),
            ("derived property", self.derived),
        )
        for label, entries in groups:
            for name, _ in entries:
                if not isinstance(name, str) or not name.isidentifier() or name.startswith("_"):
                    raise SchemaError(f"Node '{self.name}': invalid {label} name {name!r}")
                if name in RESERVED_NAMES:
                    raise SchemaError(f"Node '{self.name}': {label} name '{name}' is reserved")
                if name in seen:
                    raise SchemaError(
                        f"Node '{self.name}': '{name}' is declared more than once "
                        f"({seen[name]}, {label})"
                    )
                seen[name] = label

        for name, spec in self.fields:
            if not isinstance(spec, FieldSpec):
                raise SchemaError(f"Node '{self.name}': field '{name}' is not a FieldSpec")
        for name, child in self.children:
            if not isinstance(child, (NodeSpec, str)):
                raise SchemaError(
                    f"Node '{self.name}': child '{name}' must be a NodeSpec or a node name"
                )
        for name, fn in self.derived:
            if not callable(fn):
                raise SchemaError(f"Node '{self.name}': derived '{name}' is not callable")

    def _check_dependencies(self) -> None:
        declared: List[str] = []
        for name, spec in self.fields:
            for dependency in spec.depends_on or ():
                if dependency == name:
                    raise MissingRequiredDependencyError(
                        self.name, name, dependency, "a field cannot depend on itself"
                    )
                if dependency not in declared:
                    raise MissingRequiredDependencyError(self.name, name, dependency)
            declared.append(name)

    @property
    def field_map(self) -> Dict[str, FieldSpec]:
        """Fields as an ordered dict."""
        return dict(self.fields)

    @property
    def child_map(self) -> Dict[str, ChildRef]:
        """Children as an ordered dict."""
        return dict(self.children)

    @property
    def derived_map(self) -> Dict[str, DerivedFn]:
        """Derived properties as an ordered dict."""
        return dict(self.derived)


class SchemaRegistry:
    """Named NodeSpecs with graph checks.

    Registration rejects cycles through named child references and
    environment keys used twice in the reachable tree. References to
    names that are not registered yet are tolerated until ``validate()``.

    Example:
        >>> registry = SchemaRegistry()
        >>> registry.register(NodeSpec("ssl", fields={...}))
        >>> registry.register(NodeSpec("postgres", children={"ssl": "ssl"}))
        >>> registry.validate()
    """

    def __init__(self):
        self._nodes: Dict[str, NodeSpec] = {}

    @property
    def names(self) -> List[str]:
        """Registered node names in registration order."""
        return list(self._nodes)

    def __contains__(self, name: str) -> bool:
        return name in self._nodes

    def get(self, name: str) -> NodeSpec:
        """Look up a registered spec.

        Raises:
            KeyError: If no spec is registered under the name.
        """
        if name not in self._nodes:
            raise KeyError(
                f"No node registered with name '{name}'. "
                f"Available: {list(self._nodes.keys())}"
            )
        return self._nodes[name]

    def register(self, spec: NodeSpec) -> NodeSpec:
        """Register a spec under its name.

        Args:
            spec: The spec to register.

        Returns:
            The registered spec.

        Raises:
            SchemaError: If another spec already uses the name, a cycle
                is formed, or environment keys collide.
        """
        existing = self._nodes.get(spec.name)
        if existing is not None and existing is not spec:
            raise SchemaError(f"Node '{spec.name}' is already registered")

        self._nodes[spec.name] = spec
        try:
            for registered in self._nodes.values():
                self.check_acyclic(registered, strict=False)
            for registered in self._nodes.values():
                check_unique_keys(registered, self, strict=False)
        except SchemaError:
            if existing is None:
                del self._nodes[spec.name]
            raise
        return spec

    def child_spec(self, parent: NodeSpec, child_name: str, ref: ChildRef) -> NodeSpec:
        """Resolve a child reference to its NodeSpec.

        Raises:
            UnknownNodeReferenceError: If a named reference is not registered.
        """
        if isinstance(ref, NodeSpec):
            return ref
        if ref not in self._nodes:
            raise UnknownNodeReferenceError(parent.name, child_name, ref)
        return self._nodes[ref]

    def validate(self) -> None:
        """Check every registered spec.

        Raises:
            UnknownNodeReferenceError: If a reference is unregistered.
            CyclicNodeReferenceError: If the graph has a cycle.
            SchemaError: If environment keys collide.
        """
        for spec in self._nodes.values():
            self.check_acyclic(spec)
        for spec in self._nodes.values():
            check_unique_keys(spec, self, strict=True)

    def check_acyclic(self, root: NodeSpec, strict: bool = True) -> None:
        """Check for cycles using DFS with color marking."""
        WHITE, GRAY, BLACK = 0, 1, 2
        color: Dict[int, int] = {}
        stack: List[NodeSpec] = []

        def dfs(spec: NodeSpec) -> None:
            color[id(spec)] = GRAY
            stack.append(spec)
            for child_name, ref in spec.children:
                child = self._lookup(spec, child_name, ref, strict)
                if child is None:
                    continue
                state = color.get(id(child), WHITE)
                if state == GRAY:
                    start = next(i for i, s in enumerate(stack) if s is child)
                    path = [s.name for s in stack[start:]]
                    raise CyclicNodeReferenceError(path + [child.name])
                if state == WHITE:
                    dfs(child)
            stack.pop()
            color[id(spec)] = BLACK

        dfs(root)

    def _lookup(
        self, parent: NodeSpec, child_name: str, ref: ChildRef, strict: bool
    ) -> Optional[NodeSpec]:
        if isinstance(ref, NodeSpec):
            return ref
        if ref in self._nodes:
            return self._nodes[ref]
        if strict:
            raise UnknownNodeReferenceError(parent.name, child_name, ref)
        return None


def iter_fields(
    spec: NodeSpec,
    registry: Optional[SchemaRegistry] = None,
    prefix: str = "",
    strict: bool = True,
) -> Iterator[Tuple[str, FieldSpec]]:
    """Yield (dotted path, FieldSpec) for every field of a tree, depth-first.

    Args:
        spec: Root spec.
        registry: Registry for named child references.
        prefix: Path prefix for the root.
        strict: Raise on unknown references instead of skipping them.
    """
    registry = registry if registry is not None else SchemaRegistry()
    for name, field_spec in spec.fields:
        yield f"{prefix}{name}", field_spec
    for child_name, ref in spec.children:
        child = registry._lookup(spec, child_name, ref, strict)
        if child is None:
            continue
        yield from iter_fields(child, registry, f"{prefix}{child_name}.", strict)


def check_unique_keys(
    spec: NodeSpec,
    registry: Optional[SchemaRegistry] = None,
    strict: bool = True,
) -> None:
    """Reject environment keys used by more than one field in a tree.

    Raises:
        SchemaError: On the first duplicate key.
    """
    seen: Dict[str, str] = {}
    for path, field_spec in iter_fields(spec, registry, strict=strict):
        if field_spec.key in seen:
            raise SchemaError(
                f"Environment variable {field_spec.key} is used by both "
                f"'{seen[field_spec.key]}' and '{path}'"
            )
        seen[field_spec.key] = path


__all__ = [
    "ChildRef",
    "DerivedFn",
    "NodeSpec",
    "SchemaRegistry",
    "RESERVED_NAMES",
    "check_unique_keys",
    "iter_fields",
]
