"""Node resolver.

Walks a NodeSpec depth-first and builds a ResolvedNode. Fields of a
node are resolved in declaration order, each one as:

1. environment override, coerced to the field kind (always wins);
2. otherwise the static default;
3. otherwise the computed default, evaluated against the siblings
   resolved so far.

Children are resolved after the fields of their parent. Any error
aborts the whole resolution; no partial tree is ever returned.
"""

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

from envtree.coercion import coerce
from envtree.environment import EnvironmentSnapshot, Present, snapshot
from envtree.errors import MissingRequiredDependencyError, SchemaError
from envtree.fields import FieldKind, FieldSpec
from envtree.nodes import NodeSpec, SchemaRegistry, check_unique_keys
from envtree.tree import MASK, ResolvedNode

logger = logging.getLogger(__name__)

SOURCE_ENV = "env"
SOURCE_DEFAULT = "default"
SOURCE_COMPUTED = "computed"


class SiblingView(Mapping[str, Any]):
    """Read-only view of the siblings a computed default may read.

    Records names that were requested but not available, so the
    resolver can report them as a missing dependency.
    """

    def __init__(self, values: Mapping[str, Any]):
        self._values = dict(values)
        self.missing: List[str] = []

    def __getitem__(self, name: str) -> Any:
        if name not in self._values:
            self.missing.append(name)
            raise KeyError(name)
        return self._values[name]

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


class Resolver:
    """Resolves NodeSpecs against one environment snapshot.

    Args:
        environ: Environment mapping (defaults to a snapshot of
            ``os.environ`` taken now).
        registry: Registry for named child references.

    Example:
        >>> resolver = Resolver({"DB_SQLITE_POOL_SIZE": "4"})
        >>> tree = resolver.resolve(DATABASE)
        >>> tree.sqlite.enable_wal
        True
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        registry: Optional[SchemaRegistry] = None,
    ):
        self._env: EnvironmentSnapshot = snapshot(environ)
        self._registry = registry if registry is not None else SchemaRegistry()
        self._sources: Dict[str, str] = {}

    @property
    def environment(self) -> EnvironmentSnapshot:
        """The snapshot this resolver reads from."""
        return self._env

    @property
    def sources(self) -> Dict[str, str]:
        """Where each field value of the last resolution came from."""
        return dict(self._sources)

    def resolve(self, spec: NodeSpec) -> ResolvedNode:
        """Resolve a root spec into a tree.

        Raises:
            FieldValidationError: If a present value is invalid.
            SchemaError: If the spec graph is malformed or a computed
                default misbehaves.
        """
        self._registry.check_acyclic(spec)
        check_unique_keys(spec, self._registry)

        self._sources = {}
        tree = self._resolve_node(spec, prefix="")

        overrides = sum(1 for s in self._sources.values() if s == SOURCE_ENV)
        logger.info(
            f"Resolved '{spec.name}': {len(self._sources)} fields, "
            f"{overrides} from environment"
        )
        return tree

    def _resolve_node(self, spec: NodeSpec, prefix: str) -> ResolvedNode:
        values: Dict[str, Any] = {}
        resolved_fields: Dict[str, Any] = {}

        for name, field_spec in spec.fields:
            path = f"{prefix}{name}"
            value = self._resolve_field(spec, name, field_spec, resolved_fields, path)
            resolved_fields[name] = value
            values[name] = value

        for child_name, ref in spec.children:
            child = self._registry.child_spec(spec, child_name, ref)
            values[child_name] = self._resolve_node(child, f"{prefix}{child_name}.")

        return ResolvedNode(spec, values)

    def _resolve_field(
        self,
        node: NodeSpec,
        name: str,
        field_spec: FieldSpec,
        siblings: Dict[str, Any],
        path: str,
    ) -> Any:
        reading = self._env.read(field_spec.key)

        if isinstance(reading, Present):
            value = coerce(field_spec, reading, path)
            source = SOURCE_ENV
        elif not field_spec.computed:
            value = field_spec.default
            source = SOURCE_DEFAULT
        else:
            value = self._compute_default(node, name, field_spec, siblings)
            source = SOURCE_COMPUTED

        if field_spec.kind is FieldKind.FLOAT:
            value = float(value)

        self._sources[path] = source
        shown = MASK if field_spec.secret and value else value
        logger.debug(f"{path} = {shown!r} ({source}, {field_spec.key})")
        return value

    def _compute_default(
        self,
        node: NodeSpec,
        name: str,
        field_spec: FieldSpec,
        siblings: Dict[str, Any],
    ) -> Any:
        if field_spec.depends_on is not None:
            visible = {dep: siblings[dep] for dep in field_spec.depends_on}
        else:
            visible = siblings
        view = SiblingView(visible)

        try:
            value = field_spec.default_fn(view)
        except KeyError as e:
            if view.missing:
                raise MissingRequiredDependencyError(
                    node.name, name, view.missing[0], "not resolved yet"
                ) from e
            raise

        if view.missing:
            # A fallback such as view.get(name, default) still read ahead.
            raise MissingRequiredDependencyError(
                node.name, name, view.missing[0], "not resolved yet"
            )

        if not field_spec.accepts(value):
            raise SchemaError(
                f"Computed default for {field_spec.key} ('{node.name}.{name}') "
                f"returned {value!r}, which is not a valid {field_spec.kind.value}"
            )
        return value


def resolve(
    spec: NodeSpec,
    environ: Optional[Mapping[str, str]] = None,
    registry: Optional[SchemaRegistry] = None,
) -> ResolvedNode:
    """Resolve a root spec against an environment.

    Args:
        spec: Root node declaration.
        environ: Environment mapping (defaults to ``os.environ``).
        registry: Registry for named child references.

    Returns:
        The immutable ConfigTree.
    """
    return Resolver(environ, registry).resolve(spec)


__all__ = [
    "Resolver",
    "SiblingView",
    "SOURCE_COMPUTED",
    "SOURCE_DEFAULT",
    "SOURCE_ENV",
    "resolve",
]
