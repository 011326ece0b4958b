"""Holder for the current configuration tree.

ConfigStore resolves a root spec once on first use and hands out the
same tree afterwards. ``reload()`` builds a brand-new tree from a fresh
environment snapshot and swaps it in only once it is fully resolved;
trees handed out earlier stay valid and unchanged.

Thread Safety:
    Loads and reloads are serialized by a lock. Readers never observe
    a partially built tree.

Example:
    >>> store = ConfigStore(DATABASE)
    >>> store.get().type
    'sqlite'
    >>> os.environ["DB_TYPE"] = "postgresdb"
    >>> store.reload().type
    'postgresdb'
"""

import logging
import threading
from typing import Callable, Mapping, Optional

from envtree.environment import EnvironmentSnapshot
from envtree.errors import ConfigError
from envtree.nodes import NodeSpec, SchemaRegistry
from envtree.resolver import Resolver
from envtree.tree import ResolvedNode

logger = logging.getLogger(__name__)

EnvironFactory = Callable[[], Mapping[str, str]]


class ConfigStore:
    """Current ConfigTree for one root spec, with serialized reloads.

    Args:
        spec: Root node declaration.
        registry: Registry for named child references.
        environ_factory: Returns the environment mapping to snapshot on
            each load (defaults to the process environment).
    """

    def __init__(
        self,
        spec: NodeSpec,
        registry: Optional[SchemaRegistry] = None,
        environ_factory: Optional[EnvironFactory] = None,
    ):
        self._spec = spec
        self._registry = registry
        self._environ_factory = environ_factory or EnvironmentSnapshot.capture
        self._lock = threading.Lock()
        self._tree: Optional[ResolvedNode] = None
        self._generation = 0

    @property
    def spec(self) -> NodeSpec:
        return self._spec

    @property
    def generation(self) -> int:
        """Number of successful loads so far."""
        return self._generation

    @property
    def loaded(self) -> bool:
        return self._tree is not None

    def get(self) -> ResolvedNode:
        """Return the current tree, resolving it on first use."""
        tree = self._tree
        if tree is not None:
            return tree
        with self._lock:
            if self._tree is None:
                self._tree = self._load()
            return self._tree

    def reload(self) -> ResolvedNode:
        """Resolve a new tree and make it current.

        Returns:
            The new tree.

        Raises:
            ConfigError: If resolution fails. The previous tree, if any,
                stays current.
        """
        with self._lock:
            try:
                tree = self._load()
            except ConfigError as e:
                logger.error(f"Reload of '{self._spec.name}' failed, keeping previous tree: {e}")
                raise
            self._tree = tree
            return tree

    def _load(self) -> ResolvedNode:
        environ = self._environ_factory()
        tree = Resolver(environ, self._registry).resolve(self._spec)
        self._generation += 1
        logger.debug(f"Loaded '{self._spec.name}' generation {self._generation}")
        return tree


__all__ = ["ConfigStore", "EnvironFactory"]
