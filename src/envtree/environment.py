"""Environment reader.

Resolution reads from an EnvironmentSnapshot: a frozen copy of the
process environment taken once per resolution pass, so every lookup
of the same key within a pass returns the same answer.

A key that is not set reads as ABSENT. A key set to the empty string
reads as Present("").
"""

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional, Union


@dataclass(frozen=True)
class Present:
    """A key that is set in the environment.

    Attributes:
        raw: The raw string value, possibly empty.
    """

    raw: str


class _Absent:
    """A key that is not set in the environment."""

    _instance: Optional["_Absent"] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()

Reading = Union[Present, _Absent]


class EnvironmentSnapshot(Mapping[str, str]):
    """Immutable copy of an environment mapping.

    Args:
        environ: Mapping to copy (defaults to ``os.environ``).

    Example:
        >>> env = EnvironmentSnapshot({"DB_TYPE": "postgresdb", "DB_TABLE_PREFIX": ""})
        >>> env.read("DB_TYPE")
        Present(raw='postgresdb')
        >>> env.read("DB_TABLE_PREFIX")
        Present(raw='')
        >>> env.read("DB_HOST")
        ABSENT
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        source = os.environ if environ is None else environ
        data = {}
        for key, value in source.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError(
                    f"Environment entries must be strings, got {key!r}={value!r}"
                )
            data[key] = value
        self._data = MappingProxyType(data)

    @classmethod
    def capture(cls) -> "EnvironmentSnapshot":
        """Snapshot the current process environment."""
        return cls(os.environ)

    def read(self, key: str) -> Reading:
        """Read a key.

        Args:
            key: Environment variable name.

        Returns:
            Present(raw) if the key is set (even to ""), otherwise ABSENT.
        """
        if key in self._data:
            return Present(self._data[key])
        return ABSENT

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"EnvironmentSnapshot({len(self._data)} keys)"


def snapshot(environ: Optional[Mapping[str, str]] = None) -> EnvironmentSnapshot:
    """Return ``environ`` as a snapshot, copying it unless it already is one."""
    if isinstance(environ, EnvironmentSnapshot):
        return environ
    return EnvironmentSnapshot(environ)


__all__ = [
    "ABSENT",
    "EnvironmentSnapshot",
    "Present",
    "Reading",
    "snapshot",
]
