"""
Closed registry of soft-deletable entity collections.

The registry is the only path from a caller-supplied entity name to a storage
accessor. It is built once from an explicit list of entries and cannot be
changed afterwards, so an arbitrary string can never reach a storage object
that was not enumerated ahead of time.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Mapping, Optional, Tuple, Union

from .exceptions import UnknownEntityError

if TYPE_CHECKING:
    from .accessors import SoftDeletableAccessor

ENTITY_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_-]{0,63}$")


@dataclass(frozen=True)
class RegistryEntry:
    """A whitelisted entity name bound to its storage accessor."""

    name: str
    accessor: "SoftDeletableAccessor"

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not ENTITY_NAME_PATTERN.match(self.name):
            raise ValueError(
                f"Entity name {self.name!r} must be lowercase letters, digits, "
                "'-' or '_' and start with a letter"
            )


class EntityRegistry:
    """Immutable mapping from entity name to ``SoftDeletableAccessor``."""

    def __init__(
        self,
        entries: Union[
            Iterable[RegistryEntry], Mapping[str, "SoftDeletableAccessor"]
        ],
    ):
        """
        Build the registry.

        Args:
            entries: Registry entries, or a mapping of name to accessor

        Raises:
            ValueError: On duplicate or malformed entity names
        """
        if isinstance(entries, Mapping):
            entries = [RegistryEntry(name, accessor) for name, accessor in entries.items()]

        accessors = {}
        for entry in entries:
            if entry.name in accessors:
                raise ValueError(f"Entity {entry.name!r} is registered twice")
            accessors[entry.name] = entry.accessor

        self._accessors: Mapping[str, "SoftDeletableAccessor"] = MappingProxyType(
            accessors
        )

    def resolve(self, name: Any) -> "SoftDeletableAccessor":
        """
        Look up the accessor registered under ``name``.

        Raises:
            UnknownEntityError: If ``name`` is not whitelisted
        """
        if not isinstance(name, str):
            raise UnknownEntityError(name)
        try:
            return self._accessors[name]
        except KeyError:
            raise UnknownEntityError(name) from None

    def names(self) -> Tuple[str, ...]:
        return tuple(self._accessors)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._accessors

    def __iter__(self) -> Iterator[str]:
        return iter(self._accessors)

    def __len__(self) -> int:
        return len(self._accessors)


# Process-wide registry, installed once at startup
_registry: Optional[EntityRegistry] = None


def install_registry(registry: EntityRegistry) -> EntityRegistry:
    """
    Install the process-wide registry.

    Args:
        registry: Registry built at startup

    Returns:
        The installed registry

    Raises:
        RuntimeError: If a different registry is already installed
    """
    global _registry

    if _registry is not None and _registry is not registry:
        raise RuntimeError("Entity registry is already installed")

    _registry = registry
    return _registry


def get_registry() -> EntityRegistry:
    """
    Get the process-wide registry.

    Raises:
        RuntimeError: If no registry has been installed
    """
    if _registry is None:
        raise RuntimeError("Entity registry has not been installed")
    return _registry
