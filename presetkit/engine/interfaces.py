"""Interfaces of the collaborators the preset index consumes."""

from typing import Any, Callable, Mapping, Optional, Protocol, TypeVar

T = TypeVar("T")


class Resolver(Protocol):
    """Graph-like object that memoizes per-feature computations."""

    def transient(self, entity: Any, key: str, fn: Callable[[], T]) -> T:
        """Return the cached result for (entity, key), computing it once."""
        ...


class Feature(Protocol):
    """A map feature: its tags, type and geometry as seen by a resolver."""

    id: str
    type: str
    tags: Mapping[str, str]

    def geometry(self, resolver: Resolver) -> str: ...

    def is_on_address_line(self, resolver: Resolver) -> bool: ...


class KeyValueStore(Protocol):
    """Synchronous store of opaque strings."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


GeometryClassifier = Callable[[Mapping[str, Any]], Mapping[str, bool]]
IntroMode = Callable[[], bool]
