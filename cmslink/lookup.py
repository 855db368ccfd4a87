"""Collaborator interfaces for entities that links point at.

Files and pages live in stores owned by the host application. The link core
only needs to find them by id and ask a few questions of them.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol


class Entity(Protocol):
    """An externally owned record a link can reference.

    Entities may also provide ``link() -> str``, ``title`` and ``menu_title``;
    the resolver checks for those at runtime.
    """

    def exists(self) -> bool: ...


class EntityLookup(Protocol):
    """Resolves a referenced entity by kind and id."""

    def find_by_id(self, kind: str, entity_id: Any) -> Optional[Entity]: ...


@dataclass
class StoredEntity:
    """Simple entity with an optional URL, title, and menu title."""

    title: str | None = None
    url: str | None = None
    menu_title: str | None = None
    deleted: bool = False

    def exists(self) -> bool:
        return not self.deleted

    def link(self) -> str | None:
        return self.url


class InMemoryEntityLookup:
    """Dictionary-backed EntityLookup."""

    def __init__(self) -> None:
        self._entities: dict[tuple[str, Any], Any] = {}

    def add(self, kind: str, entity_id: Any, entity: Any) -> Any:
        self._entities[(kind, entity_id)] = entity
        return entity

    def remove(self, kind: str, entity_id: Any) -> None:
        self._entities.pop((kind, entity_id), None)

    def find_by_id(self, kind: str, entity_id: Any) -> Optional[Any]:
        return self._entities.get((kind, entity_id))
