from __future__ import annotations

from typing import Any, Generic, Iterable, List, Optional, TypeVar

from pydantic import BaseModel

from production_tracking.core.errors import EntityNotFoundError

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Base class for repositories over one caller-owned collection.

    Note:
      Repositories never mutate the collection they were given. Every write
      helper returns a new list with copied entities; the caller decides
      whether to commit it.
    """

    entity_name: str = "entity"

    def __init__(self, items: Iterable[T]) -> None:
        self.items: List[T] = list(items)

    def get(self, entity_id: str) -> Optional[T]:
        """Return the entity with the given id, or None."""
        for item in self.items:
            if getattr(item, "id", None) == entity_id:
                return item
        return None

    def require(self, entity_id: str) -> T:
        """Return the entity with the given id or raise EntityNotFoundError."""
        item = self.get(entity_id)
        if item is None:
            raise EntityNotFoundError(f"{self.entity_name} {entity_id} not found", {"id": entity_id})
        return item

    def patch(self, entity_id: str, **changes: Any) -> List[T]:
        """Return a new list where the given entity carries the changes."""
        self.require(entity_id)
        return [
            item.model_copy(update=changes) if getattr(item, "id", None) == entity_id else item
            for item in self.items
        ]

    def prepend(self, entity: T) -> List[T]:
        """Return a new list with the entity placed first."""
        return [entity, *self.items]

    def append(self, entity: T) -> List[T]:
        """Return a new list with the entity placed last."""
        return [*self.items, entity]
