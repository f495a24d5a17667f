"""
Generic keyed artifact container.

Primary storage is an insertion-ordered dict. Subclasses keep secondary
indices beside it by overriding the _index / _unindex hooks, which are
called from every mutating operation so indices never drift.
"""

from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

from reasonkit.models.artifacts import Artifact

T = TypeVar("T", bound=Artifact)


class TypedStore(Generic[T]):
    """Ordered id -> artifact map with index hooks."""

    def __init__(self) -> None:
        self._items: dict[str, T] = {}

    # Index hooks

    def _index(self, item_id: str, item: T) -> None:
        """Add an item to secondary indices."""

    def _unindex(self, item_id: str, item: T) -> None:
        """Remove an item from secondary indices."""

    def _reset_indices(self) -> None:
        """Drop every secondary index."""

    # Mutation

    def add(self, item_id: str, item: T) -> None:
        """Insert or replace. Replacing keeps the original insertion position."""
        previous = self._items.get(item_id)
        if previous is not None:
            self._unindex(item_id, previous)
        self._items[item_id] = item
        self._index(item_id, item)

    def update(self, item_id: str, updater: Callable[[T], T]) -> bool:
        """Replace an item with updater(item). Returns False if the id is absent."""
        current = self._items.get(item_id)
        if current is None:
            return False
        self.add(item_id, updater(current))
        return True

    def delete(self, item_id: str) -> bool:
        item = self._items.pop(item_id, None)
        if item is None:
            return False
        self._unindex(item_id, item)
        return True

    def clear(self) -> None:
        self._items.clear()
        self._reset_indices()

    # Reads

    def get(self, item_id: str) -> T | None:
        return self._items.get(item_id)

    def has(self, item_id: str) -> bool:
        return item_id in self._items

    def get_all(self) -> list[T]:
        """Snapshot in insertion order."""
        return list(self._items.values())

    def size(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self.get_all())

    def keys(self) -> list[str]:
        return list(self._items.keys())

    def values(self) -> list[T]:
        return self.get_all()

    def for_each(self, fn: Callable[[T, str], None]) -> None:
        for item_id, item in list(self._items.items()):
            fn(item, item_id)

    def filter(self, predicate: Callable[[T], bool]) -> list[T]:
        return [item for item in self.get_all() if predicate(item)]

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        for item in self.get_all():
            if predicate(item):
                return item
        return None

    # Bulk transfer

    def export(self) -> dict[str, T]:
        """Copy of the full map, in insertion order."""
        return dict(self._items)

    def import_data(self, data: dict[str, T]) -> None:
        """Replace the whole contents with data."""
        self.clear()
        for item_id, item in data.items():
            self.add(item_id, item)

    # Helpers for subclasses

    def _items_for(self, index: dict[str, set[str]], key: str) -> list[T]:
        """Resolve an id-set index entry to items, in insertion order."""
        ids = index.get(key)
        if not ids:
            return []
        return [item for item_id, item in self._items.items() if item_id in ids]

    @staticmethod
    def _add_to(index: dict[str, set[str]], key: str, item_id: str) -> None:
        index.setdefault(key, set()).add(item_id)

    @staticmethod
    def _remove_from(index: dict[str, set[str]], key: str, item_id: str) -> None:
        ids = index.get(key)
        if ids is None:
            return
        ids.discard(item_id)
        if not ids:
            del index[key]
