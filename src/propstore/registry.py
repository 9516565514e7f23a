"""Flat registry of declared configuration items."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

    from propstore.configuration import ConfigurationItem


class ItemRegistry:
    """Insertion-ordered list of item descriptors, searchable by key.

    No uniqueness check happens here; the owning ``Configuration`` rejects
    duplicate keys. If two descriptors share a key anyway, ``find`` returns
    the first one registered. Not thread-safe on its own: the
    ``PropertyStore`` guards it with the same lock as the property map.
    """

    def __init__(self) -> None:
        self._items: list[ConfigurationItem[Any]] = []

    def add(self, item: ConfigurationItem[Any]) -> None:
        self._items.append(item)

    def find(self, key: str) -> ConfigurationItem[Any] | None:
        return next((item for item in self._items if item.key == key), None)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ConfigurationItem[Any]]:
        return iter(list(self._items))

    def __contains__(self, key: object) -> bool:
        return any(item.key == key for item in self._items)
