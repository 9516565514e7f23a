"""Declarative configuration groups and typed item descriptors.

A :class:`Configuration` is a named, ordered group of
:class:`ConfigurationItem` descriptors. A descriptor is a typed handle over
one key in a :class:`~propstore.store.PropertyStore`; it never holds the
value itself.

Declaring an item is two steps: build the descriptor, then attach it to its
group (which rejects duplicate keys) and register it with the store.
:meth:`ConfigurationItem.declare` and :meth:`Configuration.declare` do both.

Example::

    from propstore import Configuration, PropertyStore

    store = PropertyStore()
    store.configure("~/.config/myapp")

    network = Configuration("Network", store=store)
    retries = network.declare("Retries", "net.retries", 3)
    api_token = network.declare("API token", "net.token", "", secret=True)

    retries.set(5)
    retries.get()        # 5
    str(api_token)       # "ConfigItem(name='API token', key='net.token', value=********)"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from propstore.codec import Codec, codec_for, infer_codec
from propstore.exceptions import DuplicateKeyError, ItemNotFoundError, ItemTypeError
from propstore.store import default_store

if TYPE_CHECKING:
    from collections.abc import Iterator

    from propstore.store import PropertyStore

T = TypeVar("T")

SECRET_MASK = "********"


class Configuration:
    """Named, insertion-ordered group of configuration items.

    Keys are unique within a group. Items declared through the group are
    read and written through ``store``.

    Args:
        name: Display name, used in error messages and qualified keys.
        store: Backing store. Defaults to the shared :func:`default_store`.
    """

    def __init__(self, name: str | None = None, store: PropertyStore | None = None) -> None:
        self.name = name
        self._store = store
        self._items: dict[str, ConfigurationItem[Any]] = {}

    @property
    def store(self) -> PropertyStore:
        return self._store if self._store is not None else default_store()

    @property
    def items(self) -> list[ConfigurationItem[Any]]:
        """Items in declaration order."""
        return list(self._items.values())

    def add(self, item: ConfigurationItem[Any]) -> None:
        """Attach an item to this group.

        Raises:
            DuplicateKeyError: If an item with the same key is already here.
        """
        if item.key in self._items:
            raise DuplicateKeyError(item.key, self.name)
        self._items[item.key] = item

    def item(self, key: str) -> ConfigurationItem[Any]:
        """Item for ``key``.

        Prefer :meth:`item_or_none` when absence is expected.

        Raises:
            ItemNotFoundError: If no item has that key.
        """
        found = self._items.get(key)
        if found is None:
            raise ItemNotFoundError(key, self.name)
        return found

    def item_or_none(self, key: str) -> ConfigurationItem[Any] | None:
        return self._items.get(key)

    def declare(
        self,
        name: str,
        key: str,
        default: T,
        *,
        secret: bool = False,
        reset: bool = False,
        description: str | None = None,
        value_type: Any = None,
    ) -> ConfigurationItem[T]:
        """Build an item, add it to this group and register it with the store."""
        return ConfigurationItem.declare(
            self,
            name,
            key,
            default,
            secret=secret,
            reset=reset,
            description=description,
            value_type=value_type,
        )

    def qualified_key(self, key: str) -> str:
        """``"<group name>.<key>"``, or ``key`` alone for an unnamed group."""
        return f"{self.name}.{key}" if self.name else key

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ConfigurationItem[Any]]:
        return iter(self.items)

    def __repr__(self) -> str:
        return f"Configuration(name={self.name!r}, items={len(self._items)})"


@dataclass(frozen=True, eq=False, repr=False)
class ConfigurationItem(Generic[T]):
    """Typed handle over one store key.

    Constructing a descriptor has no side effects; use :meth:`declare` to
    attach it to its group and register it with the store.

    Attributes:
        configuration: Owning group (back-reference).
        name: Display label.
        key: Stable storage key.
        default: Value returned while nothing is stored.
        secret: Mask the value when rendered.
        reset: Clear any stored value when declared.
        description: Optional help text.
        value_type: Type or codec used to encode and decode the value.
            Derived from ``default`` when omitted.
    """

    configuration: Configuration
    name: str
    key: str
    default: T
    secret: bool = False
    reset: bool = False
    description: str | None = None
    value_type: Any = field(default=None)

    @classmethod
    def declare(
        cls,
        configuration: Configuration,
        name: str,
        key: str,
        default: T,
        *,
        secret: bool = False,
        reset: bool = False,
        description: str | None = None,
        value_type: Any = None,
    ) -> ConfigurationItem[T]:
        """Build an item, add it to ``configuration`` and register it.

        Raises:
            DuplicateKeyError: If ``configuration`` already has ``key``.
                The store registry is left untouched in that case.
        """
        item = cls(
            configuration=configuration,
            name=name,
            key=key,
            default=default,
            secret=secret,
            reset=reset,
            description=description,
            value_type=value_type,
        )
        configuration.add(item)
        item.store.register(item)
        if reset:
            item.unset()
        return item

    @property
    def store(self) -> PropertyStore:
        return self.configuration.store

    @property
    def codec(self) -> Codec[T]:
        if self.value_type is not None:
            return codec_for(self.value_type)
        return infer_codec(self.default)

    @property
    def qualified_key(self) -> str:
        return self.configuration.qualified_key(self.key)

    def get(self) -> T:
        """Current value, or the default when unset or undecodable."""
        return self.store.get(self.key, self.default, value_type=self.codec)

    def get_string_value(self) -> str:
        """Stored string (raw for strings, JSON otherwise), or the default's."""
        return self.store.get_string(self.key, self._default_string())

    def set(self, value: T, save_now: bool = True) -> bool:
        """Store a new value. Returns True if the stored form changed."""
        return self.store.set(self.key, value, save_now=save_now, value_type=self.codec)

    def unset(self) -> None:
        self.store.unset(self.key)

    def toggle(self) -> bool:
        """Flip a boolean item and return the new value.

        Raises:
            ItemTypeError: If the item's default is not a ``bool``.
        """
        if not isinstance(self.default, bool):
            raise ItemTypeError(self.key, "toggle() only valid for boolean config items")
        current = self.store.get(self.key, self.default, value_type=bool)
        new_value = not current
        self.store.set(self.key, new_value, value_type=bool)
        return new_value

    @property
    def display_value(self) -> str:
        return SECRET_MASK if self.secret else self.get_string_value()

    def _default_string(self) -> str:
        if self.default is None:
            return ""
        return self.codec.encode(self.default)

    def __str__(self) -> str:
        return f"ConfigItem(name='{self.name}', key='{self.key}', value={self.display_value})"

    def __repr__(self) -> str:
        return f"ConfigurationItem(name={self.name!r}, key={self.key!r}, secret={self.secret})"
