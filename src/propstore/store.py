"""Thread-safe typed property store with atomic JSON persistence.

The store keeps a map of key -> stored string (see :mod:`propstore.codec`
for the string format), mirrors it to a single JSON file and notifies an
event bus whenever a value actually changes.

Lifecycle:
    1. Construct one ``PropertyStore`` per process and hand it to consumers.
    2. Call ``configure(base_dir, file_name)`` once at startup. Any accessor
       used before that configures from ``StoreSettings`` defaults.
    3. ``close()`` (or leaving a ``with`` block) flushes unsaved changes.

Failure policy:
    - Directory creation failure raises ``StoreInitializationError``.
    - An unreadable or corrupt file is logged; the store starts empty.
    - A value that does not decode as the requested type is logged and the
      caller's default is returned.
    - A failed save is logged; memory stays authoritative and the next
      changing ``set`` saves again.

Locking:
    One reader/writer lock covers the property map, the item registry and
    the configured flag. ``get``, lookups and the snapshot taken by
    ``save`` use the read side; ``configure``, ``set``, ``unset``,
    ``register`` and ``reset`` use the write side. ``set`` publishes its
    event and saves after releasing the write lock, so another thread may
    slip a write in between; the file then reflects that later state.

Example:
    >>> store = PropertyStore()
    >>> store.configure("/tmp/myapp", "app.json")
    >>> store.set("retries", 3)
    True
    >>> store.get("retries", 0)
    3
    >>> store.set("retries", 3)
    False
"""

from __future__ import annotations

import contextlib
import json
import os
import threading
import time
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from propstore._rwlock import ReadWriteLock
from propstore.codec import JSON_NULL, StringCodec, codec_for, infer_codec
from propstore.events import ConfigChanged, EventBus, InProcessEventBus
from propstore.exceptions import DecodeError, StoreInitializationError
from propstore.logging import get_logger
from propstore.registry import ItemRegistry
from propstore.settings import StoreSettings, get_store_settings

if TYPE_CHECKING:
    from types import TracebackType

    from propstore.configuration import ConfigurationItem

logger = get_logger(__name__)

T = TypeVar("T")

TMP_SUFFIX = ".tmp"


class PropertyStore:
    """Process-wide key/value store with typed access.

    Args:
        event_bus: Receives a ``ConfigChanged`` event for every changing
            ``set``. Defaults to a private ``InProcessEventBus``.
        settings: Source of the default directory and file name. Defaults
            to the cached environment-driven ``StoreSettings``.
    """

    def __init__(
        self,
        event_bus: EventBus | None = None,
        settings: StoreSettings | None = None,
    ) -> None:
        self.event_bus: EventBus = event_bus if event_bus is not None else InProcessEventBus()
        self._settings = settings
        self._lock = ReadWriteLock()
        self._init_lock = threading.RLock()
        self._save_lock = threading.Lock()
        self._properties: dict[str, str] = {}
        self._registry = ItemRegistry()
        self._configured = False
        self._path: Path | None = None

    # -- lifecycle ---------------------------------------------------------

    def configure(
        self,
        base_dir: str | os.PathLike[str] | None = None,
        file_name: str | None = None,
    ) -> None:
        """Point the store at its file and load it. No-op once configured.

        Args:
            base_dir: Directory for the property file. Created if missing.
            file_name: File name inside ``base_dir``.

        Raises:
            StoreInitializationError: If ``base_dir`` cannot be created.
        """
        with self._init_lock:
            if self._configured:
                return
            settings = self._settings or get_store_settings()
            target = Path(base_dir) if base_dir is not None else settings.base_dir
            assert target is not None
            directory = Path(os.path.abspath(target.expanduser()))
            path = directory / (file_name or settings.file_name)

            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StoreInitializationError(directory, str(exc)) from exc

            loaded = self._load(path)
            with self._lock.write():
                self._path = path
                self._properties = loaded
                self._configured = True

        logger.info("property_store_initialized", path=str(path), keys=len(loaded))

    def reset(
        self,
        base_dir: str | os.PathLike[str] | None = None,
        file_name: str | None = None,
    ) -> None:
        """Forget all state and registered items, then configure again.

        Nothing is saved first; the file at the new location is loaded as is.
        """
        with self._init_lock:
            with self._lock.write():
                self._properties.clear()
                self._registry.clear()
                self._configured = False
                self._path = None
            self.configure(base_dir, file_name)

    def close(self) -> None:
        """Persist any changes made with ``save_now=False``."""
        if self._configured:
            self.save()

    def __enter__(self) -> PropertyStore:
        self._ensure_configured()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def is_configured(self) -> bool:
        return self._configured

    @property
    def path(self) -> Path:
        """Resolved location of the property file."""
        self._ensure_configured()
        assert self._path is not None
        return self._path

    def _ensure_configured(self) -> None:
        if not self._configured:
            self.configure()

    # -- typed access ------------------------------------------------------

    def get(self, key: str, default: T, value_type: Any = None) -> T:
        """Read a typed value.

        Args:
            key: Storage key.
            default: Returned when the key is absent or its value does not
                decode.
            value_type: Type or codec to decode with. When omitted, the
                type of ``default`` decides (``str`` reads raw).

        Returns:
            The decoded value, or ``default``. Never raises for bad data.
        """
        self._ensure_configured()
        with self._lock.read():
            raw = self._properties.get(key)
        if raw is None:
            return default
        try:
            codec = codec_for(value_type) if value_type is not None else infer_codec(default)
            if raw == JSON_NULL and not isinstance(codec, StringCodec):
                return default
            value = codec.decode(raw)
        except DecodeError as exc:
            logger.error(
                "property_decode_failed",
                key=key,
                target_type=exc.target_type,
                reason=exc.reason,
            )
            return default
        return default if value is None else value

    def get_string(self, key: str, default: str) -> str:
        """Read a value as its raw stored string."""
        return self.get(key, default, value_type=str)

    def set(
        self,
        key: str,
        value: Any,
        save_now: bool = True,
        value_type: Any = None,
    ) -> bool:
        """Store a value; notify and save only if the stored form changed.

        Args:
            key: Storage key.
            value: New value. Strings are stored raw, anything else as JSON.
            save_now: Write the file immediately after a change.
            value_type: Type or codec to encode with. Defaults to the type
                of ``value``.

        Returns:
            True if the stored string changed.

        Raises:
            DecodeError: If no codec can be built for the value's type.
        """
        self._ensure_configured()
        codec = codec_for(value_type if value_type is not None else type(value))
        serialized = codec.encode(value)

        with self._lock.write():
            previous = self._properties.get(key)
            if previous == serialized:
                return False
            self._properties[key] = serialized
            item = self._registry.find(key)

        logger.debug("property_changed", key=key, created=previous is None)
        self.event_bus.publish(ConfigChanged(key=key, item=item))
        if save_now:
            self.save()
        return True

    def unset(self, key: str) -> None:
        """Remove a key. Missing keys are ignored; nothing is saved."""
        self._ensure_configured()
        with self._lock.write():
            removed = self._properties.pop(key, None)
        if removed is not None:
            logger.debug("property_unset", key=key)

    # -- persistence -------------------------------------------------------

    def save(self) -> bool:
        """Atomically write the whole map to disk.

        The JSON document is written to ``<file>.tmp``, fsynced and moved
        over the target, so readers see either the old or the new file.
        An empty map writes nothing.

        Returns:
            True if a file was written.
        """
        self._ensure_configured()
        with self._save_lock:
            with self._lock.read():
                if not self._properties:
                    return False
                document = json.dumps(self._properties, indent=2, sort_keys=True, ensure_ascii=False)
                count = len(self._properties)
                path = self._path
            assert path is not None
            saved = _write_atomically(path, document)
        if saved:
            logger.debug("property_file_saved", path=str(path), keys=count)
        return saved

    def _load(self, path: Path) -> dict[str, str]:
        if not path.exists():
            logger.info("property_file_missing", path=str(path))
            return {}

        start = time.perf_counter()
        try:
            with path.open("r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("property_load_failed", path=str(path), error=str(exc))
            return {}

        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            logger.error(
                "property_load_failed",
                path=str(path),
                error=f"expected a JSON object, got {type(loaded).__name__}",
            )
            return {}

        properties = {
            str(key): value if isinstance(value, str) else json.dumps(value, indent=2)
            for key, value in loaded.items()
        }
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "property_file_loaded",
            path=str(path),
            keys=len(properties),
            duration_ms=elapsed_ms,
        )
        return properties

    # -- item registry -----------------------------------------------------

    def register(self, item: ConfigurationItem[Any]) -> None:
        """Add a descriptor to the registry. Duplicates are not checked here."""
        self._ensure_configured()
        with self._lock.write():
            self._registry.add(item)

    def get_generic(self, key: str) -> ConfigurationItem[Any] | None:
        """Registered descriptor for ``key``, or None."""
        self._ensure_configured()
        with self._lock.read():
            return self._registry.find(key)

    def get_item(self, key: str) -> ConfigurationItem[Any] | None:
        """Alias of :meth:`get_generic` for typed call sites."""
        return self.get_generic(key)

    @property
    def items(self) -> list[ConfigurationItem[Any]]:
        """All registered descriptors in registration order."""
        self._ensure_configured()
        with self._lock.read():
            return list(self._registry)

    # -- raw map access ----------------------------------------------------

    @property
    def properties(self) -> dict[str, str]:
        return self.snapshot()

    def snapshot(self) -> dict[str, str]:
        """Copy of the stored key -> string map."""
        self._ensure_configured()
        with self._lock.read():
            return dict(self._properties)

    def __getitem__(self, key: str) -> str:
        self._ensure_configured()
        with self._lock.read():
            return self._properties[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value, save_now=True)

    def __contains__(self, key: object) -> bool:
        self._ensure_configured()
        with self._lock.read():
            return key in self._properties

    def __len__(self) -> int:
        self._ensure_configured()
        with self._lock.read():
            return len(self._properties)

    def __repr__(self) -> str:
        location = str(self._path) if self._path is not None else "<unconfigured>"
        return f"PropertyStore(path={location!r})"


def _write_atomically(path: Path, document: str) -> bool:
    tmp = path.with_name(path.name + TMP_SUFFIX)
    try:
        with tmp.open("w", encoding="utf-8") as f:
            f.write(document)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except OSError as exc:
        logger.error("property_save_failed", path=str(path), error=str(exc))
        with contextlib.suppress(OSError):
            tmp.unlink(missing_ok=True)
        return False
    return True


@lru_cache(maxsize=1)
def default_store() -> PropertyStore:
    """Shared store used by configurations declared without an explicit one.

    Clear with ``default_store.cache_clear()`` in tests.
    """
    return PropertyStore()
