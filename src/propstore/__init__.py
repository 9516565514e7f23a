"""propstore -- thread-safe typed key/value configuration with atomic JSON persistence.

Values live in a single ``PropertyStore`` per process, are written to disk
atomically on change and announced on an event bus. ``Configuration``
groups declare typed ``ConfigurationItem`` handles over store keys.
"""

from propstore.codec import Codec, JsonCodec, StringCodec, codec_for, infer_codec
from propstore.configuration import SECRET_MASK, Configuration, ConfigurationItem
from propstore.events import ConfigChanged, EventBus, InProcessEventBus
from propstore.exceptions import (
    DecodeError,
    DuplicateKeyError,
    ItemNotFoundError,
    ItemTypeError,
    PropertyStoreError,
    StoreInitializationError,
)
from propstore.logging import LoggingSettings, configure_logging, get_logger
from propstore.registry import ItemRegistry
from propstore.settings import StoreSettings, get_store_settings
from propstore.store import PropertyStore, default_store

__all__ = [
    "SECRET_MASK",
    "Codec",
    "ConfigChanged",
    "Configuration",
    "ConfigurationItem",
    "DecodeError",
    "DuplicateKeyError",
    "EventBus",
    "InProcessEventBus",
    "ItemNotFoundError",
    "ItemRegistry",
    "ItemTypeError",
    "JsonCodec",
    "LoggingSettings",
    "PropertyStore",
    "PropertyStoreError",
    "StoreInitializationError",
    "StoreSettings",
    "StringCodec",
    "codec_for",
    "configure_logging",
    "default_store",
    "get_logger",
    "get_store_settings",
    "infer_codec",
]
