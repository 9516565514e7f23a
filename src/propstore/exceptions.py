"""Exception hierarchy for the property store.

Errors carry a machine-readable code and structured context so they log
consistently. Two families exist:

- Recoverable data problems (``DecodeError``) are raised by the codec and
  caught inside the store, which logs them and falls back to a default.
- Programmer errors (duplicate keys, missing items, invalid operations) and
  the fatal ``StoreInitializationError`` propagate to the caller.

Example:
    >>> from propstore.exceptions import ItemNotFoundError
    >>> raise ItemNotFoundError("net.port", "App")
    ItemNotFoundError: Config item not found for key 'net.port' in config 'App'
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

__all__ = [
    "DecodeError",
    "DuplicateKeyError",
    "ItemNotFoundError",
    "ItemTypeError",
    "PropertyStoreError",
    "StoreInitializationError",
]

UNNAMED_CONFIGURATION = "<unnamed>"


class PropertyStoreError(Exception):
    """Base class for all property store errors.

    Attributes:
        error_code: Machine-readable error code.
        message: Human-readable error description.
        context: Structured debugging information (keys, paths, type names).
    """

    error_code: str = "PROPERTY_STORE_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """String representation including context for logging."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class StoreInitializationError(PropertyStoreError):
    """Raised when the configuration directory cannot be created.

    Fatal: the store cannot operate without a writable location.

    Attributes:
        base_dir: Directory that could not be created.
    """

    error_code: str = "STORE_INITIALIZATION_FAILED"

    def __init__(self, base_dir: Path, reason: str) -> None:
        self.base_dir = base_dir
        message = f"Cannot create config directory: {base_dir}"
        super().__init__(message, {"base_dir": str(base_dir), "reason": reason})


class DecodeError(PropertyStoreError):
    """Raised when a stored string does not decode to the requested type.

    Attributes:
        target_type: Name of the type the caller asked for.
        raw: The stored text that failed to decode.
    """

    error_code: str = "DECODE_FAILED"

    def __init__(self, target_type: str, raw: str, reason: str) -> None:
        self.target_type = target_type
        self.raw = raw
        self.reason = reason
        message = f"Cannot decode value as {target_type}: {reason}"
        super().__init__(message)


class DuplicateKeyError(PropertyStoreError, ValueError):
    """Raised when a configuration already holds an item with the same key."""

    error_code: str = "DUPLICATE_KEY"

    def __init__(self, key: str, configuration_name: str | None) -> None:
        self.key = key
        self.configuration_name = configuration_name or UNNAMED_CONFIGURATION
        message = f"Duplicate config key '{key}' in config '{self.configuration_name}'"
        super().__init__(message)


class ItemNotFoundError(PropertyStoreError, LookupError):
    """Raised by ``Configuration.item`` when no item has the requested key."""

    error_code: str = "ITEM_NOT_FOUND"

    def __init__(self, key: str, configuration_name: str | None) -> None:
        self.key = key
        self.configuration_name = configuration_name or UNNAMED_CONFIGURATION
        message = f"Config item not found for key '{key}' in config '{self.configuration_name}'"
        super().__init__(message)


class ItemTypeError(PropertyStoreError, TypeError):
    """Raised when an operation does not apply to an item's value type.

    Example:
        >>> raise ItemTypeError("retries", "toggle() only valid for boolean config items")
    """

    error_code: str = "ITEM_TYPE_MISMATCH"

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        message = f"{reason} (key='{key}')"
        super().__init__(message)
