"""Conversion between typed values and their stored string form.

Every value in the property file is a string. Strings are stored verbatim;
every other type is stored as its own pretty-printed JSON document, which
the property file then embeds as a string (the value is JSON-encoded twice
on disk). Existing files depend on that layout, so it must not change.

Each logical type gets an explicit codec object instead of being guessed at
read time:

- :class:`StringCodec` for ``str`` and ``str`` subclasses such as ``StrEnum``
- :class:`JsonCodec` for everything Pydantic can validate: ``int``,
  ``float``, ``bool``, ``list[...]``, ``dict[...]``, models, dataclasses

Example:
    >>> codec_for(int).encode(3)
    '3'
    >>> codec_for(list[str]).decode('["a", "b"]')
    ['a', 'b']
    >>> codec_for(str).encode("hello")
    'hello'
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from pydantic import ConfigDict, PydanticSchemaGenerationError, PydanticUserError, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from propstore.exceptions import DecodeError

T = TypeVar("T")

JSON_INDENT = 2
JSON_NULL = "null"

# Infinity and NaN round-trip as JSON constants instead of collapsing to null.
_ADAPTER_CONFIG = ConfigDict(ser_json_inf_nan="constants")


@runtime_checkable
class Codec(Protocol[T]):
    """Encode/decode pair for one logical value type."""

    value_type: Any

    def encode(self, value: T) -> str:
        """Render ``value`` as its stored string."""
        ...

    def decode(self, raw: str) -> T:
        """Parse a stored string. Raises DecodeError on malformed input."""
        ...


def _type_name(value_type: Any) -> str:
    return getattr(value_type, "__name__", None) or repr(value_type)


class StringCodec(Generic[T]):
    """Stores strings raw.

    For ``str`` subclasses (``StrEnum`` members, for instance) decoding
    calls the subclass constructor, so an unknown enum value is a decode
    failure rather than a silently wrong type.
    """

    def __init__(self, value_type: type[str] = str) -> None:
        self.value_type = value_type

    def encode(self, value: T) -> str:
        if isinstance(value, str):
            return str.__str__(value)
        return str(value)

    def decode(self, raw: str) -> T:
        if self.value_type is str:
            return raw  # type: ignore[return-value]
        try:
            return self.value_type(raw)  # type: ignore[return-value]
        except ValueError as exc:
            raise DecodeError(_type_name(self.value_type), raw, str(exc)) from exc

    def __repr__(self) -> str:
        return f"StringCodec({_type_name(self.value_type)})"


class JsonCodec(Generic[T]):
    """Stores a value as a pretty-printed JSON document.

    Backed by a Pydantic ``TypeAdapter``, so the stored form is whatever
    Pydantic produces in JSON mode and decoding runs full validation
    against ``value_type``.

    Args:
        value_type: Python type or annotation (``int``, ``dict[str, int]``,
            a ``BaseModel`` subclass...).

    Raises:
        DecodeError: If Pydantic cannot build a schema for ``value_type``.
    """

    def __init__(self, value_type: Any) -> None:
        self.value_type = value_type
        try:
            self._adapter: TypeAdapter[T] = _build_adapter(value_type)
        except PydanticSchemaGenerationError as exc:
            raise DecodeError(_type_name(value_type), "", str(exc)) from exc

    def encode(self, value: T) -> str:
        return self._adapter.dump_json(value, indent=JSON_INDENT).decode("utf-8")

    def decode(self, raw: str) -> T:
        try:
            return self._adapter.validate_json(raw)
        except PydanticValidationError as exc:
            reason = "; ".join(err["msg"] for err in exc.errors(include_url=False))
            raise DecodeError(_type_name(self.value_type), raw, reason) from exc

    def __repr__(self) -> str:
        return f"JsonCodec({_type_name(self.value_type)})"


def _build_adapter(value_type: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(value_type, config=_ADAPTER_CONFIG)
    except PydanticUserError as exc:
        # Models, dataclasses and TypedDicts carry their own config.
        if exc.code != "type-adapter-config-unused":
            raise
        return TypeAdapter(value_type)


@lru_cache(maxsize=256)
def _cached_codec(value_type: Any) -> Codec[Any]:
    if isinstance(value_type, type) and issubclass(value_type, str):
        return StringCodec(value_type)
    return JsonCodec(value_type)


def codec_for(value_type: Any) -> Codec[Any]:
    """Return the codec for a type, or ``value_type`` itself if it is a codec.

    Codecs are cached per type; building a ``TypeAdapter`` is not free.
    Unhashable annotations get a fresh, uncached codec.
    """
    if not isinstance(value_type, type) and isinstance(value_type, Codec):
        return value_type
    try:
        return _cached_codec(value_type)
    except TypeError:
        return JsonCodec(value_type)


def infer_codec(value: Any) -> Codec[Any]:
    """Pick a codec from a sample value.

    ``None`` maps to the raw string codec: with nothing to infer from, the
    stored text is handed back as is.
    """
    if value is None:
        return codec_for(str)
    return codec_for(type(value))
