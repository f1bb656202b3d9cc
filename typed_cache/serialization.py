"""
Typed Cache - JSON Serialization

Converts typed values to UTF-8 JSON bytes and back using pydantic
TypeAdapters. The same SerializationOptions must be used to write and read
an entry; nothing here enforces that across calls.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PydanticSchemaGenerationError, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError

from .errors import SerializationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SerializationOptions(BaseModel):
    """Settings controlling how typed values map to JSON text."""

    by_alias: bool = Field(default=False, description="Use field aliases as JSON keys")
    exclude_none: bool = Field(default=False, description="Omit fields whose value is None")
    exclude_defaults: bool = Field(default=False, description="Omit fields left at their default")
    round_trip: bool = Field(default=False, description="Emit JSON that validates back to the same value")
    strict: bool = Field(default=False, description="Reject type coercion when reading")

    model_config = ConfigDict(frozen=True)


DEFAULT_SERIALIZATION_OPTIONS = SerializationOptions()


def _type_name(type_: Any) -> str:
    return getattr(type_, "__name__", None) or repr(type_)


@lru_cache(maxsize=256)
def _adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


def _adapter_for(type_: Any, operation: str) -> TypeAdapter[Any]:
    try:
        try:
            return _adapter(type_)
        except TypeError:
            # Unhashable type expressions cannot be memoized
            return TypeAdapter(type_)
    except PydanticSchemaGenerationError as e:
        raise SerializationError(operation, _type_name(type_), {"error": str(e)}) from e


def serialize(value: Any, options: SerializationOptions | None = None) -> bytes:
    """
    Serialize a value to UTF-8 JSON bytes.

    Raises:
        SerializationError: If the value's type has no JSON representation
    """
    options = options or DEFAULT_SERIALIZATION_OPTIONS
    type_ = type(value)
    try:
        return _adapter_for(type_, "serialize").dump_json(
            value,
            by_alias=options.by_alias,
            exclude_none=options.exclude_none,
            exclude_defaults=options.exclude_defaults,
            round_trip=options.round_trip,
        )
    except PydanticSerializationError as e:
        logger.warning(
            f"Failed to serialize value of type {_type_name(type_)}: {e}",
            extra={"type": _type_name(type_), "error": str(e)},
        )
        raise SerializationError("serialize", _type_name(type_), {"error": str(e)}) from e


def deserialize(data: bytes, type_: type[T], options: SerializationOptions | None = None) -> T:
    """
    Decode UTF-8 JSON bytes into ``type_``.

    Raises:
        SerializationError: If the bytes are not valid UTF-8 JSON or do not
            match the target type
    """
    options = options or DEFAULT_SERIALIZATION_OPTIONS
    try:
        text = data.decode("utf-8")
        return _adapter_for(type_, "deserialize").validate_json(text, strict=options.strict)
    except (UnicodeDecodeError, PydanticValidationError) as e:
        preview = data[:100]
        logger.warning(
            f"Failed to deserialize cached value into {_type_name(type_)}: {e}",
            extra={"type": _type_name(type_), "data_preview": preview, "error": str(e)},
        )
        raise SerializationError("deserialize", _type_name(type_), {"error": str(e)}) from e
