"""Deterministic fixed-format binary codec for persisted structs.

Each persisted model declares ``binary_layout``: an ordered tuple of
``(field_name, kind)`` pairs. Kinds:

  u16    2-byte little-endian unsigned
  u64    8-byte little-endian unsigned
  bytes  u64 little-endian length, then raw bytes
  str    same as bytes, UTF-8 encoded

Encoding is field-by-field in layout order with no padding and no trailing
data, so the same value always produces the same bytes.
"""

from __future__ import annotations

import struct
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from .errors import SerializationError

M = TypeVar("M", bound=BaseModel)

_INT_FORMATS = {
    "u16": struct.Struct("<H"),
    "u64": struct.Struct("<Q"),
}
_LEN = struct.Struct("<Q")


def _layout(cls: type[BaseModel]) -> tuple[tuple[str, str], ...]:
    layout = getattr(cls, "binary_layout", None)
    if not layout:
        raise SerializationError(cls.__name__, "no binary layout declared")
    return layout


def encode(obj: BaseModel) -> bytes:
    """Serialize a model to its fixed binary form."""
    name = type(obj).__name__
    out = bytearray()
    for field, kind in _layout(type(obj)):
        value = getattr(obj, field)
        try:
            if kind in _INT_FORMATS:
                out += _INT_FORMATS[kind].pack(value)
            elif kind in ("bytes", "str"):
                raw = value.encode("utf-8") if kind == "str" else bytes(value)
                out += _LEN.pack(len(raw)) + raw
            else:
                raise SerializationError(name, f"unknown field kind {kind!r}")
        except struct.error as e:
            raise SerializationError(name, f"{field}: {e}") from e
    return bytes(out)


def decode(cls: type[M], data: bytes) -> M:
    """Parse bytes produced by ``encode`` back into ``cls``."""
    name = cls.__name__
    values: dict[str, object] = {}
    offset = 0
    try:
        for field, kind in _layout(cls):
            if kind in _INT_FORMATS:
                fmt = _INT_FORMATS[kind]
                (values[field],) = fmt.unpack_from(data, offset)
                offset += fmt.size
            elif kind in ("bytes", "str"):
                (length,) = _LEN.unpack_from(data, offset)
                offset += _LEN.size
                if offset + length > len(data):
                    raise SerializationError(name, f"{field}: truncated")
                raw = bytes(data[offset:offset + length])
                offset += length
                values[field] = raw.decode("utf-8") if kind == "str" else raw
            else:
                raise SerializationError(name, f"unknown field kind {kind!r}")
    except struct.error as e:
        raise SerializationError(name, str(e)) from e
    except UnicodeDecodeError as e:
        raise SerializationError(name, "invalid utf-8") from e

    if offset != len(data):
        raise SerializationError(name, f"{len(data) - offset} trailing bytes")

    try:
        return cls(**values)
    except ValidationError as e:
        raise SerializationError(name, str(e)) from e


__all__ = ["decode", "encode"]
