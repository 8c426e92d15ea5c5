"""Normalization of whatever the removal backend hands back into plain bytes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import inspect
from typing import Any, Union

from .errors import UnsupportedResultShape

BYTES_TYPES = (bytes, bytearray, memoryview)


@dataclass(frozen=True)
class RawBytes:
    payload: bytes


@dataclass(frozen=True)
class ByteStream:
    """An object exposing ``read()``, sync or async."""

    source: Any


@dataclass(frozen=True)
class BytesWrapper:
    """An object or mapping exposing the bytes under ``data``."""

    payload: bytes


RemovalResult = Union[RawBytes, ByteStream, BytesWrapper]


def classify_result(result: Any) -> RemovalResult:
    """Probe ``result`` in fixed order: raw bytes, then ``read()``, then ``.data``."""
    if isinstance(result, BYTES_TYPES):
        return RawBytes(bytes(result))
    if callable(getattr(result, "read", None)):
        return ByteStream(result)
    if isinstance(result, Mapping):
        data = result.get("data")
    else:
        data = getattr(result, "data", None)
    if isinstance(data, BYTES_TYPES):
        return BytesWrapper(bytes(data))
    raise UnsupportedResultShape(
        f"Unknown result type from background removal: {type(result).__name__}"
    )


async def normalize_result(result: Any) -> bytes:
    shape = classify_result(result)
    if isinstance(shape, ByteStream):
        data = shape.source.read()
        if inspect.isawaitable(data):
            data = await data
        if not isinstance(data, BYTES_TYPES):
            raise UnsupportedResultShape(
                f"read() returned {type(data).__name__}, expected bytes"
            )
        return bytes(data)
    return shape.payload
