"""Reading and writing of tagged binary chunks.

A chunk is a four byte magic tag, a four byte native-endian size, and then
``size`` bytes of packed records.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, Iterable, Union

__all__ = ["ChunkError", "read_chunk", "write_chunk"]

_HEADER = struct.Struct("=4sI")
_BYTE_ORDER_PREFIXES = "@=<>!"

ElementSpec = Union[str, struct.Struct, None]


class ChunkError(ValueError):
    """Raised when a chunk cannot be read."""


def _magic_bytes(magic: str | bytes) -> bytes:
    return magic.encode("latin-1") if isinstance(magic, str) else bytes(magic)


def _element_struct(element: ElementSpec) -> struct.Struct | None:
    if element is None or isinstance(element, struct.Struct):
        return element
    if not element or element[0] not in _BYTE_ORDER_PREFIXES:
        # records are packed with no padding, in native byte order
        element = "=" + element
    return struct.Struct(element)


def _read_exact(stream: BinaryIO, size: int) -> bytes | None:
    data = stream.read(size)
    if data is None or len(data) != size:
        return None
    return data


def read_chunk(stream: BinaryIO, magic: str | bytes, element: ElementSpec = None):
    """Read one chunk tagged ``magic`` from ``stream``.

    With no ``element`` the payload is returned as bytes; otherwise it is
    split into records of the given struct format and returned as a list of
    tuples.
    """
    layout = _element_struct(element)

    header = _read_exact(stream, _HEADER.size)
    if header is None:
        raise ChunkError("Failed to read chunk header")
    tag, size = _HEADER.unpack(header)
    if tag != _magic_bytes(magic):
        raise ChunkError("Unexpected magic number in chunk")

    record_size = layout.size if layout is not None else 1
    if record_size == 0 or size % record_size != 0:
        raise ChunkError("Size of chunk not divisible by element size")

    payload = _read_exact(stream, size)
    if payload is None:
        raise ChunkError("Failed to read chunk data.")

    if layout is None:
        return payload
    return list(layout.iter_unpack(payload))


def write_chunk(
    magic: str | bytes,
    items: Iterable | bytes,
    stream: BinaryIO,
    element: ElementSpec = None,
) -> None:
    """Write ``items`` to ``stream`` as one chunk tagged ``magic``.

    With no ``element`` ``items`` must be bytes-like; otherwise each item is a
    tuple (or a single value) packed with the given struct format.
    """
    tag = _magic_bytes(magic)
    if len(tag) != 4:
        raise ValueError("chunk magic must be exactly four bytes")

    layout = _element_struct(element)
    if layout is None:
        payload = bytes(items)
    else:
        payload = b"".join(
            layout.pack(*(item if isinstance(item, tuple) else (item,)))
            for item in items
        )

    stream.write(_HEADER.pack(tag, len(payload)))
    stream.write(payload)