"""ASPH — fixed-width little-endian integer codec.

Every multi-byte header field in the format goes through here.
"""

import struct

from .diagnostics import TruncatedHeader

_U8  = struct.Struct("<B")
_U32 = struct.Struct("<I")

U32_MAX = 0xFFFF_FFFF


def pack_u8(value: int) -> bytes:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"u8 out of range: {value}")
    return _U8.pack(value)


def pack_u32(value: int) -> bytes:
    """Encode *value* as 4 little-endian bytes."""
    if not 0 <= value <= U32_MAX:
        raise ValueError(f"u32 out of range: {value}")
    return _U32.pack(value)


def unpack_u8(data: bytes, offset: int = 0) -> int:
    if offset < 0 or len(data) < offset + 1:
        raise TruncatedHeader(f"need 1 byte at offset {offset}, have {len(data)}")
    return data[offset]


def unpack_u32(data: bytes, offset: int = 0) -> int:
    """Decode the 4 little-endian bytes at *offset*.

    Raises TruncatedHeader instead of reading past the end of *data*.
    """
    if offset < 0 or len(data) < offset + _U32.size:
        raise TruncatedHeader(
            f"need 4 bytes at offset {offset}, have {max(0, len(data) - offset)}"
        )
    return _U32.unpack_from(data, offset)[0]
