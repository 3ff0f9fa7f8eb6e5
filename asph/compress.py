"""ASPH — DEFLATE compression wrapper.

The container stores one gzip member (RFC 1952) around a DEFLATE stream,
compressed in a single call.  The gzip mtime is pinned so identical input
always produces identical bytes.
"""

import gzip
import zlib

from .diagnostics import CorruptPayload
from .profiles import GZIP_LEVEL, GZIP_MTIME


def compress(data: bytes, level: int = GZIP_LEVEL) -> bytes:
    """Compress *data* into a single gzip member."""
    return gzip.compress(data, compresslevel=level, mtime=GZIP_MTIME)


def decompress(data: bytes) -> bytes:
    """Decompress a gzip member.

    Raises CorruptPayload on anything that is not valid gzip/DEFLATE.
    """
    try:
        return gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise CorruptPayload(f"decompression failed ({exc})") from exc
