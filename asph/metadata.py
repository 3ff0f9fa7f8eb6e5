"""ASPH — 512-byte metadata trailer.

Layout (appended after the outer record, all lengths uint32 LE):
  titleLen | title | artistLen | artist | albumLen | album | zero padding
  ── exactly 512 bytes ──

The trailer sits outside the encrypted payload: anyone with file access can
read or replace it without the key.  Writing never strips an earlier trailer,
so every write grows the file by 512 bytes and only the last one is read
back.  Readers treat a short file as "no metadata" and parse the window
best-effort, keeping whatever fields decoded cleanly.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .api import write_atomic
from .diagnostics import MetadataTooLarge
from .endian import pack_u32, unpack_u32
from .profiles import METADATA_SIZE, METADATA_LEN_PREFIX

log = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

_FIELDS = ("title", "artist", "album")


@dataclass(frozen=True)
class Metadata:
    title:  Optional[str] = None
    artist: Optional[str] = None
    album:  Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.title is None and self.artist is None and self.album is None

    def as_dict(self) -> dict[str, str]:
        """Present fields only, keyed Title / Artist / Album."""
        return {
            name.capitalize(): value
            for name in _FIELDS
            if (value := getattr(self, name)) is not None
        }


# ── encode ────────────────────────────────────────────────────────────────────

def build_trailer(title: str, artist: str, album: str) -> bytes:
    """Return the 512-byte trailer for the three fields.

    Raises MetadataTooLarge if the prefixed UTF-8 encodings exceed 512 bytes.
    """
    encoded = [s.encode("utf-8") for s in (title, artist, album)]
    used = sum(METADATA_LEN_PREFIX + len(b) for b in encoded)
    if used > METADATA_SIZE:
        raise MetadataTooLarge(
            f"metadata needs {used} bytes, only {METADATA_SIZE} reserved"
        )

    body = b"".join(pack_u32(len(b)) + b for b in encoded)
    return body + bytes(METADATA_SIZE - used)


def write(path: PathLike, title: str, artist: str, album: str = "") -> int:
    """Append a metadata trailer to the file at *path*, rewriting it in place.

    Validation happens before the file is read, so an oversized request
    leaves the file untouched.  Returns the new file size.
    """
    trailer = build_trailer(title, artist, album)
    data = Path(path).read_bytes()
    write_atomic(path, data + trailer)
    log.debug("metadata trailer appended to %s (%d → %d bytes)",
              path, len(data), len(data) + len(trailer))
    return len(data) + len(trailer)


# ── decode ────────────────────────────────────────────────────────────────────

def parse_trailer(window: bytes) -> Metadata:
    """Parse a 512-byte trailer window best-effort."""
    values: dict[str, str] = {}
    offset = 0
    for name in _FIELDS:
        if offset + METADATA_LEN_PREFIX > len(window):
            break
        length = unpack_u32(window, offset)
        offset += METADATA_LEN_PREFIX
        if length > len(window) - offset:
            break
        raw = window[offset:offset + length]
        offset += length
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            break
        if length > 0:
            values[name] = text
    return Metadata(**values)


def read(path: PathLike) -> Metadata:
    """Read the trailer at the end of *path*.

    A file shorter than 512 bytes yields an empty :class:`Metadata`.
    """
    size = os.path.getsize(path)
    if size < METADATA_SIZE:
        return Metadata()
    with open(path, "rb") as f:
        f.seek(size - METADATA_SIZE)
        window = f.read(METADATA_SIZE)
    return parse_trailer(window)
