"""ASPH v4 — high-level encode / decode API.

encode(pcm, fmt, version) -> bytes        (complete outer record)
decode(file_bytes)        -> InnerRecord

Full pipeline
=============

Encode
------
  raw PCM + PcmDescriptor
    → InnerRecord.pack()        magic | version | rate | bits | channels | pcm
    → gzip / DEFLATE            (compress.compress, whole record in one call)
    → AES-128-CBC + PKCS#7      (crypto.encrypt, fixed key / IV)
    → OuterRecord.pack()        magic | u32 length | encrypted blob

Decode
------
  file bytes
    → OuterRecord.unpack        BadMagic / TruncatedLength / TruncatedPayload
    → AES-CBC decrypt           DecryptionFailed
    → gzip decompress           CorruptPayload
    → InnerRecord.unpack        BadMagic / CorruptPayload, version warning

No step is optional and nothing here touches the filesystem except the
explicit file helpers at the bottom.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Union

from .compress import compress, decompress
from .crypto import encrypt, decrypt
from .diagnostics import InvalidSourceFormat
from .framing import InnerRecord, OuterRecord
from .negotiate import PcmDescriptor
from .profiles import MAGIC, MAGIC_LEN, VERSION

log = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


# ── encode ────────────────────────────────────────────────────────────────────

def encode(pcm: bytes, fmt: PcmDescriptor, version: int = VERSION) -> bytes:
    """Build a complete ASPH outer record from raw PCM.

    Args:
        pcm:     Signed little-endian PCM in *fmt*; whole frames only.
        fmt:     Target descriptor, already negotiated onto the lattice.
        version: Version byte stored in the inner record.

    Raises:
        InvalidSourceFormat: *fmt* is outside the supported lattice.
        InvalidPcmLength:    *pcm* is not a whole number of frames.
    """
    if not fmt.is_supported:
        raise InvalidSourceFormat(f"format not negotiated: {fmt}")

    inner = InnerRecord(format=fmt, pcm=bytes(pcm), version=version).pack()
    compressed = compress(inner)
    encrypted = encrypt(compressed)
    outer = OuterRecord(payload=encrypted).pack()

    log.debug(
        "encode v%d %s: inner=%dB gzip=%dB aes=%dB file=%dB",
        version, fmt, len(inner), len(compressed), len(encrypted), len(outer),
    )
    return outer


# ── decode ────────────────────────────────────────────────────────────────────

def decode(file_bytes: bytes, *, expected_version: int = VERSION) -> InnerRecord:
    """Decrypt, decompress and parse an ASPH file image.

    Trailing bytes after the encrypted payload (the metadata trailer) are
    ignored.  Never mutates *file_bytes*.
    """
    outer = OuterRecord.unpack(file_bytes)
    compressed = decrypt(outer.payload)
    inner = decompress(compressed)
    record = InnerRecord.unpack(inner, expected_version=expected_version)

    log.debug(
        "decode: aes=%dB gzip=%dB inner=%dB → %r",
        outer.encrypted_length, len(compressed), len(inner), record,
    )
    return record


# ── file helpers ──────────────────────────────────────────────────────────────

def probe(path: PathLike) -> bool:
    """True if *path* starts with the unencrypted ASPH magic."""
    try:
        with open(path, "rb") as f:
            return f.read(MAGIC_LEN) == MAGIC
    except OSError:
        return False


def read_file(path: PathLike, *, expected_version: int = VERSION) -> InnerRecord:
    """Read and fully decode the ASPH file at *path*."""
    data = Path(path).read_bytes()
    return decode(data, expected_version=expected_version)


def _target_mode(target: Path) -> int:
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_atomic(path: PathLike, data: bytes) -> None:
    """Write *data* to *path* via a sibling temp file + os.replace.

    Either the old file (or nothing) or the complete new file exists
    afterwards; never a half-written one.
    An existing file keeps its permission bits; a new one gets the
    umask default, like a plain open().
    """
    target = Path(path)
    mode = _target_mode(target)
    fd, tmp = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp",
                               dir=str(target.parent.resolve()))
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp, mode)
        os.replace(tmp, target)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def write_file(path: PathLike, pcm: bytes, fmt: PcmDescriptor,
               version: int = VERSION) -> int:
    """Encode and atomically write an ASPH file.  Returns bytes written."""
    data = encode(pcm, fmt, version=version)
    write_atomic(path, data)
    return len(data)
