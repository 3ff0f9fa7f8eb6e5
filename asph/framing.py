"""ASPH — inner and outer record layouts.

Outer record (on disk, all integers little-endian):
  [0:4]   magic            = "ASPH"   (unencrypted, for sniffing)
  [4:8]   encrypted_length uint32 LE
  [8:…]   payload          encrypted_length bytes  = AES-CBC(gzip(inner))
  (an optional 512-byte metadata trailer may follow; it is not part of the record)

Inner record (after decrypt + decompress):
  [0:4]   magic            = "ASPH"
  [4]     version          uint8
  [5:9]   sample_rate      uint32 LE
  [9:13]  bits_per_sample  uint32 LE
  [13:17] channels         uint32 LE
  [17:…]  pcm              signed little-endian PCM, whole frames
  ── 17-byte header ──
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass

from .diagnostics import (
    BadMagic,
    CorruptPayload,
    InvalidPcmLength,
    TruncatedHeader,
    TruncatedLength,
    TruncatedPayload,
    VersionMismatchWarning,
)
from .endian import pack_u8, pack_u32, unpack_u8, unpack_u32
from .negotiate import PcmDescriptor
from .profiles import (
    MAGIC, MAGIC_LEN, VERSION,
    INNER_HEADER_LEN, OUTER_HEADER_LEN,
)

log = logging.getLogger(__name__)


def _check_magic(data: bytes, where: str) -> None:
    magic = bytes(data[:MAGIC_LEN])
    if magic != MAGIC:
        raise BadMagic(f"bad {where} magic: {magic!r} (expected {MAGIC!r})")


@dataclass(frozen=True)
class InnerRecord:
    """Format triple + raw PCM, the plaintext body of an ASPH file."""

    format:  PcmDescriptor
    pcm:     bytes
    version: int = VERSION

    @property
    def n_frames(self) -> int:
        return len(self.pcm) // self.format.frame_size

    @property
    def duration_seconds(self) -> float:
        return self.format.duration_seconds(len(self.pcm))

    # ── pack / unpack ─────────────────────────────────────────────────────────

    def pack(self) -> bytes:
        """Serialise header + PCM."""
        fmt = self.format
        if fmt.frame_size <= 0 or len(self.pcm) % fmt.frame_size:
            raise InvalidPcmLength(
                f"PCM length {len(self.pcm)} is not a multiple of the "
                f"{fmt.frame_size}-byte frame for {fmt}"
            )
        return b"".join((
            MAGIC,
            pack_u8(self.version),
            pack_u32(int(round(fmt.sample_rate))),
            pack_u32(fmt.bits_per_sample),
            pack_u32(fmt.channels),
            bytes(self.pcm),
        ))

    @classmethod
    def unpack(cls, data: bytes, *, expected_version: int = VERSION) -> "InnerRecord":
        """Parse a decrypted, decompressed inner record.

        A version different from *expected_version* only warns; the format
        fields stored in the record are always the ones used.

        Raises:
            BadMagic:       magic is not "ASPH".
            CorruptPayload: header cut short, impossible format, or PCM that
                            is not a whole number of frames.
        """
        if len(data) < INNER_HEADER_LEN:
            if len(data) >= MAGIC_LEN:
                _check_magic(data, "inner")
            raise CorruptPayload(
                f"inner record too short: {len(data)} < {INNER_HEADER_LEN}"
            )
        _check_magic(data, "inner")

        try:
            version  = unpack_u8(data, 4)
            rate     = unpack_u32(data, 5)
            bits     = unpack_u32(data, 9)
            channels = unpack_u32(data, 13)
        except TruncatedHeader as exc:
            raise CorruptPayload(f"incomplete inner header ({exc})") from exc

        if version != expected_version:
            msg = f"ASPH version mismatch: file has v{version}, codec is v{expected_version}"
            log.warning(msg)
            warnings.warn(msg, VersionMismatchWarning, stacklevel=2)

        fmt = PcmDescriptor(sample_rate=rate, bits_per_sample=bits, channels=channels)
        if bits == 0 or bits % 8 or channels == 0 or rate == 0:
            raise CorruptPayload(f"impossible format in inner header: {fmt}")

        pcm = bytes(data[INNER_HEADER_LEN:])
        if len(pcm) % fmt.frame_size:
            raise CorruptPayload(
                f"PCM length {len(pcm)} is not a multiple of frame size {fmt.frame_size}"
            )
        return cls(format=fmt, pcm=pcm, version=version)

    def __repr__(self) -> str:
        return (
            f"InnerRecord(v{self.version} {self.format} "
            f"pcm={len(self.pcm)}B {self.duration_seconds:.2f}s)"
        )


@dataclass(frozen=True)
class OuterRecord:
    """Unencrypted magic + length-prefixed encrypted blob."""

    payload: bytes

    @property
    def encrypted_length(self) -> int:
        return len(self.payload)

    @property
    def size(self) -> int:
        """Bytes the record occupies on disk."""
        return OUTER_HEADER_LEN + len(self.payload)

    def pack(self) -> bytes:
        return MAGIC + pack_u32(len(self.payload)) + bytes(self.payload)

    @classmethod
    def unpack(cls, data: bytes) -> "OuterRecord":
        """Parse the outer record at the start of *data*.

        Bytes after the payload (e.g. a metadata trailer) are ignored.

        Raises:
            BadMagic:         first 4 bytes are not "ASPH".
            TruncatedLength:  fewer than 4 bytes for encrypted_length.
            TruncatedPayload: fewer than encrypted_length bytes follow.
        """
        if len(data) < MAGIC_LEN:
            raise BadMagic(f"file too short for magic: {len(data)} bytes")
        _check_magic(data, "outer")

        if len(data) < OUTER_HEADER_LEN:
            raise TruncatedLength(
                f"need 4 bytes for encrypted length, have {len(data) - MAGIC_LEN}"
            )
        length = unpack_u32(data, MAGIC_LEN)

        available = len(data) - OUTER_HEADER_LEN
        if available < length:
            raise TruncatedPayload(
                f"encrypted payload truncated: {available} < {length} bytes"
            )
        return cls(payload=bytes(data[OUTER_HEADER_LEN:OUTER_HEADER_LEN + length]))

    def __repr__(self) -> str:
        return f"OuterRecord(encrypted={self.encrypted_length}B)"
