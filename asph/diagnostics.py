"""ASPH — error taxonomy and failure codes.

Every error raised by the codec derives from :class:`AsphError` and carries a
:class:`FailureCode` so callers (the CLI, the player) can report a stable
reason without string matching.

    AsphError
      ├── FormatError       bad magic, truncation, corrupt payload, non-WAV input,
      │                     unsupported stored format
      ├── CryptoError       AES-CBC padding / block failure
      ├── ValidationError   unrepairable source format, oversize metadata
      └── OutputDeviceError audio device unavailable

Version mismatches are not errors: they surface as
:class:`VersionMismatchWarning` and decoding continues.
"""

from enum import Enum
from typing import Optional


class FailureCode(str, Enum):
    """Reason an ASPH operation did not complete."""

    BAD_MAGIC           = "bad_magic"            # outer or inner magic != "ASPH"
    TRUNCATED_LENGTH    = "truncated_length"     # < 4 bytes for encrypted_length
    TRUNCATED_PAYLOAD   = "truncated_payload"    # < encrypted_length bytes follow
    TRUNCATED_HEADER    = "truncated_header"     # fixed-width field cut short
    CORRUPT_PAYLOAD     = "corrupt_payload"      # decompress / inner record failure
    NOT_WAV             = "not_wav"              # encode input is not a WAV file
    DECRYPT_FAIL        = "decrypt_fail"         # AES-CBC padding or block error
    INVALID_SOURCE      = "invalid_source"       # rate or channels <= 0
    INVALID_PCM_LENGTH  = "invalid_pcm_length"   # PCM not a whole number of frames
    METADATA_TOO_LARGE  = "metadata_too_large"   # trailer fields exceed 512 bytes
    UNSUPPORTED_FORMAT  = "unsupported_format"   # stored format cannot be written or played
    OUTPUT_DEVICE       = "output_device"        # audio device could not be opened


class AsphError(Exception):
    """Base class for all ASPH failures."""

    code: FailureCode = FailureCode.CORRUPT_PAYLOAD

    def __init__(self, message: str, *, code: Optional[FailureCode] = None):
        super().__init__(message)
        if code is not None:
            self.code = code

    def summary(self) -> str:
        return f"[{self.code.value}] {self}"


# ── FormatError ───────────────────────────────────────────────────────────────

class FormatError(AsphError):
    """Structural problem with the file or record bytes."""


class BadMagic(FormatError):
    code = FailureCode.BAD_MAGIC


class TruncatedLength(FormatError):
    code = FailureCode.TRUNCATED_LENGTH


class TruncatedPayload(FormatError):
    code = FailureCode.TRUNCATED_PAYLOAD


class TruncatedHeader(FormatError):
    code = FailureCode.TRUNCATED_HEADER


class CorruptPayload(FormatError):
    code = FailureCode.CORRUPT_PAYLOAD


class NotWavInput(FormatError):
    code = FailureCode.NOT_WAV


class UnsupportedFormat(FormatError):
    """Decoded record is valid but its format has no WAV or device mapping."""

    code = FailureCode.UNSUPPORTED_FORMAT


# ── CryptoError ───────────────────────────────────────────────────────────────

class CryptoError(AsphError):
    """Decryption failed.  Without authentication this is indistinguishable
    from file corruption."""

    code = FailureCode.DECRYPT_FAIL


class DecryptionFailed(CryptoError):
    pass


# ── ValidationError ───────────────────────────────────────────────────────────

class ValidationError(AsphError):
    """Input rejected before any file is touched."""


class InvalidSourceFormat(ValidationError):
    code = FailureCode.INVALID_SOURCE


class InvalidPcmLength(ValidationError):
    code = FailureCode.INVALID_PCM_LENGTH


class MetadataTooLarge(ValidationError):
    code = FailureCode.METADATA_TOO_LARGE


# ── output ───────────────────────────────────────────────────────────────────

class OutputDeviceError(AsphError):
    code = FailureCode.OUTPUT_DEVICE


# ── warnings ──────────────────────────────────────────────────────────────────

class VersionMismatchWarning(UserWarning):
    """Inner record version differs from the codec's; decoding continued."""
