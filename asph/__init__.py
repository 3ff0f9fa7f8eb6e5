"""ASPH — AudioSphere encrypted PCM container, v4.

Public API:
    encode(pcm, fmt, version=VERSION) -> bytes
    decode(file_bytes)                -> InnerRecord
    negotiate(source)                 -> PcmDescriptor
    metadata.write(path, title, artist, album) / metadata.read(path)
"""

from . import metadata
from .api import encode, decode, probe, read_file, write_file
from .diagnostics import (
    AsphError, FormatError, CryptoError, ValidationError,
    FailureCode, VersionMismatchWarning,
)
from .framing import InnerRecord, OuterRecord
from .negotiate import PcmDescriptor, negotiate
from .profiles import VERSION

__version__ = "4.0.0"
__all__ = [
    "encode", "decode", "probe", "read_file", "write_file",
    "negotiate", "PcmDescriptor", "InnerRecord", "OuterRecord",
    "AsphError", "FormatError", "CryptoError", "ValidationError",
    "FailureCode", "VersionMismatchWarning",
    "metadata", "VERSION",
]
