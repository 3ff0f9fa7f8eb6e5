# pylint: disable=missing-module-docstring,missing-function-docstring
"""
Codec tests: encode → decode through every layer, and every way a file
can be malformed.
"""

import os
import stat
import warnings

import pytest

from asph import decode, encode
from asph.api import probe, read_file, write_file
from asph.compress import compress, decompress
from asph.crypto import decrypt, encrypt
from asph.diagnostics import (
    BadMagic,
    CorruptPayload,
    CryptoError,
    DecryptionFailed,
    FailureCode,
    FormatError,
    InvalidPcmLength,
    InvalidSourceFormat,
    TruncatedLength,
    TruncatedPayload,
    VersionMismatchWarning,
)
from asph.endian import pack_u32
from asph.framing import InnerRecord, OuterRecord
from asph.negotiate import PcmDescriptor
from asph.profiles import (
    INNER_HEADER_LEN, MAGIC, OUTER_HEADER_LEN, VERSION,
    LEGACY_VERSION, LEGACY_SAMPLE_RATE, LEGACY_BITS, LEGACY_CHANNELS,
)

from conftest import random_pcm

STEREO16 = PcmDescriptor(44100, 16, 2)


def wrap(inner: bytes) -> bytes:
    """Build an outer record around an arbitrary inner plaintext."""
    return OuterRecord(payload=encrypt(compress(inner))).pack()


# ----------------------------------------------------------------------
# Round trip
# ----------------------------------------------------------------------

@pytest.mark.parametrize("rate", [8000, 44100, 96000])
@pytest.mark.parametrize("bits", [8, 16, 24])
@pytest.mark.parametrize("channels", [1, 2])
def test_round_trip_every_format(rng, rate, bits, channels):
    fmt = PcmDescriptor(rate, bits, channels)
    pcm = random_pcm(rng, fmt, 1000)

    record = decode(encode(pcm, fmt))

    assert record.version == VERSION
    assert record.format == fmt
    assert record.pcm == pcm


def test_empty_pcm_round_trips():
    record = decode(encode(b"", STEREO16))
    assert record.pcm == b""
    assert record.n_frames == 0


def test_encode_is_deterministic(rng):
    pcm = random_pcm(rng, STEREO16, 500)
    assert encode(pcm, STEREO16) == encode(pcm, STEREO16)


def test_inputs_not_mutated(rng):
    pcm = bytearray(random_pcm(rng, STEREO16, 100))
    before = bytes(pcm)
    data = bytearray(encode(pcm, STEREO16))
    data_before = bytes(data)

    decode(data)

    assert bytes(pcm) == before
    assert bytes(data) == data_before


def test_outer_layout(rng):
    pcm = random_pcm(rng, STEREO16, 100)
    data = encode(pcm, STEREO16)

    assert data[:4] == MAGIC
    length = int.from_bytes(data[4:8], "little")
    assert length == len(data) - OUTER_HEADER_LEN
    assert length % 16 == 0
    assert OuterRecord.unpack(data).size == len(data)

    inner = decompress(decrypt(data[OUTER_HEADER_LEN:]))
    assert inner[:4] == MAGIC
    assert inner[4] == VERSION
    assert inner[5:9] == pack_u32(44100)
    assert inner[9:13] == pack_u32(16)
    assert inner[13:17] == pack_u32(2)
    assert inner[INNER_HEADER_LEN:] == pcm


def test_trailing_bytes_ignored(rng):
    pcm = random_pcm(rng, STEREO16, 100)
    data = encode(pcm, STEREO16) + b"\x00" * 512
    assert decode(data).pcm == pcm


# ----------------------------------------------------------------------
# Encode-side validation
# ----------------------------------------------------------------------

def test_unnegotiated_format_rejected():
    with pytest.raises(InvalidSourceFormat):
        encode(b"\x00" * 12, PcmDescriptor(192000, 16, 2))
    with pytest.raises(InvalidSourceFormat):
        encode(b"\x00" * 12, PcmDescriptor(44100, 32, 2))


def test_partial_frame_rejected():
    with pytest.raises(InvalidPcmLength) as excinfo:
        encode(b"\x00" * 5, STEREO16)
    assert excinfo.value.code is FailureCode.INVALID_PCM_LENGTH


# ----------------------------------------------------------------------
# Outer record failures
# ----------------------------------------------------------------------

def test_bad_outer_magic(rng):
    data = bytearray(encode(random_pcm(rng, STEREO16, 10), STEREO16))
    data[0:4] = b"RIFF"
    with pytest.raises(BadMagic):
        decode(bytes(data))


def test_too_short_for_magic():
    with pytest.raises(BadMagic):
        decode(b"ASP")


def test_truncated_length():
    with pytest.raises(TruncatedLength):
        decode(MAGIC + b"\x10\x00")


def test_truncated_payload(rng):
    data = encode(random_pcm(rng, STEREO16, 100), STEREO16)
    with pytest.raises(TruncatedPayload) as excinfo:
        decode(data[:-1])
    assert excinfo.value.code is FailureCode.TRUNCATED_PAYLOAD


# ----------------------------------------------------------------------
# Crypto / compression failures
# ----------------------------------------------------------------------

def test_ragged_ciphertext():
    with pytest.raises(DecryptionFailed):
        decode(OuterRecord(payload=b"\x00" * 15).pack())
    with pytest.raises(DecryptionFailed):
        decode(OuterRecord(payload=b"").pack())


def test_wrong_key_detected(rng):
    inner = InnerRecord(STEREO16, random_pcm(rng, STEREO16, 100)).pack()
    payload = encrypt(compress(inner), key=bytes(16))
    with pytest.raises((CryptoError, FormatError)):
        decode(OuterRecord(payload=payload).pack())


def test_tampered_payload_detected(rng):
    data = encode(random_pcm(rng, STEREO16, 200), STEREO16)
    for pos in range(OUTER_HEADER_LEN, len(data), 7):
        tampered = bytearray(data)
        tampered[pos] ^= 0x5A
        with pytest.raises((CryptoError, FormatError)):
            decode(bytes(tampered))


def test_not_gzip_inside():
    payload = encrypt(b"definitely not a gzip stream")
    with pytest.raises(CorruptPayload):
        decode(OuterRecord(payload=payload).pack())


# ----------------------------------------------------------------------
# Inner record failures
# ----------------------------------------------------------------------

def test_bad_inner_magic():
    inner = b"XXXX" + bytes([VERSION]) + pack_u32(44100) + pack_u32(16) + pack_u32(2)
    with pytest.raises(BadMagic):
        decode(wrap(inner))


def test_short_inner_header():
    with pytest.raises(CorruptPayload):
        decode(wrap(MAGIC + bytes([VERSION]) + b"\x44\xac"))


def test_inner_pcm_not_frame_aligned():
    inner = MAGIC + bytes([VERSION]) + pack_u32(44100) + pack_u32(16) + pack_u32(2) + b"\x01\x02\x03"
    with pytest.raises(CorruptPayload):
        decode(wrap(inner))


def test_impossible_inner_format():
    inner = MAGIC + bytes([VERSION]) + pack_u32(44100) + pack_u32(0) + pack_u32(2)
    with pytest.raises(CorruptPayload):
        decode(wrap(inner))


# ----------------------------------------------------------------------
# Versions
# ----------------------------------------------------------------------

def test_version_mismatch_warns_but_decodes(rng):
    pcm = random_pcm(rng, STEREO16, 50)
    data = encode(pcm, STEREO16, version=3)

    with pytest.warns(VersionMismatchWarning):
        record = decode(data)

    assert record.version == 3
    assert record.pcm == pcm


def test_matching_version_does_not_warn(rng):
    data = encode(random_pcm(rng, STEREO16, 50), STEREO16)
    with warnings.catch_warnings():
        warnings.simplefilter("error", VersionMismatchWarning)
        decode(data)


def test_legacy_file_decodes(rng):
    fmt = PcmDescriptor(LEGACY_SAMPLE_RATE, LEGACY_BITS, LEGACY_CHANNELS)
    pcm = random_pcm(rng, fmt, 50)
    data = encode(pcm, fmt, version=LEGACY_VERSION)

    with pytest.warns(VersionMismatchWarning):
        record = decode(data)
    assert record.format == fmt
    assert record.pcm == pcm

    # no warning when the caller asks for the legacy version
    with warnings.catch_warnings():
        warnings.simplefilter("error", VersionMismatchWarning)
        assert decode(data, expected_version=LEGACY_VERSION).pcm == pcm


# ----------------------------------------------------------------------
# File helpers
# ----------------------------------------------------------------------

def test_write_and_read_file(tmp_path, rng):
    path = tmp_path / "clip.asph"
    pcm = random_pcm(rng, STEREO16, 100)

    size = write_file(path, pcm, STEREO16)

    assert path.stat().st_size == size
    assert probe(path)
    assert read_file(path).pcm == pcm
    # no temp files left behind
    assert [p.name for p in tmp_path.iterdir()] == ["clip.asph"]


def test_probe(tmp_path):
    other = tmp_path / "x.wav"
    other.write_bytes(b"RIFF....WAVE")
    assert not probe(other)
    assert not probe(tmp_path / "missing.asph")


@pytest.fixture
def umask_022():
    old = os.umask(0o022)
    yield
    os.umask(old)


@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
def test_new_file_mode_follows_umask(tmp_path, rng, umask_022):
    path = tmp_path / "fresh.asph"
    write_file(path, random_pcm(rng, STEREO16, 10), STEREO16)
    assert stat.S_IMODE(path.stat().st_mode) == 0o644


@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
def test_overwrite_keeps_existing_mode(tmp_path, rng, umask_022):
    path = tmp_path / "shared.asph"
    path.write_bytes(b"old")
    os.chmod(path, 0o664)
    write_file(path, random_pcm(rng, STEREO16, 10), STEREO16)
    assert stat.S_IMODE(path.stat().st_mode) == 0o664
