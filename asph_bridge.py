"""
asph_bridge.py — WAV <-> ASPH conversion service.

Sits between WAV files on disk and the pure asph codec:

    load_wav(path) -> WavPcm
        Reads any integer/float WAV via soundfile, negotiates the target
        format (asph.negotiate) and converts the samples to signed
        little-endian PCM in that format.  Resamples with scipy when the
        source rate is outside 8–96 kHz; keeps the first two channels of
        multichannel input.

    save_wav(path, record)
        Writes an InnerRecord's PCM back out as a WAV in its stored format.

    encode_file(wav_path, asph_path, *, version=VERSION) -> EncodeReport
    decode_file(asph_path, wav_path) -> InnerRecord

File outputs are written atomically; a failed conversion leaves no partial
file behind.
"""
from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass
from math import gcd
from typing import Union

import numpy as np
import soundfile as sf
from scipy.signal import resample_poly

from asph.api import encode, read_file, write_atomic
from asph.diagnostics import NotWavInput, UnsupportedFormat
from asph.framing import InnerRecord
from asph.negotiate import PcmDescriptor, negotiate
from asph.pcm import float_to_int32, int32_to_pcm, pcm_to_int32
from asph.profiles import VERSION

log = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

# libsndfile subtype → nominal bits per sample (0 = unknown, negotiator substitutes 16)
_SUBTYPE_BITS = {
    'PCM_S8': 8,
    'PCM_U8': 8,
    'PCM_16': 16,
    'PCM_24': 24,
    'PCM_32': 32,
    'FLOAT':  32,
    'DOUBLE': 64,
}

# stored bit depth → WAV subtype (8-bit WAV is unsigned on disk)
_WAV_SUBTYPE = {8: 'PCM_U8', 16: 'PCM_16', 24: 'PCM_24'}

_WAV_CONTAINERS = ('WAV', 'WAVEX', 'RF64')


@dataclass(frozen=True)
class WavPcm:
    pcm:    bytes
    format: PcmDescriptor      # negotiated target
    source: PcmDescriptor      # as reported by the WAV header


@dataclass(frozen=True)
class EncodeReport:
    format:        PcmDescriptor
    source:        PcmDescriptor
    version:       int
    original_size: int
    encoded_size:  int

    @property
    def ratio(self) -> float:
        """Encoded size as a percentage of the input WAV."""
        return self.encoded_size / max(1, self.original_size) * 100.0


# ── helpers ───────────────────────────────────────────────────────────────────

def _check_wav(path: str):
    """Return soundfile info for *path*, or raise NotWavInput.

    OSError (missing file, permissions) propagates unchanged.
    """
    with open(path, 'rb') as f:
        head = f.read(12)
    if len(head) < 12 or head[:4] not in (b'RIFF', b'RIFX', b'RF64') or head[8:12] != b'WAVE':
        raise NotWavInput(f'input must be a WAV file: {path}')
    try:
        info = sf.info(path)
    except RuntimeError as exc:          # soundfile.LibsndfileError
        raise NotWavInput(f'unreadable WAV {path}: {exc}') from exc
    if info.format not in _WAV_CONTAINERS:
        raise NotWavInput(f'input must be a WAV file, detected {info.format}')
    return info


def _resample(data: np.ndarray, src_rate: int, dst_rate: int) -> np.ndarray:
    g = gcd(int(src_rate), int(dst_rate))
    up, down = int(dst_rate) // g, int(src_rate) // g
    return resample_poly(data, up, down, axis=0)


# ── public API ────────────────────────────────────────────────────────────────

def load_wav(path: PathLike) -> WavPcm:
    """Read a WAV file and convert it to negotiated ASPH PCM.

    Raises:
        NotWavInput:         not a RIFF/WAVE file or libsndfile cannot parse it.
        InvalidSourceFormat: header reports a non-positive rate or channel count.
        OSError:             the file cannot be opened.
    """
    path = str(path)
    info = _check_wav(path)

    source = PcmDescriptor(
        sample_rate=info.samplerate,
        bits_per_sample=_SUBTYPE_BITS.get(info.subtype, 0),
        channels=info.channels,
    )
    target = negotiate(source)
    bits = target.bits_per_sample

    if target.sample_rate == source.sample_rate and info.subtype.startswith('PCM_'):
        # integer path: left-justified int32, so narrowing is a shift
        data, _ = sf.read(path, dtype='int32', always_2d=True)
        data = data[:, :target.channels]
    else:
        data, _ = sf.read(path, dtype='float64', always_2d=True)
        data = data[:, :target.channels]
        if target.sample_rate != source.sample_rate:
            data = _resample(data, source.sample_rate, target.sample_rate)
        data = float_to_int32(data, bits)

    pcm = int32_to_pcm(np.ascontiguousarray(data), bits)

    log.debug('load_wav %s: %s → %s, %d frames',
              path, source, target, len(pcm) // target.frame_size)
    return WavPcm(pcm=pcm, format=target, source=source)


def save_wav(path: PathLike, record: InnerRecord) -> None:
    """Write *record* as a WAV file in its stored format."""
    fmt = record.format
    if fmt.bits_per_sample not in _WAV_SUBTYPE:
        raise UnsupportedFormat(f'cannot write {fmt.bits_per_sample}-bit WAV')

    samples = pcm_to_int32(record.pcm, fmt.bits_per_sample).reshape(-1, fmt.channels)

    buf = io.BytesIO()
    sf.write(buf, samples, int(round(fmt.sample_rate)),
             subtype=_WAV_SUBTYPE[fmt.bits_per_sample], format='WAV')
    write_atomic(path, buf.getvalue())


def encode_file(wav_path: PathLike, asph_path: PathLike, *,
                version: int = VERSION) -> EncodeReport:
    """WAV → ASPH.  Output format mirrors the input, clamped to the lattice."""
    wav = load_wav(wav_path)
    data = encode(wav.pcm, wav.format, version=version)
    write_atomic(asph_path, data)

    return EncodeReport(
        format=wav.format,
        source=wav.source,
        version=version,
        original_size=os.path.getsize(wav_path),
        encoded_size=len(data),
    )


def decode_file(asph_path: PathLike, wav_path: PathLike) -> InnerRecord:
    """ASPH → WAV.  Returns the decoded record."""
    record = read_file(asph_path)
    save_wav(wav_path, record)
    return record
