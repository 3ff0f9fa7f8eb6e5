"""ASPH — PCM format negotiation.

Maps an arbitrary source PCM description onto the clamped lattice the
container supports:

    8 000 Hz <= sample_rate <= 96 000 Hz
    bits_per_sample  in {8, 16, 24}
    channels         in {1, 2}

The output mirrors the source wherever it already fits.  Pure function,
no I/O; the actual sample conversion is done by asph_bridge.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .diagnostics import InvalidSourceFormat
from .profiles import (
    MIN_SAMPLE_RATE, MAX_SAMPLE_RATE,
    MIN_BITS_PER_SAMPLE, MAX_BITS_PER_SAMPLE,
    MIN_CHANNELS, MAX_CHANNELS,
    DEFAULT_BITS,
    SUPPORTED_BITS, SUPPORTED_CHANNELS,
)

Rate = Union[int, float]


@dataclass(frozen=True)
class PcmDescriptor:
    """Signed little-endian integer PCM format triple."""

    sample_rate:     Rate
    bits_per_sample: int
    channels:        int

    @property
    def sample_width(self) -> int:
        """Bytes per sample."""
        return self.bits_per_sample // 8

    @property
    def frame_size(self) -> int:
        """Bytes per frame (one sample for every channel)."""
        return self.channels * self.sample_width

    @property
    def bytes_per_second(self) -> float:
        return self.sample_rate * self.frame_size

    @property
    def is_supported(self) -> bool:
        return (
            MIN_SAMPLE_RATE <= self.sample_rate <= MAX_SAMPLE_RATE
            and self.bits_per_sample in SUPPORTED_BITS
            and self.channels in SUPPORTED_CHANNELS
        )

    def duration_seconds(self, n_bytes: int) -> float:
        if self.bytes_per_second <= 0:
            return 0.0
        return n_bytes / self.bytes_per_second

    def __str__(self) -> str:
        ch = {1: "mono", 2: "stereo"}.get(self.channels, f"{self.channels}ch")
        return f"{self.sample_rate:g} Hz / {self.bits_per_sample}-bit / {ch}"


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


def negotiate(source: PcmDescriptor) -> PcmDescriptor:
    """Compute the target descriptor for *source*.

    Raises:
        InvalidSourceFormat: sample rate or channel count is not positive.
            Those cannot be repaired by clamping.
    """
    if source.sample_rate <= 0:
        raise InvalidSourceFormat(f"invalid sample rate {source.sample_rate}")
    if source.channels <= 0:
        raise InvalidSourceFormat(f"invalid channel count {source.channels}")

    # Some WAV headers report 0 / -1 for bit depth.
    bits = source.bits_per_sample if source.bits_per_sample > 0 else DEFAULT_BITS

    rate = _clamp(source.sample_rate, MIN_SAMPLE_RATE, MAX_SAMPLE_RATE)

    bits = _clamp(bits, MIN_BITS_PER_SAMPLE, MAX_BITS_PER_SAMPLE)
    bits = (bits + 4) // 8 * 8          # nearest multiple of 8, ties round up
    bits = min(bits, MAX_BITS_PER_SAMPLE)

    channels = _clamp(source.channels, MIN_CHANNELS, MAX_CHANNELS)

    return PcmDescriptor(sample_rate=rate, bits_per_sample=bits, channels=channels)
