"""PCM sample packing utilities.

ASPH stores signed little-endian integer PCM at 8, 16 or 24 bits.  These
helpers move between those byte layouts and int32 numpy arrays that hold
each sample left-justified (the same convention soundfile uses for
dtype='int32'), so conversion between widths is a plain shift.
"""
import numpy as np


def pcm_to_int32(pcm: bytes, bits: int) -> np.ndarray:
    """
    Unpack signed LE PCM to a flat int32 array, left-justified.

    No channel handling; the caller reshapes by channel count.
    """
    width = bits // 8
    if len(pcm) % width:
        raise ValueError(f"{len(pcm)} bytes is not a whole number of {bits}-bit samples")

    if bits == 8:
        return np.frombuffer(pcm, dtype="i1").astype(np.int32) << 24
    if bits == 16:
        return np.frombuffer(pcm, dtype="<i2").astype(np.int32) << 16
    if bits == 24:
        raw = np.frombuffer(pcm, dtype=np.uint8).reshape(-1, 3)
        wide = np.zeros((raw.shape[0], 4), dtype=np.uint8)
        wide[:, 1:] = raw        # low byte zero → value << 8
        return wide.view("<i4").reshape(-1)
    raise ValueError(f"unsupported bit depth {bits}")


def int32_to_pcm(samples: np.ndarray, bits: int) -> bytes:
    """Pack left-justified int32 samples to signed LE PCM at *bits*."""
    samples = np.ascontiguousarray(samples, dtype="<i4").reshape(-1)

    if bits == 8:
        return (samples >> 24).astype("i1").tobytes()
    if bits == 16:
        return (samples >> 16).astype("<i2").tobytes()
    if bits == 24:
        return samples.view(np.uint8).reshape(-1, 4)[:, 1:].tobytes()
    raise ValueError(f"unsupported bit depth {bits}")


def float_to_int32(samples: np.ndarray, bits: int) -> np.ndarray:
    """Quantise float samples in [-1, 1) to left-justified int32 at *bits*."""
    full = float(1 << (bits - 1))
    q = np.clip(np.round(samples * full), -full, full - 1).astype(np.int64)
    return (q << (32 - bits)).astype(np.int32)


def apply_gain(pcm: bytes, bits: int, gain: float) -> bytes:
    """Scale PCM by a linear *gain* in [0, 1].  Unity gain returns *pcm* as-is."""
    if gain >= 1.0:
        return pcm
    samples = pcm_to_int32(pcm, bits).astype(np.float64)
    scaled = np.round(samples * max(0.0, gain)).astype(np.int32)
    # keep the unused low bits zero so int32_to_pcm truncation is exact
    scaled &= np.int32(-(1 << (32 - bits)))
    return int32_to_pcm(scaled, bits)
