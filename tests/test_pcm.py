# pylint: disable=missing-module-docstring,missing-function-docstring
"""Sample packing and software gain."""

import numpy as np
import pytest

from asph.pcm import apply_gain, float_to_int32, int32_to_pcm, pcm_to_int32


def pack(values, bits):
    """Signed LE PCM from plain integers."""
    width = bits // 8
    return b"".join(int(v).to_bytes(width, "little", signed=True) for v in values)


def unpack(pcm, bits):
    width = bits // 8
    return [int.from_bytes(pcm[i:i + width], "little", signed=True)
            for i in range(0, len(pcm), width)]


# ----------------------------------------------------------------------
# Packing
# ----------------------------------------------------------------------

@pytest.mark.parametrize("bits", [8, 16, 24])
def test_int32_round_trip(bits):
    top = (1 << (bits - 1)) - 1
    values = [0, 1, -1, top, -top - 1, top // 3, -(top // 5)]
    pcm = pack(values, bits)

    samples = pcm_to_int32(pcm, bits)

    assert samples.dtype == np.int32
    assert list(samples >> (32 - bits)) == values
    assert int32_to_pcm(samples, bits) == pcm


def test_negative_24_bit_samples():
    values = [-1, -8388608, -123456, -2, 8388607]
    pcm = pack(values, 24)

    samples = pcm_to_int32(pcm, 24)

    assert list(samples) == [v << 8 for v in values]
    assert int32_to_pcm(samples, 24) == pcm


def test_ragged_input_rejected():
    with pytest.raises(ValueError):
        pcm_to_int32(b"\x00" * 5, 24)
    with pytest.raises(ValueError):
        pcm_to_int32(b"\x00" * 4, 32)


def test_float_quantisation_clips():
    q = float_to_int32(np.array([0.5, -1.0, 1.0, 2.0]), 16)
    assert list(q >> 16) == [16384, -32768, 32767, 32767]


# ----------------------------------------------------------------------
# Gain
# ----------------------------------------------------------------------

HALF = {
    8:  ([100, -100, 127, -128],                [50, -50, 63, -64]),
    16: ([1000, -1000, 32767, -32768],          [500, -500, 16383, -16384]),
    24: ([1000000, -1000000, 8388607, -8388608], [500000, -500000, 4194303, -4194304]),
}


@pytest.mark.parametrize("bits", [8, 16, 24])
def test_half_gain_halves_samples(bits):
    values, expected = HALF[bits]
    out = apply_gain(pack(values, bits), bits, 0.5)
    assert len(out) == len(values) * bits // 8
    assert unpack(out, bits) == expected


@pytest.mark.parametrize("bits", [8, 16, 24])
def test_zero_gain_is_silence(bits):
    values, _ = HALF[bits]
    out = apply_gain(pack(values, bits), bits, 0.0)
    assert out == bytes(len(values) * bits // 8)


@pytest.mark.parametrize("bits", [8, 16, 24])
def test_unity_gain_passes_through(bits):
    pcm = pack(HALF[bits][0], bits)
    assert apply_gain(pcm, bits, 1.0) is pcm


def test_gain_output_round_trips_exactly():
    # masked low bits mean the scaled samples survive repacking unchanged
    pcm = pack(list(range(-8388608, 8388607, 65537)), 24)
    once = apply_gain(pcm, 24, 0.3)
    assert int32_to_pcm(pcm_to_int32(once, 24), 24) == once
