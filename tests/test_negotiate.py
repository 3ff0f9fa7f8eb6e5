# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest

from asph.diagnostics import InvalidSourceFormat
from asph.negotiate import PcmDescriptor, negotiate


def fmt(rate, bits, channels):
    return PcmDescriptor(sample_rate=rate, bits_per_sample=bits, channels=channels)


# ----------------------------------------------------------------------
# Lattice
# ----------------------------------------------------------------------

RATES = [1, 4000, 7999, 8000, 11025, 22050, 44100, 48000, 88200, 96000, 96001, 192000, 44100.5]
BITS = list(range(-1, 65))
CHANNELS = list(range(1, 9))


def test_output_always_on_lattice():
    for rate in RATES:
        for bits in BITS:
            for ch in CHANNELS:
                out = negotiate(fmt(rate, bits, ch))
                assert 8000 <= out.sample_rate <= 96000
                assert out.bits_per_sample in (8, 16, 24)
                assert out.channels in (1, 2)
                assert out.is_supported


def test_supported_source_is_unchanged():
    for rate in (8000, 44100, 48000, 96000):
        for bits in (8, 16, 24):
            for ch in (1, 2):
                src = fmt(rate, bits, ch)
                assert negotiate(src) == src


def test_negotiate_is_idempotent():
    for rate in RATES:
        for bits in BITS:
            once = negotiate(fmt(rate, bits, 6))
            assert negotiate(once) == once


# ----------------------------------------------------------------------
# Boundary cases
# ----------------------------------------------------------------------

@pytest.mark.parametrize("bits, expected", [
    (0, 16), (-1, 16),
    (1, 8), (7, 8), (8, 8), (11, 8),
    (12, 16), (16, 16), (19, 16),
    (20, 24), (24, 24), (28, 24), (32, 24), (64, 24),
])
def test_bit_depth_rounding(bits, expected):
    assert negotiate(fmt(44100, bits, 2)).bits_per_sample == expected


def test_rate_clamped():
    assert negotiate(fmt(100000, 16, 2)).sample_rate == 96000
    assert negotiate(fmt(4000, 16, 2)).sample_rate == 8000


def test_channels_clamped():
    assert negotiate(fmt(44100, 16, 6)).channels == 2


@pytest.mark.parametrize("source", [
    fmt(0, 16, 2), fmt(-44100, 16, 2), fmt(44100, 16, 0), fmt(44100, 16, -1),
])
def test_non_positive_rate_or_channels_rejected(source):
    with pytest.raises(InvalidSourceFormat):
        negotiate(source)


# ----------------------------------------------------------------------
# Descriptor helpers
# ----------------------------------------------------------------------

def test_descriptor_sizes():
    d = fmt(44100, 24, 2)
    assert d.sample_width == 3
    assert d.frame_size == 6
    assert d.bytes_per_second == 264600
    assert d.duration_seconds(264600) == pytest.approx(1.0)
    assert str(d) == "44100 Hz / 24-bit / stereo"
