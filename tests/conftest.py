# pylint: disable=missing-module-docstring,missing-function-docstring
from __future__ import annotations

import os
import sys
import types

import numpy as np
import pytest

# repo root holds the top-level audiosphere / asph_bridge modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from asph.negotiate import PcmDescriptor  # noqa: E402


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


def random_pcm(rng: np.random.Generator, fmt: PcmDescriptor, n_frames: int) -> bytes:
    """Random whole-frame PCM for *fmt*."""
    return rng.integers(0, 256, size=n_frames * fmt.frame_size, dtype=np.uint8).tobytes()


class FakePortAudioError(Exception):
    pass


class FakeRawOutputStream:
    """Stands in for sounddevice.RawOutputStream; keeps every buffer written."""

    fail_with = None

    def __init__(self, *, samplerate, channels, dtype, device=None):
        if self.fail_with is not None:
            raise self.fail_with
        self.samplerate = samplerate
        self.channels = channels
        self.dtype = dtype
        self.device = device
        self.active = False
        self.closed = False
        self.buffers = []

    def start(self):
        self.active = True

    def write(self, data):
        self.buffers.append(bytes(data))
        return False

    def stop(self):
        self.active = False

    def close(self):
        self.closed = True


@pytest.fixture
def fake_sounddevice(monkeypatch):
    """Install an in-memory sounddevice module; no PortAudio needed."""
    module = types.ModuleType("sounddevice")
    stream_cls = type("RawOutputStream", (FakeRawOutputStream,), {"fail_with": None})
    module.RawOutputStream = stream_cls
    module.PortAudioError = FakePortAudioError
    monkeypatch.setitem(sys.modules, "sounddevice", module)
    return module
