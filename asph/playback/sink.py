"""
Audio output sinks.

Contract every sink implements:

    open()                  acquire the device
    write(data) -> int      bytes accepted (whole frames only)
    drain()                 block until queued audio has played
    close()                 release the device
    gain_range              (min, max) or None if the sink has no gain control
    set_gain(value)         value within gain_range

SoundDeviceSink drives a blocking sounddevice RawOutputStream.  PortAudio
has no master-gain control, so the sink exposes a software gain in
[0.0, 1.0] applied to every chunk before it is written.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from ..diagnostics import OutputDeviceError, UnsupportedFormat
from ..negotiate import PcmDescriptor
from ..pcm import apply_gain

log = logging.getLogger(__name__)

# PortAudio sample formats for signed integer PCM
_DTYPES = {8: "int8", 16: "int16", 24: "int24"}


class OutputSink:
    """Base class: no-op sink with no gain control."""

    def __init__(self, fmt: PcmDescriptor) -> None:
        self.format = fmt

    @property
    def gain_range(self) -> Optional[Tuple[float, float]]:
        return None

    def set_gain(self, value: float) -> None:
        raise NotImplementedError("sink has no gain control")

    def open(self) -> None:
        pass

    def write(self, data: bytes) -> int:
        raise NotImplementedError

    def drain(self) -> None:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> "OutputSink":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class SoundDeviceSink(OutputSink):
    """Blocking PortAudio output via sounddevice.RawOutputStream."""

    def __init__(self, fmt: PcmDescriptor, *, device: Optional[str] = None) -> None:
        super().__init__(fmt)
        if fmt.bits_per_sample not in _DTYPES:
            raise UnsupportedFormat(f"cannot play {fmt.bits_per_sample}-bit PCM")
        self._device = device
        self._stream = None
        self._gain = 1.0
        self.underflows = 0

    @property
    def gain_range(self) -> Optional[Tuple[float, float]]:
        return (0.0, 1.0)

    def set_gain(self, value: float) -> None:
        self._gain = max(0.0, min(1.0, float(value)))

    def open(self) -> None:
        import sounddevice as sd

        try:
            stream = sd.RawOutputStream(
                samplerate=float(self.format.sample_rate),
                channels=self.format.channels,
                dtype=_DTYPES[self.format.bits_per_sample],
                device=self._device,
            )
            stream.start()
        except (sd.PortAudioError, ValueError) as exc:
            raise OutputDeviceError(
                f"cannot open output device {self._device or 'default'}: {exc}"
            ) from exc
        self._stream = stream
        log.debug("output stream open: %s device=%s", self.format, self._device)

    def write(self, data: bytes) -> int:
        if self._stream is None:
            raise RuntimeError("sink is not open")
        frame = self.format.frame_size
        n = len(data) - len(data) % frame
        if n == 0:
            return 0
        chunk = apply_gain(bytes(data[:n]), self.format.bits_per_sample, self._gain)
        if self._stream.write(chunk):
            self.underflows += 1
        return n

    def drain(self) -> None:
        # stop() lets PortAudio play out pending buffers; abort() would drop them
        if self._stream is not None and self._stream.active:
            self._stream.stop()

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None
            if self.underflows:
                log.warning("output underflowed %d time(s)", self.underflows)
