"""
Shared transport state for one playback invocation.

Each field is independently atomic: a single attribute store/load, or a
threading.Event for the stop flag.  There is no cross-field consistency
and no lock around the group; a reader may pair a stale position with a
fresh volume and that is fine.

Writers:
- playback loop: position_bytes, volume (via commands), stopped
- control side:  everything, through commands applied by the loop or
                 directly via request_stop()
"""

from __future__ import annotations

import threading


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


class TransportState:
    """Position / pause / volume / stop for the current playback."""

    def __init__(self, total_bytes: int, *, volume: float = 1.0) -> None:
        if total_bytes < 0:
            raise ValueError("total_bytes must be >= 0")
        self.total_bytes: int = total_bytes
        self._stop = threading.Event()
        self._paused: bool = False
        self._volume: float = _clamp(float(volume), 0.0, 1.0)
        self._position: int = 0

    # -------------------------
    # stop flag
    # -------------------------

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def request_stop(self) -> None:
        self._stop.set()

    # -------------------------
    # pause
    # -------------------------

    @property
    def paused(self) -> bool:
        return self._paused

    @paused.setter
    def paused(self, value: bool) -> None:
        self._paused = bool(value)

    def toggle_pause(self) -> bool:
        """Flip paused and return the new value."""
        new = not self._paused
        self._paused = new
        return new

    # -------------------------
    # volume
    # -------------------------

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = _clamp(float(value), 0.0, 1.0)

    def nudge_volume(self, delta: float) -> float:
        self.volume = self._volume + delta
        return self._volume

    # -------------------------
    # position
    # -------------------------

    @property
    def position_bytes(self) -> int:
        return self._position

    @position_bytes.setter
    def position_bytes(self, value: int) -> None:
        self._position = _clamp(int(value), 0, self.total_bytes)

    def seek_by(self, delta_bytes: int) -> int:
        """Move position by *delta_bytes*, clamped to [0, total]."""
        self.position_bytes = self._position + delta_bytes
        return self._position

    @property
    def at_end(self) -> bool:
        return self._position >= self.total_bytes

