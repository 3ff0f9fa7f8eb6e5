"""
Realtime playback loop.

    Stopped ──play()──► Playing ◄──pause-toggle──► Paused
       ▲                  │                          │
       └──── stop / end of buffer (no loop) ◄────────┘

Per iteration the loop:
  1. applies every pending command (checkpoint)
  2. exits if the stop flag is set
  3. while paused: waits on the command queue for at most pause_poll_s
  4. at end of buffer: wraps to 0 when looping, otherwise stops
  5. writes up to chunk_size bytes (whole frames) at position_bytes
  6. advances position by the bytes the sink accepted
  7. maps volume [0, 1] linearly onto the sink's gain range
  8. renders the progress line

On exit the sink is drained and closed.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TextIO

from ..config import PlayerConfig
from ..framing import InnerRecord
from ..profiles import PROGRESS_BAR_CELLS
from .commands import Command, CommandQueue, ControlListener
from .sink import OutputSink
from .transport import TransportState

log = logging.getLogger(__name__)


class EndReason(str, Enum):
    STOPPED       = "stopped"
    END_OF_BUFFER = "end_of_buffer"


@dataclass
class PlaybackResult:
    reason:         EndReason
    position_bytes: int
    loops:          int = 0
    bytes_written:  int = 0


# ── progress rendering ────────────────────────────────────────────────────────

def format_time(seconds: float) -> str:
    sec = int(max(0.0, seconds))
    return f"{sec // 60:02d}:{sec % 60:02d}"


def progress_line(position: int, total: int, bytes_per_second: float,
                  loop: bool, cells: int = PROGRESS_BAR_CELLS) -> str:
    """One-line progress bar: ``[####----]  42% | Elapsed: 00:12 | ...``"""
    progress = position / max(1, total)
    filled = int(progress * cells)
    bar = "[" + "#" * filled + "-" * (cells - filled) + "]"

    elapsed = position / bytes_per_second if bytes_per_second > 0 else 0.0
    total_s = total / bytes_per_second if bytes_per_second > 0 else 0.0
    return (
        f"{bar} {progress * 100:3.0f}% | Elapsed: {format_time(elapsed)} | "
        f"Remaining: {format_time(total_s - elapsed)} | Loop: {'On' if loop else 'Off'}"
    )


class ProgressRenderer:
    """Rewrites a single terminal line with carriage returns."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream if stream is not None else sys.stdout

    def __call__(self, line: str) -> None:
        self._stream.write("\r" + line)
        self._stream.flush()

    def message(self, text: str) -> None:
        self._stream.write("\n" + text + "\n")
        self._stream.flush()


# ── controller ────────────────────────────────────────────────────────────────

class PlaybackController:
    """Streams one decoded InnerRecord to an OutputSink."""

    def __init__(
        self,
        record: InnerRecord,
        sink: OutputSink,
        *,
        loop: bool = False,
        config: Optional[PlayerConfig] = None,
        transport: Optional[TransportState] = None,
        commands: Optional[CommandQueue] = None,
        render: Optional[Callable[[str], None]] = None,
        notify: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.config = config or PlayerConfig()
        self.record = record
        self.sink = sink
        self.loop = loop
        self.transport = transport or TransportState(
            len(record.pcm), volume=self.config.initial_volume
        )
        self.commands = commands or CommandQueue(maxsize=self.config.command_queue_size)
        self._render = render
        self._notify = notify

        fmt = record.format
        self._frame = fmt.frame_size
        self._chunk = max(self._frame, self.config.chunk_size - self.config.chunk_size % self._frame)
        seek = int(fmt.bytes_per_second * self.config.seek_seconds)
        self._seek_bytes = seek - seek % self._frame

    # -------------------------
    # commands
    # -------------------------

    def _say(self, text: str) -> None:
        log.debug(text)
        if self._notify is not None:
            self._notify(text)

    def apply(self, cmd: Command) -> None:
        """Apply one transport command to the shared state."""
        t = self.transport
        if cmd is Command.PAUSE_TOGGLE:
            self._say("Paused" if t.toggle_pause() else "Resumed")
        elif cmd is Command.VOLUME_UP:
            self._say(f"Volume: {t.nudge_volume(self.config.volume_step) * 100:.0f}%")
        elif cmd is Command.VOLUME_DOWN:
            self._say(f"Volume: {t.nudge_volume(-self.config.volume_step) * 100:.0f}%")
        elif cmd is Command.SEEK_FORWARD:
            t.seek_by(self._seek_bytes)
            self._say(f"Seek forward {self.config.seek_seconds:g}s")
        elif cmd is Command.SEEK_BACK:
            t.seek_by(-self._seek_bytes)
            self._say(f"Seek backward {self.config.seek_seconds:g}s")
        elif cmd is Command.STOP:
            t.request_stop()
            self._say("Stopping playback.")

    def _checkpoint(self) -> None:
        for cmd in self.commands.drain():
            self.apply(cmd)

    # -------------------------
    # volume
    # -------------------------

    def _apply_volume(self) -> None:
        rng = self.sink.gain_range
        if rng is None:
            return
        lo, hi = rng
        self.sink.set_gain(lo + (hi - lo) * self.transport.volume)

    # -------------------------
    # main loop
    # -------------------------

    def run(self) -> PlaybackResult:
        """Play until stopped or (without looping) the buffer is exhausted."""
        t = self.transport
        pcm = self.record.pcm
        total = len(pcm)
        bps = self.record.format.bytes_per_second
        poll = self.config.pause_poll_s

        loops = 0
        written_total = 0
        reason = EndReason.STOPPED

        self.sink.open()
        try:
            while True:
                self._checkpoint()
                if t.stopped:
                    reason = EndReason.STOPPED
                    break

                if t.paused:
                    cmd = self.commands.get(timeout=poll)
                    if cmd is not None:
                        self.apply(cmd)
                    continue

                if t.at_end:
                    if self.loop and total > 0:
                        t.position_bytes = 0
                        loops += 1
                        continue
                    reason = EndReason.END_OF_BUFFER
                    t.request_stop()
                    break

                pos = t.position_bytes
                chunk = pcm[pos:pos + self._chunk]
                self._apply_volume()
                written = self.sink.write(chunk)
                written_total += written
                # a concurrent seek during the write wins over this advance
                if t.position_bytes == pos:
                    t.position_bytes = pos + written

                if self._render is not None:
                    self._render(progress_line(t.position_bytes, total, bps, self.loop))
        finally:
            try:
                self.sink.drain()
            finally:
                self.sink.close()

        log.debug("playback ended: %s at %d/%d bytes (%d loop(s))",
                  reason.value, t.position_bytes, total, loops)
        return PlaybackResult(
            reason=reason,
            position_bytes=t.position_bytes,
            loops=loops,
            bytes_written=written_total,
        )


# ── wiring ────────────────────────────────────────────────────────────────────

def play_record(
    record: InnerRecord,
    sink: OutputSink,
    *,
    loop: bool = False,
    config: Optional[PlayerConfig] = None,
    control: Optional[TextIO] = None,
    render: Optional[Callable[[str], None]] = None,
    notify: Optional[Callable[[str], None]] = None,
) -> PlaybackResult:
    """Run a controller for *record*, with a ControlListener on *control*."""
    controller = PlaybackController(
        record, sink, loop=loop, config=config, render=render, notify=notify,
    )
    if control is not None:
        listener = ControlListener(control, controller.commands, controller.transport)
        listener.start()
    try:
        return controller.run()
    finally:
        # releases a listener that is between reads
        controller.transport.request_stop()
