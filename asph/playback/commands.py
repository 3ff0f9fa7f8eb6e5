"""
Transport command channel.

The control listener turns single characters from a line-buffered input
source into Commands and feeds them into a bounded CommandQueue.  The
playback loop drains the queue at its checkpoints (once per chunk, once per
pause poll) and applies each command to the TransportState.

Vocabulary:
    p / P   pause-toggle
    + / =   volume up one step
    -       volume down one step
    f / F   seek forward
    b / B   seek backward
    q / Q   stop
Anything else is ignored.
"""

from __future__ import annotations

import logging
import queue
import threading
from enum import Enum
from typing import Optional, TextIO

from ..profiles import COMMAND_QUEUE_SIZE
from .transport import TransportState

log = logging.getLogger(__name__)


class Command(str, Enum):
    PAUSE_TOGGLE = "pause_toggle"
    VOLUME_UP    = "volume_up"
    VOLUME_DOWN  = "volume_down"
    SEEK_FORWARD = "seek_forward"
    SEEK_BACK    = "seek_back"
    STOP         = "stop"


KEYMAP: dict[str, Command] = {
    "p": Command.PAUSE_TOGGLE, "P": Command.PAUSE_TOGGLE,
    "+": Command.VOLUME_UP,    "=": Command.VOLUME_UP,
    "-": Command.VOLUME_DOWN,
    "f": Command.SEEK_FORWARD, "F": Command.SEEK_FORWARD,
    "b": Command.SEEK_BACK,    "B": Command.SEEK_BACK,
    "q": Command.STOP,         "Q": Command.STOP,
}


def parse_command(ch: str) -> Optional[Command]:
    """Map one input character to a Command, or None if unrecognised."""
    return KEYMAP.get(ch)


class CommandQueue:
    """
    Bounded FIFO of Commands between the listener and the playback loop.

    put() never blocks: when full, the new command is dropped, except STOP,
    which also raises the transport's stop flag directly so it can never be
    lost.
    """

    def __init__(self, *, maxsize: int = COMMAND_QUEUE_SIZE) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be > 0")
        self._q: queue.Queue[Command] = queue.Queue(maxsize=maxsize)
        self.dropped: int = 0

    def put(self, cmd: Command, *, transport: Optional[TransportState] = None) -> bool:
        """
        Enqueue *cmd*.

        Returns:
            True if enqueued
            False if dropped
        """
        try:
            self._q.put_nowait(cmd)
            return True
        except queue.Full:
            self.dropped += 1
            log.warning("command queue full, dropped %s", cmd.value)
            if cmd is Command.STOP and transport is not None:
                transport.request_stop()
            return False

    def get(self, timeout: float) -> Optional[Command]:
        """Wait up to *timeout* seconds for a command."""
        try:
            return self._q.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[Command]:
        """Remove and return every pending command without blocking."""
        out: list[Command] = []
        while True:
            try:
                out.append(self._q.get_nowait())
            except queue.Empty:
                return out

    def __len__(self) -> int:
        return self._q.qsize()


class ControlListener:
    """
    Reads characters from *source* on a daemon thread and queues commands.

    Cancellable: the thread exits when the transport is stopped (checked
    after every line) or the source reaches EOF.  A read blocked on an
    interactive terminal is not interruptible; the thread is a daemon.
    """

    def __init__(
        self,
        source: TextIO,
        commands: CommandQueue,
        transport: TransportState,
    ) -> None:
        self._source = source
        self._commands = commands
        self._transport = transport
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self._run, name="asph-control", daemon=True
        )
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._transport.stopped:
            try:
                line = self._source.readline()
            except (OSError, ValueError) as exc:
                # closed or unreadable stdin ends control input, not playback
                log.debug("control input closed: %s", exc)
                return
            if not line:
                return
            for ch in line:
                cmd = parse_command(ch)
                if cmd is None:
                    continue
                self._commands.put(cmd, transport=self._transport)
                if cmd is Command.STOP:
                    return
