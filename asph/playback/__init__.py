"""ASPH playback: transport state, command channel, output sinks, main loop."""

from .commands import Command, CommandQueue, ControlListener, parse_command
from .controller import (
    EndReason,
    PlaybackController,
    PlaybackResult,
    ProgressRenderer,
    play_record,
    progress_line,
)
from .sink import OutputSink, SoundDeviceSink
from .transport import TransportState

__all__ = [
    "Command", "CommandQueue", "ControlListener", "parse_command",
    "EndReason", "PlaybackController", "PlaybackResult", "ProgressRenderer",
    "play_record", "progress_line",
    "OutputSink", "SoundDeviceSink",
    "TransportState",
]
