"""
Runtime configuration.

Responsibilities:
- Read ASPH_* environment variables
- Provide a typed, immutable config object for the player and CLI

Non-responsibilities:
- No file-format constants (those are locked in profiles.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .profiles import (
    CHUNK_SIZE,
    PAUSE_POLL_S,
    SEEK_SECONDS,
    VOLUME_STEP,
    COMMAND_QUEUE_SIZE,
)


@dataclass(frozen=True)
class PlayerConfig:
    """
    Immutable playback configuration.

    Constructed once by the CLI and passed down to the controller.
    """

    chunk_size: int = CHUNK_SIZE
    pause_poll_s: float = PAUSE_POLL_S
    seek_seconds: float = SEEK_SECONDS
    volume_step: float = VOLUME_STEP
    command_queue_size: int = COMMAND_QUEUE_SIZE
    initial_volume: float = 1.0
    device: Optional[str] = None
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if not 0 < self.pause_poll_s <= 0.1:
            raise ValueError("pause_poll_s must be in (0, 0.1]")
        if self.command_queue_size <= 0:
            raise ValueError("command_queue_size must be > 0")
        if not 0.0 <= self.initial_volume <= 1.0:
            raise ValueError("initial_volume must be in [0, 1]")

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> PlayerConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if a variable is present but malformed.
        """
        return PlayerConfig(
            chunk_size=int(os.environ.get("ASPH_CHUNK_SIZE", CHUNK_SIZE)),
            pause_poll_s=float(os.environ.get("ASPH_PAUSE_POLL_S", PAUSE_POLL_S)),
            seek_seconds=float(os.environ.get("ASPH_SEEK_SECONDS", SEEK_SECONDS)),
            volume_step=float(os.environ.get("ASPH_VOLUME_STEP", VOLUME_STEP)),
            command_queue_size=int(os.environ.get("ASPH_COMMAND_QUEUE_SIZE", COMMAND_QUEUE_SIZE)),
            initial_volume=float(os.environ.get("ASPH_VOLUME", "1.0")),
            device=os.environ.get("ASPH_OUTPUT_DEVICE") or None,
            log_level=os.environ.get("ASPH_LOG_LEVEL", "WARNING"),
        )
