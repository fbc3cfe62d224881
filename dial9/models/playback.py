"""Playback session models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class PlaybackState(Enum):
    """States of the playback controller."""
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    SCRUBBING = "scrubbing"
    STOPPED = "stopped"


@dataclass
class PlaybackSession:
    """Live binding between a recording and a media player."""
    recording_id: int
    generation: int
    progress: float = 0.0  # 0.0 to 1.0
    is_scrubbing: bool = False
    player: Optional[Any] = None  # AbstractMediaPlayer, not owned by the session
    observer_token: Optional[Any] = None
