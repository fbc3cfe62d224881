"""Event models published on pub/sub topics."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .playback import PlaybackState


@dataclass
class PlaybackEvent:
    """Snapshot of the playback controller after a change."""
    state: PlaybackState
    recording_id: Optional[int] = None
    progress: float = 0.0
    is_scrubbing: bool = False
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class StatusEvent:
    """User-facing status line from the call history service."""
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
