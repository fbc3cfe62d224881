"""Data models for the Dial9 call history application."""

from .credentials import Credentials
from .recording import RecordingRecord, EmptyResultNotice
from .playback import PlaybackState, PlaybackSession
from .events import PlaybackEvent, StatusEvent

__all__ = [
    "Credentials",
    "RecordingRecord",
    "EmptyResultNotice",
    "PlaybackState",
    "PlaybackSession",
    "PlaybackEvent",
    "StatusEvent",
]
