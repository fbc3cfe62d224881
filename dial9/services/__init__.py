"""Services layer for Dial9 call history application logic."""

from .playback import PlaybackController
from .history_service import CallHistoryService

__all__ = [
    "PlaybackController",
    "CallHistoryService",
]
