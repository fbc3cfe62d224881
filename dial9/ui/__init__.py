"""Terminal presentation for the Dial9 CLI."""

from .recordings_view import RecordingsView, time_string

__all__ = ["RecordingsView", "time_string"]
