"""Dial9 call history: recording search, WAV export and playback."""

__version__ = "0.1.0"
