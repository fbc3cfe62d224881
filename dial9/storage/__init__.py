"""In-memory catalog and on-disk export."""

from .catalog import RecordingCatalog
from .export import AudioExporter

__all__ = [
    "RecordingCatalog",
    "AudioExporter",
]
