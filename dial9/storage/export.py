"""Saving fetched recordings to disk."""

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class AudioExporter:
    """Writes WAV payloads into an export directory."""

    def __init__(self, export_dir: str = "./exports"):
        """Initialize exporter.

        Args:
            export_dir: Directory that receives exported files
        """
        self.export_dir = Path(export_dir)
        self.export_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"AudioExporter initialized with export_dir: {self.export_dir}")

    @staticmethod
    def suggested_filename(recording_id: int) -> str:
        return f"recording-{recording_id}.wav"

    def save(self, audio: bytes, filename: Optional[str] = None) -> Path:
        """Save audio bytes and return the written path.

        Args:
            audio: Complete WAV file bytes
            filename: Target file name; ".wav" is appended when missing

        Returns:
            Path of the saved file
        """
        if filename is None:
            filename = "recording.wav"

        # Ensure .wav extension
        if not filename.endswith('.wav'):
            filename += '.wav'

        path = self.export_dir / filename

        try:
            with open(path, 'wb') as f:
                f.write(audio)
        except OSError as e:
            logger.error(f"Error saving audio file {path}: {e}")
            raise

        logger.info(f"Audio file saved: {path} ({len(audio)} bytes)")
        return path
