"""Recording metadata models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %z"


@dataclass(frozen=True)
class RecordingRecord:
    """One call from a search response."""
    id: int
    timestamp: str  # e.g. "2024-05-01 09:30:00 +0100"
    duration: int = 0  # whole seconds
    source_name: Optional[str] = None
    destination_name: Optional[str] = None
    has_recording: bool = False
    call_type: str = "unknown"

    @property
    def created_at(self) -> Optional[datetime]:
        """Parsed creation time, or None when the server sent something odd."""
        try:
            return datetime.strptime(self.timestamp, TIMESTAMP_FORMAT)
        except ValueError:
            return None

    @property
    def formatted_time(self) -> str:
        created = self.created_at
        if created is None:
            return "Invalid Date"
        return created.astimezone().strftime("%H:%M:%S")

    @property
    def formatted_duration(self) -> str:
        minutes, seconds = divmod(self.duration, 60)
        return f"{minutes:02d}:{seconds:02d}"

    @property
    def is_incoming(self) -> bool:
        return self.call_type == "incoming"


@dataclass
class EmptyResultNotice:
    """A search that succeeded but matched no calls."""
    day: Optional[date] = None
    message: str = field(default="No recordings found for this date.")
