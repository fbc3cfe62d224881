"""Wire schemas for Dial9 API responses."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.recording import RecordingRecord


class Party(BaseModel):
    """Caller or callee object; only the display name is used."""
    name: Optional[str] = None


class RecordingObject(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    timestamp: str
    duration: Optional[int] = None
    source: Optional[Party] = None
    destination: Optional[Party] = None
    # The server really does put a question mark in this key
    has_recording: Optional[bool] = Field(default=None, alias="has_recording?")
    call_type: Optional[str] = None

    def to_record(self) -> RecordingRecord:
        return RecordingRecord(
            id=self.id,
            timestamp=self.timestamp,
            duration=self.duration or 0,
            source_name=self.source.name if self.source else None,
            destination_name=self.destination.name if self.destination else None,
            has_recording=bool(self.has_recording),
            call_type=self.call_type if self.call_type is not None else "unknown",
        )


class SearchResponse(BaseModel):
    data: Optional[List[RecordingObject]] = None


class AudioData(BaseModel):
    file: Optional[str] = None


class AudioResponse(BaseModel):
    status: str
    data: Optional[AudioData] = None


class StatusResponse(BaseModel):
    status: str
