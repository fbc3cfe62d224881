"""Dial9 REST API client."""

from .client import RecordingApiClient, day_range
from .errors import (
    Dial9Error,
    TransportError,
    DecodeError,
    AudioCorruptError,
    ApiStatusError,
    EmptyResponseError,
)
from .transport import HttpTransport, AiohttpTransport

__all__ = [
    "RecordingApiClient",
    "day_range",
    "Dial9Error",
    "TransportError",
    "DecodeError",
    "AudioCorruptError",
    "ApiStatusError",
    "EmptyResponseError",
    "HttpTransport",
    "AiohttpTransport",
]
