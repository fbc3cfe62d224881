"""Pytest configuration and fixtures for Dial9 call history tests."""

import asyncio
import json
import logging
import tempfile
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import Mock, patch

import numpy as np
import pytest
from pubsub import pub

from dial9.api.errors import Dial9Error
from dial9.api.transport import HttpTransport
from dial9.audio.player import AbstractMediaPlayer
from dial9.audio.wav import wrap_pcm
from dial9.models.credentials import Credentials
from dial9.models.recording import RecordingRecord


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without I/O")
    config.addinivalue_line("markers", "integration: tests that talk to a local HTTP server")


@pytest.fixture(autouse=True)
def clean_pubsub():
    """Drop every pub/sub listener registered by a test."""
    yield
    pub.unsubAll()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def credentials():
    return Credentials(auth_token="token-123", auth_secret="secret-456")


@pytest.fixture
def sample_pcm():
    """One second of a 440 Hz tone as 8 kHz mono 16-bit PCM."""
    sample_rate = 8000
    t = np.linspace(0, 1.0, sample_rate, False)
    wave_data = np.sin(2 * np.pi * 440 * t)

    # Convert to 16-bit integers
    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def sample_wav(sample_pcm):
    return wrap_pcm(sample_pcm)


@pytest.fixture
def make_recording():
    """Factory for RecordingRecord with sensible defaults."""
    def _make(recording_id: int, timestamp: str = "2024-05-01 09:30:00 +0100", **kwargs) -> RecordingRecord:
        kwargs.setdefault("duration", 65)
        kwargs.setdefault("source_name", f"Caller {recording_id}")
        kwargs.setdefault("destination_name", "Reception")
        kwargs.setdefault("has_recording", True)
        kwargs.setdefault("call_type", "incoming")
        return RecordingRecord(id=recording_id, timestamp=timestamp, **kwargs)
    return _make


def _recording_json(recording_id: int, timestamp: str = "2024-05-01 09:30:00 +0100", **overrides) -> Dict[str, Any]:
    obj = {
        "id": recording_id,
        "timestamp": timestamp,
        "duration": 42,
        "source": {"name": "Alice", "number": "+441234567890"},
        "destination": {"name": "Bob", "number": "+449876543210"},
        "has_recording?": True,
        "call_type": "incoming",
    }
    obj.update(overrides)
    return obj


@pytest.fixture
def recording_json():
    """Factory for recording objects as the search endpoint returns them."""
    return _recording_json


class FakeTransport(HttpTransport):
    """Transport that records requests and replays canned responses by path."""

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self.responses: Dict[str, Any] = {}

    def respond(self, path: str, body: Any = None, *, raw: Optional[bytes] = None,
                error: Optional[Exception] = None) -> None:
        if error is not None:
            self.responses[path] = error
        elif raw is not None:
            self.responses[path] = raw
        else:
            self.responses[path] = json.dumps(body).encode("utf-8")

    async def post(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> bytes:
        self.requests.append({"url": url, "headers": headers, "payload": payload})
        for path, response in self.responses.items():
            if url.endswith(path):
                if isinstance(response, Exception):
                    raise response
                return response
        raise AssertionError(f"Unexpected request to {url}")


@pytest.fixture
def fake_transport():
    return FakeTransport()


class FakePlayer(AbstractMediaPlayer):
    """In-memory media player that lets tests drive the playhead."""

    def __init__(self, duration: Optional[float] = 120.0):
        self._duration = duration
        self._current_time = 0.0
        self.loaded: Optional[bytes] = None
        self.seeks: List[float] = []
        self.is_playing = False
        self.play_calls = 0
        self.pause_calls = 0
        self.released = False
        self.observers: Dict[int, Callable[[float], None]] = {}
        self.observer_intervals: List[float] = []
        self._next_token = 0

    def load(self, audio: bytes) -> None:
        self.loaded = audio

    def play(self) -> None:
        self.is_playing = True
        self.play_calls += 1

    def pause(self) -> None:
        self.is_playing = False
        self.pause_calls += 1

    def seek(self, seconds: float) -> None:
        self.seeks.append(seconds)
        self._current_time = seconds

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def duration(self) -> Optional[float]:
        return self._duration

    @property
    def finished(self) -> bool:
        return self._duration is not None and self._current_time >= self._duration

    def add_periodic_observer(self, interval: float, callback: Callable[[float], None]) -> Any:
        self._next_token += 1
        self.observers[self._next_token] = callback
        self.observer_intervals.append(interval)
        return self._next_token

    def remove_periodic_observer(self, token: Any) -> None:
        self.observers.pop(token, None)

    def release(self) -> None:
        self.released = True

    def emit(self, current_time: float) -> None:
        """Simulate a periodic tick from the platform player."""
        self._current_time = current_time
        for callback in list(self.observers.values()):
            callback(current_time)


@pytest.fixture
def player_factory():
    """Factory creating FakePlayers; the created players are kept on ``.players``."""
    players: List[FakePlayer] = []

    def factory() -> FakePlayer:
        player = FakePlayer(duration=factory.duration)
        players.append(player)
        return player

    factory.duration = 120.0
    factory.players = players
    return factory


class ImmediateApiClient:
    """API client stand-in that answers fetch_audio at once."""

    def __init__(self, audio: bytes = b"", error: Optional[Dial9Error] = None):
        self.audio = audio
        self.error = error
        self.calls: List[int] = []

    async def fetch_audio(self, recording_id: int, credentials: Credentials) -> bytes:
        self.calls.append(recording_id)
        if self.error is not None:
            raise self.error
        return self.audio


@pytest.fixture
def immediate_client(sample_wav):
    """Client returning ``sample_wav``; set ``.error`` to make fetches fail."""
    return ImmediateApiClient(audio=sample_wav)


class GatedApiClient:
    """API client stand-in whose fetches complete only when the test says so."""

    def __init__(self):
        self.pending: Dict[int, asyncio.Future] = {}
        self.calls: List[int] = []

    async def fetch_audio(self, recording_id: int, credentials: Credentials) -> bytes:
        future = asyncio.get_running_loop().create_future()
        self.pending[recording_id] = future
        self.calls.append(recording_id)
        return await future

    def complete(self, recording_id: int, audio: bytes) -> None:
        self.pending[recording_id].set_result(audio)

    def fail(self, recording_id: int, error: Exception) -> None:
        self.pending[recording_id].set_exception(error)


@pytest.fixture
def gated_client():
    return GatedApiClient()


class EventRecorder:
    """Pub/sub listener that keeps every event it receives."""

    def __init__(self, topic: str):
        self.events: List[Any] = []
        pub.subscribe(self.on_event, topic)

    def on_event(self, event):
        self.events.append(event)

    @property
    def states(self):
        return [event.state for event in self.events]


@pytest.fixture
def playback_events():
    """Collect PlaybackEvents published on the default topic."""
    return EventRecorder("playback.state")


@pytest.fixture
def status_events():
    """Collect StatusEvents published by the call history service."""
    return EventRecorder("history.status")


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.write.return_value = None
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_format_from_width.return_value = 8

        # Configure mock PyAudio class
        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }
