"""PyAudio-backed media player with periodic position observers."""

import io
import wave
import logging
import itertools
from threading import Thread, Event, Lock, current_thread
from typing import Optional, Dict, Callable, Any

import pyaudio

from .player import AbstractMediaPlayer, MediaPlayerError

logger = logging.getLogger(__name__)


class _PeriodicObserver:
    """Background thread that reports the playhead at a fixed cadence."""

    def __init__(self, player: "PyAudioPlayer", interval: float,
                 callback: Callable[[float], None], token: int):
        self.player = player
        self.interval = interval
        self.callback = callback
        self.stop_event = Event()
        self.thread = Thread(target=self._run, daemon=True)
        self.thread.name = f"PlaybackObserver-{token}"

    def start(self) -> None:
        self.thread.start()

    def stop(self) -> None:
        self.stop_event.set()
        if self.thread.is_alive() and self.thread is not current_thread():
            self.thread.join(timeout=0.5)

    def _run(self) -> None:
        while not self.stop_event.wait(self.interval):
            try:
                self.callback(self.player.current_time)
            except Exception as e:
                # Observer failures must not kill the ticker thread
                logger.error(f"Playback observer callback failed: {e}")


class PyAudioPlayer(AbstractMediaPlayer):
    """Plays a WAV byte buffer through the default PyAudio output device."""

    def __init__(self, chunk_frames: int = 1024):
        """Initialize player.

        Args:
            chunk_frames: Frames written to the output stream per iteration
        """
        self.chunk_frames = chunk_frames

        # Decoded audio
        self.frames = b""
        self.sample_rate = 0
        self.channels = 0
        self.sample_width = 0
        self.total_frames = 0
        self._position = 0  # in frames
        self._lock = Lock()

        # Playback thread management
        self.playback_thread: Optional[Thread] = None
        self.playing_event = Event()
        self.stop_event = Event()

        self._observers: Dict[int, _PeriodicObserver] = {}
        self._tokens = itertools.count(1)

        # PyAudio instance
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    def load(self, audio: bytes) -> None:
        try:
            with wave.open(io.BytesIO(audio), "rb") as wf:
                self.channels = wf.getnchannels()
                self.sample_width = wf.getsampwidth()
                self.sample_rate = wf.getframerate()
                self.total_frames = wf.getnframes()
                self.frames = wf.readframes(self.total_frames)
        except (wave.Error, EOFError) as e:
            raise MediaPlayerError(f"Unreadable audio: {e}") from e

        with self._lock:
            self._position = 0
        logger.info(f"Loaded audio: {self.sample_rate}Hz, {self.channels} channel(s), "
                    f"{self.sample_width * 8}-bit, {self.total_frames} frames")

    @property
    def duration(self) -> Optional[float]:
        if not self.sample_rate:
            return None
        return self.total_frames / self.sample_rate

    @property
    def current_time(self) -> float:
        if not self.sample_rate:
            return 0.0
        with self._lock:
            return self._position / self.sample_rate

    @property
    def finished(self) -> bool:
        with self._lock:
            return self.total_frames > 0 and self._position >= self.total_frames

    def play(self) -> None:
        if not self.sample_rate:
            raise MediaPlayerError("No audio loaded")

        if self.stream is None:
            try:
                self.stream = self.__open_output_stream()
            except OSError as e:
                if self.pyaudio_instance is not None:
                    self.pyaudio_instance.terminate()
                    self.pyaudio_instance = None
                raise MediaPlayerError(f"Could not open audio output: {e}") from e

        if self.playback_thread is None or not self.playback_thread.is_alive():
            self.stop_event.clear()
            self.playback_thread = Thread(target=self._play_continuously, daemon=True)
            self.playback_thread.name = "AudioPlaybackThread"
            self.playback_thread.start()

        self.playing_event.set()
        logger.debug("Playback started")

    def pause(self) -> None:
        self.playing_event.clear()
        logger.debug("Playback paused")

    def seek(self, seconds: float) -> None:
        target = int(seconds * self.sample_rate)
        with self._lock:
            self._position = max(0, min(target, self.total_frames))
        logger.debug(f"Seeked to {seconds:.2f}s (frame {target})")

    def add_periodic_observer(self, interval: float,
                              callback: Callable[[float], None]) -> Any:
        token = next(self._tokens)
        observer = _PeriodicObserver(self, interval, callback, token)
        self._observers[token] = observer
        observer.start()
        return token

    def remove_periodic_observer(self, token: Any) -> None:
        observer = self._observers.pop(token, None)
        if observer is not None:
            observer.stop()

    def release(self) -> None:
        """Stop the worker threads and close the output stream.

        Runs on the caller's thread and blocks only while the playback
        thread finishes the chunk it is writing, about
        ``chunk_frames / sample_rate`` seconds (128 ms for 1024 frames at
        8 kHz). Observer threads exit as soon as they are signalled.
        """
        for token in list(self._observers):
            self.remove_periodic_observer(token)

        self.playing_event.clear()
        self.stop_event.set()
        if self.playback_thread and self.playback_thread.is_alive():
            self.playback_thread.join(timeout=self._chunk_seconds() + 0.25)
            if self.playback_thread.is_alive():
                logger.warning("Playback thread did not stop cleanly")
        self.playback_thread = None

        if self.stream is not None:
            self.stream.stop_stream()
            self.stream.close()
            self.stream = None
        if self.pyaudio_instance is not None:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
        logger.info("PyAudioPlayer released")

    def _chunk_seconds(self) -> float:
        if not self.sample_rate:
            return 0.0
        return self.chunk_frames / self.sample_rate

    def __open_output_stream(self):
        self.pyaudio_instance = pyaudio.PyAudio()
        stream = self.pyaudio_instance.open(
            format=self.pyaudio_instance.get_format_from_width(self.sample_width),
            channels=self.channels,
            rate=self.sample_rate,
            output=True,
            frames_per_buffer=self.chunk_frames,
        )
        logger.info(f"Audio output stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_frames} frames/chunk")
        return stream

    def __next_chunk(self) -> bytes:
        frame_size = self.channels * self.sample_width
        with self._lock:
            start = self._position
            end = min(start + self.chunk_frames, self.total_frames)
            self._position = end
        return self.frames[start * frame_size:end * frame_size]

    def _play_continuously(self) -> None:
        """Internal method: output loop in background thread."""
        while not self.stop_event.is_set():
            if not self.playing_event.wait(timeout=0.05):
                continue
            chunk = self.__next_chunk()
            if not chunk:
                # End of audio: hold the playhead at the end until seek/release
                self.playing_event.clear()
                logger.debug("Reached end of audio")
                continue
            self.stream.write(chunk)
