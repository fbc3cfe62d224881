"""Abstract media player used by the playback controller."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class MediaPlayerError(Exception):
    """The player could not load or render the audio it was given."""


class AbstractMediaPlayer(ABC):
    """Platform playback primitive: one instance per playback session."""

    @abstractmethod
    def load(self, audio: bytes) -> None:
        """Bind a complete audio file (e.g. WAV bytes) to the player.

        Raises:
            MediaPlayerError: If the audio cannot be decoded
        """
        pass

    @abstractmethod
    def play(self) -> None:
        """Start or resume playback from the current position."""
        pass

    @abstractmethod
    def pause(self) -> None:
        pass

    @abstractmethod
    def seek(self, seconds: float) -> None:
        """Move the playhead to an absolute position in seconds."""
        pass

    @property
    @abstractmethod
    def current_time(self) -> float:
        """Playhead position in seconds."""
        pass

    @property
    @abstractmethod
    def duration(self) -> Optional[float]:
        """Total length in seconds, or None while unknown."""
        pass

    @property
    @abstractmethod
    def finished(self) -> bool:
        """True once the playhead has reached the end of the audio."""
        pass

    @abstractmethod
    def add_periodic_observer(self, interval: float,
                              callback: Callable[[float], None]) -> Any:
        """Call ``callback(current_time)`` every ``interval`` seconds.

        The callback may be invoked from any thread.

        Returns:
            Token to pass to remove_periodic_observer
        """
        pass

    @abstractmethod
    def remove_periodic_observer(self, token: Any) -> None:
        pass

    @abstractmethod
    def release(self) -> None:
        """Free the underlying audio resources. The player is unusable afterwards.

        Called from the event loop, so it must return within a fraction of a
        second.
        """
        pass
