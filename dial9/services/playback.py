"""Playback state machine: loading, progress reporting and scrubbing."""

import asyncio
import logging
import math
from typing import Callable, Optional

from pubsub import pub

from ..api.client import RecordingApiClient
from ..api.errors import Dial9Error
from ..audio.player import AbstractMediaPlayer, MediaPlayerError
from ..models.credentials import Credentials
from ..models.events import PlaybackEvent
from ..models.playback import PlaybackSession, PlaybackState

logger = logging.getLogger(__name__)


def _clamp(fraction: float) -> float:
    return min(max(fraction, 0.0), 1.0)


class PlaybackController:
    """Owns what is currently playing and keeps its progress in sync.

    All state changes happen on the asyncio loop that called ``play``.
    Position ticks from the media player arrive on the player's own thread
    and are marshalled back onto that loop before they touch the session.

    Each session carries a generation number. A fetch that completes after
    its session was stopped or replaced sees a different generation and is
    dropped without touching the state.
    """

    def __init__(self,
                 client: RecordingApiClient,
                 credentials: Credentials,
                 player_factory: Callable[[], AbstractMediaPlayer],
                 progress_interval: float = 0.1,
                 activate_audio_session: Optional[Callable[[], None]] = None,
                 topic: str = "playback.state"):
        """Initialize playback controller.

        Args:
            client: API client used to fetch audio
            credentials: API credentials
            player_factory: Creates a fresh media player for each session
            progress_interval: Seconds between progress updates
            activate_audio_session: Called once before each playback starts
            topic: Pub/sub topic for PlaybackEvent notifications
        """
        self.client = client
        self.credentials = credentials
        self.player_factory = player_factory
        self.progress_interval = progress_interval
        self.activate_audio_session = activate_audio_session
        self.topic = topic

        self._state = PlaybackState.IDLE
        self._session: Optional[PlaybackSession] = None
        self._generation = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def session(self) -> Optional[PlaybackSession]:
        return self._session

    @property
    def playing_id(self) -> Optional[int]:
        """Recording bound to a player (Playing or Scrubbing)."""
        if self._state in (PlaybackState.PLAYING, PlaybackState.SCRUBBING):
            return self._session.recording_id
        return None

    @property
    def loading_id(self) -> Optional[int]:
        if self._state is PlaybackState.LOADING:
            return self._session.recording_id
        return None

    @property
    def progress(self) -> float:
        return self._session.progress if self._session else 0.0

    def snapshot(self, error: Optional[str] = None) -> PlaybackEvent:
        session = self._session
        return PlaybackEvent(
            state=self._state,
            recording_id=session.recording_id if session else None,
            progress=session.progress if session else 0.0,
            is_scrubbing=session.is_scrubbing if session else False,
            error=error,
        )

    def elapsed_seconds(self, total_seconds: float) -> float:
        """Time to display next to the progress bar.

        While scrubbing this follows the gesture; otherwise it is the
        player's own position.
        """
        session = self._session
        if session is None:
            return 0.0
        if session.is_scrubbing:
            return session.progress * total_seconds
        if session.player is None:
            return 0.0
        return session.player.current_time

    async def play(self, recording_id: int) -> bool:
        """Fetch a recording and start playing it.

        Any current session is stopped first.

        Returns:
            True if playback started, False if this request was superseded
            by a later ``play`` or ``stop`` before the audio arrived

        Raises:
            Dial9Error: If the audio could not be fetched
            MediaPlayerError: If the player rejected the audio or could not
                start its output
        """
        self._loop = asyncio.get_running_loop()
        if self._session is not None:
            self._teardown()

        self._generation += 1
        generation = self._generation
        self._session = PlaybackSession(recording_id=recording_id, generation=generation)
        self._set_state(PlaybackState.LOADING)
        logger.info(f"Loading recording {recording_id}")

        try:
            audio = await self.client.fetch_audio(recording_id, self.credentials)
        except Dial9Error as e:
            if generation != self._generation:
                logger.debug(f"Ignoring failure of superseded fetch for {recording_id}: {e}")
                return False
            logger.error(f"Could not load recording {recording_id}: {e}")
            self._session = None
            self._set_state(PlaybackState.IDLE, error=str(e))
            raise
        except asyncio.CancelledError:
            if generation == self._generation:
                self._session = None
                self._set_state(PlaybackState.IDLE)
            raise

        if generation != self._generation:
            logger.debug(f"Discarding audio for superseded recording {recording_id}")
            return False

        self._start_player(audio)
        return True

    async def toggle(self, recording_id: int) -> bool:
        """Play ``recording_id``, or stop it if it is the one playing.

        Returns:
            True if playback of ``recording_id`` started
        """
        session = self._session
        if session is not None and session.recording_id == recording_id:
            if self._state is PlaybackState.LOADING:
                logger.debug(f"Recording {recording_id} is already loading")
                return False
            self.stop()
            return False
        return await self.play(recording_id)

    def stop(self) -> None:
        """Stop the current session; no-op when idle."""
        if self._session is None:
            return
        logger.info(f"Stopping playback of recording {self._session.recording_id}")
        self._teardown()

    def dispose(self) -> None:
        """Release everything; must be called when the owner goes away."""
        if self._session is not None:
            self._teardown()
        self._state = PlaybackState.IDLE
        self._loop = None
        logger.debug("PlaybackController disposed")

    def begin_scrub(self) -> None:
        if self._state is not PlaybackState.PLAYING:
            return
        self._session.is_scrubbing = True
        self._set_state(PlaybackState.SCRUBBING)

    def update_scrub(self, fraction: float) -> None:
        """Move the displayed progress with the gesture, without seeking."""
        if self._state is not PlaybackState.SCRUBBING:
            return
        self._session.progress = _clamp(fraction)
        self._publish()

    def end_scrub(self, fraction: Optional[float] = None) -> None:
        """Finish the gesture with a single seek to ``fraction``."""
        if self._state is not PlaybackState.SCRUBBING:
            return
        session = self._session
        if fraction is not None:
            session.progress = _clamp(fraction)
        self.seek(session.progress)
        session.is_scrubbing = False
        self._set_state(PlaybackState.PLAYING)

    def seek(self, fraction: float) -> bool:
        """Seek to ``fraction`` of the recording.

        Returns:
            False when there is no player or its duration is not known yet
        """
        session = self._session
        if session is None or session.player is None:
            return False

        duration = session.player.duration
        if duration is None or not math.isfinite(duration) or duration <= 0:
            logger.debug("Seek ignored: duration unknown")
            return False

        target = _clamp(fraction) * duration
        session.player.seek(target)
        logger.debug(f"Seek to {target:.2f}s of {duration:.2f}s")
        return True

    def _start_player(self, audio: bytes) -> None:
        session = self._session
        if self.activate_audio_session is not None:
            self.activate_audio_session()

        player = self.player_factory()
        session.player = player
        try:
            player.load(audio)
            session.observer_token = player.add_periodic_observer(
                self.progress_interval, self._make_observer(session.generation))
            player.play()
        except (MediaPlayerError, OSError) as e:
            logger.error(f"Failed to play audio: {e}")
            self._generation += 1
            self._session = None
            if session.observer_token is not None:
                player.remove_periodic_observer(session.observer_token)
            player.release()
            self._set_state(PlaybackState.IDLE, error=str(e))
            raise

        self._set_state(PlaybackState.PLAYING)
        logger.info(f"Playing recording {session.recording_id}")

    def _make_observer(self, generation: int) -> Callable[[float], None]:
        loop = self._loop

        def observer(current_time: float) -> None:
            loop.call_soon_threadsafe(self._on_time_update, generation, current_time)

        return observer

    def _on_time_update(self, generation: int, current_time: float) -> None:
        session = self._session
        if session is None or session.generation != generation:
            return
        if self._state is not PlaybackState.PLAYING:
            return

        duration = session.player.duration
        if duration is None or not math.isfinite(duration) or duration <= 0:
            return

        session.progress = _clamp(current_time / duration)
        self._publish()

    def _teardown(self) -> None:
        """Stop semantics: release the player, then Stopped -> Idle."""
        session = self._session
        self._generation += 1
        self._session = None

        player = session.player
        if player is not None:
            if session.observer_token is not None:
                player.remove_periodic_observer(session.observer_token)
            player.pause()
            # Synchronous on the loop; bounded by one output chunk
            player.release()

        self._set_state(PlaybackState.STOPPED, recording_id=session.recording_id)
        self._set_state(PlaybackState.IDLE)

    def _set_state(self, state: PlaybackState, error: Optional[str] = None,
                   recording_id: Optional[int] = None) -> None:
        self._state = state
        event = self.snapshot(error=error)
        if recording_id is not None:
            event.recording_id = recording_id
        pub.sendMessage(self.topic, event=event)

    def _publish(self) -> None:
        pub.sendMessage(self.topic, event=self.snapshot())
