"""Unit tests for the rich terminal view."""

import asyncio
import io

import pytest
from rich.console import Console

from dial9.services.playback import PlaybackController
from dial9.storage.catalog import RecordingCatalog
from dial9.ui import RecordingsView, time_string


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def view(output):
    return RecordingsView(console=Console(file=output, width=120, force_terminal=False))


@pytest.mark.unit
class TestTimeString:
    """Test cases for time_string."""

    @pytest.mark.parametrize("seconds,expected", [
        (0, "00:00"),
        (59.9, "00:59"),
        (61, "01:01"),
        (float("nan"), "00:00"),
        (float("inf"), "00:00"),
    ])
    def test_format(self, seconds, expected):
        assert time_string(seconds) == expected


@pytest.mark.unit
class TestRecordingsView:
    """Test cases for RecordingsView."""

    def test_show_recordings(self, view, output, make_recording):
        catalog = RecordingCatalog([
            make_recording(11, source_name="Alice", duration=125),
            make_recording(12, source_name=None, call_type="outgoing", has_recording=False),
        ])

        view.show_recordings(catalog)

        text = output.getvalue()
        assert "Recordings (2)" in text
        assert "Alice" in text
        assert "Unknown" in text
        assert "02:05" in text
        assert "11" in text and "12" in text

    def test_show_status(self, view, output):
        view.show_status("Recording 4 deleted.")

        assert "Recording 4 deleted." in output.getvalue()

    @pytest.mark.asyncio
    async def test_follow_playback_ends_with_audio(self, view, immediate_client, credentials,
                                                   player_factory, make_recording):
        controller = PlaybackController(immediate_client, credentials, player_factory)
        await controller.play(7)
        player_factory.players[0].seek(120.0)

        await asyncio.wait_for(
            view.follow_playback(controller, make_recording(7, duration=120), refresh_seconds=0.01),
            timeout=2.0,
        )

        controller.dispose()

    @pytest.mark.asyncio
    async def test_follow_playback_ends_on_stop(self, view, immediate_client, credentials,
                                                player_factory):
        controller = PlaybackController(immediate_client, credentials, player_factory)
        await controller.play(7)
        asyncio.get_running_loop().call_later(0.05, controller.stop)

        await asyncio.wait_for(view.follow_playback(controller, None, refresh_seconds=0.01),
                               timeout=2.0)

        assert controller.playing_id is None
