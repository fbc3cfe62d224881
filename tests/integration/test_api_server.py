"""Integration tests against a local aiohttp server speaking the Dial9 API."""

import base64
import socket
import wave
from datetime import date

import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from dial9.api.client import RecordingApiClient
from dial9.api.errors import ApiStatusError, TransportError
from dial9.services.history_service import CallHistoryService
from dial9.storage.catalog import RecordingCatalog
from dial9.storage.export import AudioExporter


class FakeDial9Api:
    """Minimal in-process stand-in for the call log endpoints."""

    def __init__(self, recordings, pcm):
        self.recordings = {r["id"]: r for r in recordings}
        self.pcm = pcm
        self.requests = []

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/api/v2/logs/search", self.search)
        app.router.add_post("/api/v2/logs/recording", self.recording)
        app.router.add_post("/api/v2/logs/delete_recording", self.delete)
        return app

    async def _read(self, request):
        payload = await request.json()
        self.requests.append({
            "path": request.path,
            "token": request.headers.get("X-Auth-Token"),
            "secret": request.headers.get("X-Auth-Secret"),
            "payload": payload,
        })
        return payload

    async def search(self, request):
        payload = await self._read(request)
        day = payload["start_at"][:10]
        data = [r for r in self.recordings.values() if r["timestamp"].startswith(day)]
        return web.json_response({"data": data})

    async def recording(self, request):
        payload = await self._read(request)
        if payload["id"] not in self.recordings:
            return web.json_response({"status": "error"})
        encoded = base64.b64encode(self.pcm).decode("ascii")
        # Wrap lines like the real server does
        wrapped = "\n".join(encoded[i:i + 76] for i in range(0, len(encoded), 76))
        return web.json_response({"status": "success", "data": {"file": wrapped}})

    async def delete(self, request):
        payload = await self._read(request)
        if self.recordings.pop(payload["id"], None) is None:
            return web.json_response({"status": "error"})
        return web.json_response({"status": "success"})


@pytest.fixture
def api(recording_json, sample_pcm):
    return FakeDial9Api(
        [
            recording_json(101, "2024-05-01 08:15:00 +0100"),
            recording_json(102, "2024-05-01 16:40:00 +0100", call_type="outgoing"),
            recording_json(103, "2024-05-02 10:00:00 +0100"),
        ],
        sample_pcm,
    )


@pytest_asyncio.fixture
async def base_url(api):
    server = test_utils.TestServer(api.app())
    await server.start_server()
    yield f"http://{server.host}:{server.port}"
    await server.close()


@pytest.fixture
def service(base_url, credentials, temp_data_dir):
    client = RecordingApiClient(base_url=base_url, timeout_seconds=5)
    return CallHistoryService(
        client=client,
        catalog=RecordingCatalog(),
        credentials=credentials,
        exporter=AudioExporter(temp_data_dir),
    )


def unused_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.mark.integration
class TestAgainstLocalServer:
    """End-to-end flows over real HTTP."""

    @pytest.mark.asyncio
    async def test_search_sends_credentials(self, service, api):
        result = await service.search_day(date(2024, 5, 1))

        assert result["success"] is True
        assert [r.id for r in service.catalog] == [102, 101]
        request = api.requests[0]
        assert request["token"] == "token-123"
        assert request["secret"] == "secret-456"
        assert request["payload"] == {
            "start_at": "2024-05-01 00:00:00",
            "end_at": "2024-05-02 00:00:00",
        }

    @pytest.mark.asyncio
    async def test_empty_day(self, service):
        result = await service.search_day(date(2024, 6, 1))

        assert result["success"] is True
        assert result["notice"] is not None
        assert len(service.catalog) == 0

    @pytest.mark.asyncio
    async def test_download_writes_playable_wav(self, service, sample_pcm):
        result = await service.download(101)

        assert result["success"] is True
        with wave.open(result["path"], "rb") as wf:
            assert wf.getframerate() == 8000
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.readframes(wf.getnframes()) == sample_pcm

    @pytest.mark.asyncio
    async def test_fetch_unknown_recording(self, base_url, credentials):
        client = RecordingApiClient(base_url=base_url)

        with pytest.raises(ApiStatusError):
            await client.fetch_audio(999, credentials)

    @pytest.mark.asyncio
    async def test_delete_then_search(self, service):
        await service.search_day(date(2024, 5, 1))

        result = await service.delete(101)
        assert result["success"] is True
        assert [r.id for r in service.catalog] == [102]

        again = await service.delete(101)
        assert again["success"] is False
        assert [r.id for r in service.catalog] == [102]

        await service.search_day(date(2024, 5, 1))
        assert [r.id for r in service.catalog] == [102]

    @pytest.mark.asyncio
    async def test_unreachable_server(self, credentials):
        client = RecordingApiClient(base_url=f"http://127.0.0.1:{unused_port()}", timeout_seconds=2)

        with pytest.raises(TransportError):
            await client.search_day(date(2024, 5, 1), credentials)
