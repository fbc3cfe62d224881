"""Request/response client for the Dial9 call log API."""

import base64
import binascii
import json
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ValidationError

from ..audio.wav import wrap_pcm
from ..models.credentials import Credentials
from ..models.recording import RecordingRecord
from .errors import ApiStatusError, AudioCorruptError, DecodeError, EmptyResponseError
from .schemas import AudioResponse, SearchResponse, StatusResponse
from .transport import AiohttpTransport, HttpTransport

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://connectapi.dial9.co.uk"
REQUEST_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
SUCCESS_STATUS = "success"

# The server wraps its base64 payloads with stray whitespace
_BASE64_WHITESPACE = str.maketrans("", "", " \t\n\r")


def day_range(day: date) -> Tuple[datetime, datetime]:
    """Local midnight of ``day`` and of the following calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def format_request_time(moment: datetime) -> str:
    """Render a datetime in local wall-clock time for request bodies."""
    if moment.tzinfo is not None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment.strftime(REQUEST_TIME_FORMAT)


class RecordingApiClient:
    """Stateless client for searching, fetching and deleting call recordings.

    Every operation is a single POST exchange; nothing is retried or queued.
    Failures are raised as subclasses of ``Dial9Error``.
    """

    SEARCH_PATH = "/api/v2/logs/search"
    RECORDING_PATH = "/api/v2/logs/recording"
    DELETE_PATH = "/api/v2/logs/delete_recording"

    def __init__(self,
                 base_url: str = DEFAULT_BASE_URL,
                 transport: Optional[HttpTransport] = None,
                 timeout_seconds: float = 30.0):
        """Initialize API client.

        Args:
            base_url: Scheme and host of the API, without trailing path
            transport: HTTP transport; defaults to an aiohttp transport
            timeout_seconds: Total request timeout for the default transport
        """
        self.base_url = base_url.rstrip("/")
        self.transport = transport or AiohttpTransport(timeout_seconds=timeout_seconds)
        logger.info(f"RecordingApiClient initialized for {self.base_url}")

    async def search(self, start_at: datetime, end_at: datetime,
                     credentials: Credentials) -> List[RecordingRecord]:
        """List calls between two instants.

        Args:
            start_at: Inclusive lower bound
            end_at: Upper bound
            credentials: API credentials

        Returns:
            Records in server order; empty when the response has no ``data``

        Raises:
            TransportError: If the server is unreachable
            DecodeError: If the body is not the expected JSON
        """
        payload = {
            "start_at": format_request_time(start_at),
            "end_at": format_request_time(end_at),
        }
        body = await self._post(self.SEARCH_PATH, credentials, payload)
        response = self._validate(SearchResponse, body, "search")

        records = [item.to_record() for item in response.data or []]
        logger.info(f"Search {payload['start_at']} .. {payload['end_at']} returned {len(records)} recording(s)")
        return records

    async def search_day(self, day: date, credentials: Credentials) -> List[RecordingRecord]:
        """List calls made on one local calendar day."""
        start_at, end_at = day_range(day)
        return await self.search(start_at, end_at, credentials)

    async def fetch_audio(self, recording_id: int, credentials: Credentials) -> bytes:
        """Download a recording and return it as a playable WAV file.

        The server sends headerless 8 kHz mono 16-bit PCM and never says so;
        that profile is assumed for every recording.

        Raises:
            TransportError: If the server is unreachable
            DecodeError: If the body is not the expected JSON
            ApiStatusError: If the server reports a non-success status
            AudioCorruptError: If the payload is missing or not base64
        """
        body = await self._post(self.RECORDING_PATH, credentials, {"id": recording_id})
        status = self._validate(StatusResponse, body, "recording").status
        if status != SUCCESS_STATUS:
            raise ApiStatusError(f"API status was not 'success' (got '{status}')", status)

        # An error reply may carry anything in ``data``; its shape only matters on success
        response = self._validate(AudioResponse, body, "recording")
        if response.data is None or response.data.file is None:
            raise AudioCorruptError("Audio content was corrupt or missing.")

        pcm = self._decode_payload(response.data.file)
        logger.info(f"Fetched recording {recording_id}: {len(pcm)} bytes of PCM")
        return wrap_pcm(pcm)

    async def delete_recording(self, recording_id: int, credentials: Credentials) -> bool:
        """Delete a recording on the server.

        Returns:
            True once the server confirms the deletion

        Raises:
            TransportError: If the server is unreachable
            DecodeError: If the body is missing or not the expected JSON
            ApiStatusError: If the server reports a non-success status
        """
        body = await self._post(self.DELETE_PATH, credentials, {"id": recording_id})
        response = self._validate(StatusResponse, body, "delete")

        if response.status != SUCCESS_STATUS:
            raise ApiStatusError("Server returned an error.", response.status)

        logger.info(f"Deleted recording {recording_id}")
        return True

    def _headers(self, credentials: Credentials) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Auth-Token": credentials.auth_token,
            "X-Auth-Secret": credentials.auth_secret,
        }

    async def _post(self, path: str, credentials: Credentials, payload: Dict[str, Any]) -> Any:
        """Send one request and parse the JSON body."""
        url = f"{self.base_url}{path}"
        logger.debug(f"POST {url} {payload}")
        body = await self.transport.post(url, self._headers(credentials), payload)

        if not body:
            raise EmptyResponseError("No data received.")
        try:
            return json.loads(body)
        except ValueError as e:
            raise DecodeError(f"Response from {path} is not valid JSON: {e}") from e

    @staticmethod
    def _validate(model: type, body: Any, operation: str) -> BaseModel:
        try:
            return model.model_validate(body)
        except ValidationError as e:
            raise DecodeError(f"Unexpected {operation} response: {e}") from e

    @staticmethod
    def _decode_payload(encoded: str) -> bytes:
        sanitized = encoded.translate(_BASE64_WHITESPACE)
        try:
            return base64.b64decode(sanitized, validate=True)
        except (binascii.Error, ValueError) as e:
            raise AudioCorruptError("Audio content was corrupt or missing.") from e
