"""Call history service: search, export and deletion on top of the API client."""

import logging
from datetime import date
from typing import Any, Dict, Optional

from pubsub import pub

from ..api.client import RecordingApiClient
from ..api.errors import Dial9Error, DecodeError, EmptyResponseError, TransportError
from ..models.credentials import Credentials
from ..models.events import StatusEvent
from ..models.recording import EmptyResultNotice
from ..storage.catalog import RecordingCatalog
from ..storage.export import AudioExporter

logger = logging.getLogger(__name__)


class CallHistoryService:
    """Drives the search/download/delete workflow and keeps the catalog current."""

    def __init__(self,
                 client: RecordingApiClient,
                 catalog: RecordingCatalog,
                 credentials: Credentials,
                 exporter: Optional[AudioExporter] = None,
                 topic: str = "history.status"):
        """Initialize call history service.

        Args:
            client: API client
            catalog: Catalog that search results are loaded into
            credentials: API credentials
            exporter: Destination for downloaded recordings
            topic: Pub/sub topic for StatusEvent notifications
        """
        self.client = client
        self.catalog = catalog
        self.credentials = credentials
        self.exporter = exporter
        self.topic = topic

        self.status_message = "Enter your details and fetch recordings."
        self.is_searching = False
        self.fetching_id: Optional[int] = None

    async def search_day(self, day: date) -> Dict[str, Any]:
        """Search one calendar day and load the results into the catalog.

        Args:
            day: Local calendar day to search

        Returns:
            Result dictionary with success status, records and notice
        """
        self.is_searching = True
        self._set_status("Fetching recordings list...")
        try:
            records = await self.client.search_day(day, self.credentials)
        except TransportError as e:
            return self._failure(f"Network Error: {e}", e)
        except EmptyResponseError as e:
            return self._failure(f"Error: {e}", e)
        except DecodeError as e:
            return self._failure(f"Error decoding list: {e}", e)
        finally:
            self.is_searching = False

        if not records:
            notice = EmptyResultNotice(day=day)
            self._set_status(notice.message)
            return {
                "success": True,
                "count": 0,
                "records": [],
                "notice": notice,
                "message": notice.message,
            }

        self.catalog.populate(records)
        message = f"Success! Found {len(self.catalog)} recording(s)."
        self._set_status(message)
        return {
            "success": True,
            "count": len(self.catalog),
            "records": self.catalog.records,
            "notice": None,
            "message": message,
        }

    async def download(self, recording_id: int) -> Dict[str, Any]:
        """Fetch a recording and save it through the exporter.

        Returns:
            Result dictionary with the saved path or the error
        """
        if self.exporter is None:
            raise RuntimeError("No exporter configured for downloads")

        self.fetching_id = recording_id
        self._set_status(f"Fetching data for ID {recording_id}...")
        try:
            audio = await self.client.fetch_audio(recording_id, self.credentials)
        except Dial9Error as e:
            return self._failure(str(e), e)
        finally:
            self.fetching_id = None

        filename = self.exporter.suggested_filename(recording_id)
        try:
            path = self.exporter.save(audio, filename)
        except OSError as e:
            return self._failure(f"Failed to save: {e}", e)

        self._set_status(f"Saved to {path.name}")
        return {
            "success": True,
            "path": str(path),
            "size_bytes": len(audio),
            "message": self.status_message,
        }

    async def delete(self, recording_id: int) -> Dict[str, Any]:
        """Delete a recording on the server, then drop it from the catalog.

        The catalog is only touched after the server confirms.
        """
        self._set_status(f"Deleting recording {recording_id}...")
        try:
            await self.client.delete_recording(recording_id, self.credentials)
        except Dial9Error as e:
            return self._failure(f"Delete failed: {e}", e)

        self.catalog.remove(recording_id)
        self._set_status(f"Recording {recording_id} deleted.")
        return {
            "success": True,
            "recording_id": recording_id,
            "message": self.status_message,
        }

    def clear(self) -> None:
        """Forget the current results, e.g. after the search date changed."""
        self.catalog.clear()
        self._set_status("Date changed. Press fetch to search again.")

    def _failure(self, message: str, error: Exception) -> Dict[str, Any]:
        logger.error(message)
        self._set_status(message)
        return {
            "success": False,
            "error": str(error),
            "error_type": error.__class__.__name__,
            "message": message,
        }

    def _set_status(self, message: str) -> None:
        self.status_message = message
        pub.sendMessage(self.topic, event=StatusEvent(message=message))
