"""In-memory catalog of recordings returned by a search."""

import logging
from typing import Iterable, Iterator, List, Optional

from ..models.recording import RecordingRecord

logger = logging.getLogger(__name__)


class RecordingCatalog:
    """Ordered recordings, newest first.

    Identifiers are expected to be unique; ``populate`` trusts the API on
    that and does not deduplicate.
    """

    def __init__(self, records: Optional[Iterable[RecordingRecord]] = None):
        self._records: List[RecordingRecord] = []
        if records is not None:
            self.populate(records)

    def populate(self, records: Iterable[RecordingRecord]) -> None:
        """Replace the contents, sorted descending by creation timestamp."""
        # The timestamp format is fixed-width and zero-padded, so string
        # order is chronological order.
        self._records = sorted(records, key=lambda r: r.timestamp, reverse=True)
        logger.debug(f"Catalog populated with {len(self._records)} recording(s)")

    def remove(self, recording_id: int) -> bool:
        """Remove the recording with ``recording_id``.

        Returns:
            True if a record was removed, False if it was not present
        """
        for index, record in enumerate(self._records):
            if record.id == recording_id:
                del self._records[index]
                logger.debug(f"Removed recording {recording_id} from catalog")
                return True
        return False

    def find(self, recording_id: int) -> Optional[RecordingRecord]:
        for record in self._records:
            if record.id == recording_id:
                return record
        return None

    def clear(self) -> None:
        self._records = []

    @property
    def records(self) -> List[RecordingRecord]:
        return self._records.copy()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[RecordingRecord]:
        return iter(self._records.copy())

    def __contains__(self, recording_id: object) -> bool:
        return any(record.id == recording_id for record in self._records)
