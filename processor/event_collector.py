"""Collection of all report records from the backend."""
import logging
import time
from typing import List, Sequence

from backend.admin_api import AdminApiClient
from backend.errors import ConnectivityError
from processor.event_normalizer import EventNormalizer
from processor.models import ExportSummary, RawEventListing, ReportRecord

logger = logging.getLogger(__name__)


def sort_records(records: List[ReportRecord]) -> List[ReportRecord]:
    """Sort records by start, records without a start first."""
    return sorted(records, key=lambda record: record.get('Termin_Start') or '')


class EventCollector:
    """Runs the list-then-fetch loop over all configured event classes."""

    def __init__(
        self,
        client: AdminApiClient,
        normalizer: EventNormalizer,
        folder_id: str,
        class_ids: Sequence[str],
        delay: float = 0.1
    ):
        """
        Initialize the collector.

        Args:
            client: Authenticated admin API client
            normalizer: Maps event details to report records
            folder_id: Folder holding the events
            class_ids: Event classes to list, in order
            delay: Pause between detail fetches in seconds (default: 0.1)
        """
        self.client = client
        self.normalizer = normalizer
        self.folder_id = folder_id
        self.class_ids = list(class_ids)
        self.delay = delay
        self.summary = ExportSummary()

    def collect(self) -> List[ReportRecord]:
        """
        Collect and sort the report records of all events.

        Returns:
            Records sorted ascending by start

        Raises:
            ConnectivityError: If the backend rejects the session
        """
        self.summary = ExportSummary()

        if not self.client.probe():
            raise ConnectivityError(
                "Backend rejected the connectivity probe; "
                "session cookie or token are probably expired"
            )

        listings: List[RawEventListing] = []
        for class_id in self.class_ids:
            class_listings = self.client.list_events(self.folder_id, class_id)
            if not class_listings:
                logger.warning(f"No events listed for class {class_id}")
            listings.extend(class_listings)
        self.summary.listed = len(listings)
        logger.info(f"Fetching details for {len(listings)} events")

        records: List[ReportRecord] = []
        for index, listing in enumerate(listings):
            if index and self.delay > 0:
                time.sleep(self.delay)

            detail = self.client.fetch_event_detail(listing.id)
            if detail is None:
                self.summary.skipped += 1
                self.summary.errors.append(f"Event {listing.id} could not be fetched")
                continue
            self.summary.fetched += 1

            try:
                record = self.normalizer.normalize(listing.id, detail)
            except Exception as e:
                logger.warning(f"Failed to normalize event {listing.id}: {e}")
                self.summary.skipped += 1
                self.summary.errors.append(f"Event {listing.id} could not be normalized")
                continue

            if record:
                records.append(record)

        self.summary.records = len(records)
        logger.info(
            f"Collected {len(records)} records out of {len(listings)} listed events "
            f"({self.summary.skipped} skipped)"
        )
        return sort_records(records)
