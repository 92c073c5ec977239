"""Client for the backend's administrative JSON API."""
import logging
import time
from typing import Any, Dict, List, Optional

import requests

from backend.errors import ListingError
from processor.models import RawEventListing

logger = logging.getLogger(__name__)


class AdminApiClient:
    """Authenticated wrapper around the admin endpoints used for the export."""

    UNLOCK_PATH = "/admin/element/unlock-element"
    GRID_PATH = "/admin/object/grid-proxy"
    DETAIL_PATH = "/admin/object/get"
    CSRF_HEADER = "X-pimcore-csrf-token"

    # The grid endpoint has no "fetch all" switch
    PAGE_LIMIT = 999999

    def __init__(
        self,
        base_url: str,
        cookie: str,
        csrf_token: str,
        probe_element_id: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the admin API client.

        Args:
            base_url: Backend origin, e.g. "https://cms.example.org"
            cookie: Session cookie header value copied from the browser
            csrf_token: Anti-forgery token of the same browser session
            probe_element_id: Stable object id used for the connectivity probe
            timeout: HTTP request timeout in seconds (default: 30)
            session: Optional preconfigured requests session
        """
        self.base_url = base_url.rstrip('/')
        self.csrf_token = csrf_token
        self.probe_element_id = probe_element_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers['Cookie'] = cookie

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _write_headers(self) -> Dict[str, str]:
        """Headers the backend checks on state-changing requests."""
        return {
            self.CSRF_HEADER: self.csrf_token,
            'X-Requested-With': 'XMLHttpRequest',
            'Referer': f"{self.base_url}/admin/"
        }

    @staticmethod
    def _cache_buster() -> int:
        return int(time.time() * 1000)

    def probe(self) -> bool:
        """
        Check that the session cookie and token are accepted.

        Issues an unlock call against a known object, which requires both
        credentials. Never raises.

        Returns:
            True if the backend reported success, False otherwise
        """
        logger.info("Probing backend connectivity")
        ok = self.unlock_element(self.probe_element_id)
        if ok:
            logger.info("Backend connectivity probe succeeded")
        else:
            logger.error("Backend connectivity probe failed")
        return ok

    def unlock_element(self, element_id: str, element_type: str = 'object') -> bool:
        """
        Release the edit lock on an element.

        Args:
            element_id: Backend element id
            element_type: "object" or "document"

        Returns:
            True if the transport succeeded and the body reports success
        """
        try:
            response = self.session.put(
                self._url(self.UNLOCK_PATH),
                data={'id': element_id, 'type': element_type},
                headers=self._write_headers(),
                timeout=self.timeout
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Unlock of {element_type} {element_id} failed: {e}")
            return False

        return isinstance(payload, dict) and bool(payload.get('success'))

    def list_all(self, folder_id: str, class_id: str) -> List[Dict[str, Any]]:
        """
        Fetch every grid row of one class inside a folder.

        A single page far larger than any realistic result stands in for
        pagination.

        Args:
            folder_id: Folder containing the objects
            class_id: Class identifier selecting the content type

        Returns:
            Raw grid rows as returned by the backend

        Raises:
            ListingError: If the request fails or the body is not usable
        """
        params = {
            'xaction': 'read',
            'classId': class_id,
            'folderId': folder_id,
            '_dc': self._cache_buster()
        }
        form = {
            'fields[]': 'id',
            'page': 1,
            'start': 0,
            'limit': self.PAGE_LIMIT
        }

        try:
            response = self.session.post(
                self._url(self.GRID_PATH),
                params=params,
                data=form,
                headers=self._write_headers(),
                timeout=self.timeout
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ListingError(f"Listing of class {class_id} failed: {e}") from e

        if not isinstance(payload, dict) or payload.get('success') is False:
            raise ListingError(f"Listing of class {class_id} was not successful")

        rows = payload.get('data')
        if not isinstance(rows, list):
            raise ListingError(f"Listing of class {class_id} returned no data")
        return rows

    def list_events(self, folder_id: str, class_id: str) -> List[RawEventListing]:
        """
        List the published events of one class.

        Args:
            folder_id: Folder containing the events
            class_id: Class identifier of the event type

        Returns:
            Published listings in backend order; empty if the listing failed
        """
        try:
            rows = self.list_all(folder_id, class_id)
        except ListingError as e:
            logger.error(str(e))
            return []

        listings = [
            RawEventListing.from_row(row)
            for row in rows
            if isinstance(row, dict) and row.get('published') is True
            and row.get('id') is not None
        ]
        logger.info(
            f"Class {class_id}: {len(listings)} published of {len(rows)} listed"
        )
        return listings

    def fetch_event_detail(
        self,
        event_id: str,
        skip_unlock: bool = False
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch the full detail object of one event.

        If the object is edit-locked, one unlock is attempted and the fetch
        repeated once with unlocking disabled.

        Args:
            event_id: Backend object id
            skip_unlock: Do not try to release an edit lock

        Returns:
            The object's "data" mapping, or None if it could not be fetched
        """
        try:
            response = self.session.get(
                self._url(self.DETAIL_PATH),
                params={'_dc': self._cache_buster(), 'id': event_id},
                timeout=self.timeout
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Failed to fetch event {event_id}: {e}")
            return None

        if not isinstance(payload, dict):
            logger.warning(f"Unexpected response for event {event_id}")
            return None

        if payload.get('editlock') is not None:
            if skip_unlock:
                logger.warning(f"Event {event_id} is still locked, skipping")
                return None

            logger.info(f"Event {event_id} is locked, trying to unlock")
            if not self.unlock_element(event_id):
                logger.warning(f"Could not unlock event {event_id}, skipping")
                return None
            return self.fetch_event_detail(event_id, skip_unlock=True)

        data = payload.get('data')
        if not isinstance(data, dict):
            logger.warning(f"Event {event_id} has no data")
            return None
        return data
