"""Mapping of backend event details to flat report records."""
import logging
from datetime import datetime, time
from typing import Any, Dict, List, Optional, Tuple

from processor.html_sanitizer import strip_html
from processor.models import ReportRecord

logger = logging.getLogger(__name__)


class EventNormalizer:
    """Turns one raw event detail into one report record."""

    DATE_FORMAT = '%Y-%m-%d'
    DATETIME_FORMAT = '%Y-%m-%d %H:%M'

    def normalize(
        self,
        event_id: str,
        detail: Optional[Dict[str, Any]]
    ) -> Optional[ReportRecord]:
        """
        Build the report record for one event.

        Fields whose source data is missing or malformed are left out of
        the record rather than filled with placeholders.

        Args:
            event_id: Id of the listing the detail was fetched for
            detail: The detail's "data" mapping, or None if the fetch failed

        Returns:
            Report record, or None if there was no detail to normalize
        """
        if detail is None:
            return None

        record: ReportRecord = {'ID': str(event_id)}

        group = self._first_group(detail.get('assignedGroups'))
        if group is not None:
            record['Gruppe'] = group

        record['Titel'] = detail.get('title')

        leaders = self._leader_names(detail.get('leaders'))
        if leaders is not None:
            record['Tourenleitung'] = leaders

        locations = detail.get('locations')
        record['Veranstaltungsort'] = (
            locations.get('name') if isinstance(locations, dict) else None
        )

        record['Treffpunkt'] = self._plain_text(detail.get('meetingPoint'))

        start, end = self._format_dates(detail.get('dates'))
        if start is not None:
            record['Termin_Start'] = start
            if end is not None:
                record['Termin_Ende'] = end

        description = detail.get('description')
        record['Beschreibung'] = self._plain_text(description)
        record['Beschreibung_HTML'] = description

        return record

    @staticmethod
    def _last_segment(path: Any) -> Optional[str]:
        if not isinstance(path, str):
            return None
        return path.split('/')[-1]

    def _first_group(self, groups: Any) -> Optional[str]:
        if not isinstance(groups, list) or not groups:
            return None
        first = groups[0]
        if not isinstance(first, dict):
            return None
        return self._last_segment(first.get('fullpath'))

    def _leader_names(self, leaders: Any) -> Optional[str]:
        if not isinstance(leaders, list) or not leaders:
            return None
        names = [
            self._last_segment(leader.get('fullpath'))
            for leader in leaders
            if isinstance(leader, dict)
        ]
        names = [name for name in names if name is not None]
        if not names:
            return None
        return '; '.join(names)

    @staticmethod
    def _plain_text(value: Any) -> Optional[str]:
        if value is not None and not isinstance(value, str):
            return None
        return strip_html(value)

    def _format_dates(self, dates: Any) -> Tuple[Optional[str], Optional[str]]:
        """
        Format the first date range in local time.

        An event starting at local midnight counts as all-day and both ends
        are rendered date-only. The outcome depends on the timezone of the
        machine running the export.

        Args:
            dates: The detail's "dates" block ({"data": [{dateStart, dateEnd}]})

        Returns:
            Tuple of (start, end); start is None if there is no usable start
        """
        if not isinstance(dates, dict):
            return None, None
        entries: List[Any] = dates.get('data') or []
        if not isinstance(entries, list) or not entries:
            return None, None
        first = entries[0]
        if not isinstance(first, dict):
            return None, None

        start = self._to_local(first.get('dateStart'))
        if start is None:
            return None, None
        end = self._to_local(first.get('dateEnd'))

        fmt = self.DATE_FORMAT if start.time() == time(0, 0, 0) else self.DATETIME_FORMAT
        return (
            start.strftime(fmt),
            end.strftime(fmt) if end is not None else None
        )

    @staticmethod
    def _to_local(timestamp: Any) -> Optional[datetime]:
        """Convert an epoch-seconds value to a naive local datetime."""
        if timestamp is None or timestamp == '' or isinstance(timestamp, bool):
            return None
        try:
            return datetime.fromtimestamp(float(timestamp))
        except (TypeError, ValueError, OverflowError, OSError) as e:
            logger.debug(f"Ignoring invalid timestamp {timestamp!r}: {e}")
            return None
