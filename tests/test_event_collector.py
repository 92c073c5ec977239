"""Unit tests for EventCollector."""
import logging
from unittest.mock import Mock, call, patch

import pytest

from backend.errors import ConnectivityError
from processor.event_collector import EventCollector, sort_records
from processor.event_normalizer import EventNormalizer
from processor.models import RawEventListing


@pytest.fixture
def mock_client():
    """Client mock with a successful probe and two classes."""
    client = Mock()
    client.probe.return_value = True
    client.list_events.side_effect = [
        [RawEventListing(id="1"), RawEventListing(id="2")],
        [RawEventListing(id="3")]
    ]
    client.fetch_event_detail.side_effect = lambda event_id: {
        "1": {"title": "Spaet", "dates": {"data": [{"dateStart": 1751360400}]}},
        "2": None,
        "3": {"title": "Ohne Datum"}
    }[event_id]
    return client


@pytest.fixture
def collector(mock_client):
    return EventCollector(
        client=mock_client,
        normalizer=EventNormalizer(),
        folder_id="1158",
        class_ids=["TO", "EV"],
        delay=0.1
    )


class TestEventCollector:
    """Test cases for EventCollector class."""

    @patch('processor.event_collector.time.sleep')
    def test_collect_runs_list_then_fetch(self, mock_sleep, collector, mock_client):
        """Test the full list-then-fetch loop."""
        records = collector.collect()

        mock_client.probe.assert_called_once()
        assert mock_client.list_events.call_args_list == [
            call("1158", "TO"),
            call("1158", "EV")
        ]
        assert mock_client.fetch_event_detail.call_args_list == [
            call("1"), call("2"), call("3")
        ]

        # Event 2 failed, the event without a start sorts first
        assert [record["ID"] for record in records] == ["3", "1"]

        # Pause between consecutive fetches only
        assert mock_sleep.call_args_list == [call(0.1), call(0.1)]

        assert collector.summary.listed == 3
        assert collector.summary.fetched == 2
        assert collector.summary.skipped == 1
        assert collector.summary.records == 2
        assert collector.summary.errors == ["Event 2 could not be fetched"]

    def test_collect_aborts_when_probe_fails(self, collector, mock_client):
        """Test that a failed probe aborts before any listing."""
        mock_client.probe.return_value = False

        with pytest.raises(ConnectivityError):
            collector.collect()

        mock_client.list_events.assert_not_called()
        mock_client.fetch_event_detail.assert_not_called()

    @patch('processor.event_collector.time.sleep')
    def test_failed_listing_does_not_stop_run(self, mock_sleep, collector, mock_client):
        """Test that a class with no listings contributes nothing."""
        mock_client.list_events.side_effect = [[], [RawEventListing(id="3")]]

        records = collector.collect()

        assert [record["ID"] for record in records] == ["3"]
        mock_sleep.assert_not_called()

    @patch('processor.event_collector.time.sleep')
    def test_duplicate_ids_are_fetched_twice(self, mock_sleep, collector, mock_client):
        """Test that an id listed in both classes is reported twice."""
        mock_client.list_events.side_effect = [
            [RawEventListing(id="3")],
            [RawEventListing(id="3")]
        ]

        records = collector.collect()

        assert [record["ID"] for record in records] == ["3", "3"]
        assert mock_client.fetch_event_detail.call_count == 2

    @patch('processor.event_collector.time.sleep')
    def test_normalizer_error_skips_item(self, mock_sleep, mock_client, caplog):
        """Test that a failing normalization skips only that event."""
        normalizer = Mock()
        normalizer.normalize.side_effect = [
            RuntimeError("boom"),
            None,
            {"ID": "3"}
        ]
        mock_client.fetch_event_detail.side_effect = None
        mock_client.fetch_event_detail.return_value = {"title": "x"}

        collector = EventCollector(mock_client, normalizer, "1158", ["TO", "EV"], delay=0)
        with caplog.at_level(logging.WARNING):
            records = collector.collect()

        assert records == [{"ID": "3"}]
        assert collector.summary.skipped == 1
        assert any("Failed to normalize event 1" in r.message for r in caplog.records)


class TestSortRecords:
    """Test cases for sort_records."""

    def test_sort_by_start_missing_first(self):
        """Test ascending order with records lacking a start first."""
        records = [
            {"ID": "a", "Termin_Start": "2025-06-02"},
            {"ID": "b", "Termin_Start": "2025-06-01 09:30"},
            {"ID": "c"},
            {"ID": "d", "Termin_Start": "2025-06-01"}
        ]

        assert [r["ID"] for r in sort_records(records)] == ["c", "d", "b", "a"]

    def test_sort_is_stable(self):
        """Test that equal starts keep their order."""
        records = [
            {"ID": "x", "Termin_Start": "2025-06-01"},
            {"ID": "y", "Termin_Start": "2025-06-01"}
        ]

        assert [r["ID"] for r in sort_records(records)] == ["x", "y"]
