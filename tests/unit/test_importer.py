from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
import requests

from eventhub.services.importer import (
    MAXIMUM_EVENTS_TO_DISPLAY_IN_FLASH,
    SourceFetchError,
    fetch_source,
    format_import_summary,
)
from eventhub.utils.settings import refresh_settings


def _events(n):
    return [SimpleNamespace(title=f"Event {i}") for i in range(1, n + 1)]


def test_summary_lists_every_event_under_the_cap():
    message = format_import_summary(_events(2))
    assert message.splitlines() == ["Imported 2 entries:", "- Event 1", "- Event 2"]


def test_summary_caps_listed_events():
    excess = 5
    message = format_import_summary(_events(MAXIMUM_EVENTS_TO_DISPLAY_IN_FLASH + excess))
    lines = message.splitlines()
    assert lines[0] == "Imported 10 entries:"
    assert lines[1:6] == [f"- Event {i}" for i in range(1, 6)]
    assert lines[-1] == f"And {excess} other events."
    assert "Event 6" not in message


def test_summary_at_exact_cap_has_no_remainder_line():
    message = format_import_summary(_events(MAXIMUM_EVENTS_TO_DISPLAY_IN_FLASH))
    assert "other events" not in message


@patch("eventhub.services.importer.requests.get")
def test_fetch_source_sends_configured_headers(mock_get, monkeypatch):
    monkeypatch.setenv("EVENTHUB_IMPORT_USER_AGENT", "test-agent/2")
    monkeypatch.setenv("EVENTHUB_IMPORT_TIMEOUT", "4")
    refresh_settings()
    mock_get.return_value = Mock(text="BEGIN:VCALENDAR", raise_for_status=Mock())

    assert fetch_source("http://example.com/cal.ics") == "BEGIN:VCALENDAR"
    mock_get.assert_called_once_with(
        "http://example.com/cal.ics",
        headers={"User-Agent": "test-agent/2"},
        timeout=4.0,
    )


@patch("eventhub.services.importer.requests.get")
def test_fetch_source_wraps_http_errors(mock_get):
    response = Mock()
    response.raise_for_status.side_effect = requests.HTTPError("404 Client Error: Not Found")
    mock_get.return_value = response

    with pytest.raises(SourceFetchError, match="404"):
        fetch_source("http://example.com/missing")


@patch("eventhub.services.importer.requests.get", side_effect=requests.ConnectionError("connection refused"))
def test_fetch_source_wraps_connection_errors(mock_get):
    with pytest.raises(SourceFetchError, match="connection refused"):
        fetch_source("http://example.invalid/")
