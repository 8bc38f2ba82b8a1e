from datetime import datetime, timedelta

from eventhub.db import models
from eventhub.parsers import AbstractEvent, AbstractLocation

NOW = datetime(2026, 6, 10, 14, 30)
TODAY = datetime(2026, 6, 10)


def _event(start, end=None, **kw):
    return models.Event(title=kw.pop("title", "Event"), start_time=start, end_time=end, **kw)


def test_is_current():
    assert _event(TODAY + timedelta(hours=9)).is_current(NOW)
    assert _event(TODAY - timedelta(days=2), TODAY + timedelta(hours=1)).is_current(NOW)
    assert not _event(TODAY - timedelta(days=1)).is_current(NOW)
    assert not _event(TODAY - timedelta(days=2), TODAY - timedelta(days=1)).is_current(NOW)


def test_is_old():
    assert _event(TODAY - timedelta(days=1)).is_old(NOW)
    assert not _event(TODAY - timedelta(minutes=30)).is_old(NOW)
    assert not _event(TODAY + timedelta(hours=1)).is_old(NOW)
    assert _event(TODAY - timedelta(days=3), TODAY - timedelta(days=2)).is_old(NOW)


def test_is_ongoing():
    assert _event(TODAY - timedelta(days=1), TODAY + timedelta(hours=20)).is_ongoing(NOW)
    assert not _event(TODAY + timedelta(hours=8), TODAY + timedelta(hours=20)).is_ongoing(NOW)
    assert not _event(TODAY - timedelta(days=1)).is_ongoing(NOW)


def test_url_normalized_on_assignment():
    event = _event(NOW, url="example.org/party")
    assert event.url == "http://example.org/party"
    event.url = "  "
    assert event.url is None


def test_progenitor_follows_duplicate_chain():
    root = _event(NOW, title="root")
    middle = _event(NOW, title="middle", duplicate_of=root)
    leaf = _event(NOW, title="leaf", duplicate_of=middle)
    assert leaf.progenitor() is root
    assert root.progenitor() is root
    assert leaf.duplicate_of is middle


def test_from_abstract_event_builds_event_and_venue():
    abstract = AbstractEvent(
        title="Hack night",
        start_time=NOW,
        end_time=NOW + timedelta(hours=3),
        url="example.com/hack",
        location=AbstractLocation(title="Library", locality="Portland"),
    )
    event = models.Event.from_abstract_event(abstract)
    assert event.title == "Hack night"
    assert event.url == "http://example.com/hack"
    assert event.venue.title == "Library"
    assert event.venue.full_address == "Portland"


def test_from_abstract_event_without_location_has_no_venue():
    event = models.Event.from_abstract_event(AbstractEvent(title="Online", start_time=NOW))
    assert event.venue is None
