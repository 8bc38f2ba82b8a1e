import warnings
from datetime import datetime
from unittest.mock import Mock, patch

import pytest
import requests
from sqlalchemy.exc import SAWarning

from eventhub.db import models
from eventhub.services.importer import NO_EVENTS_MESSAGE, import_source

NOW = datetime(2026, 10, 19, 12, 0)
SOURCE_URL = "http://calendar.example.com/events"


def _vevent(title, start, venue=None, tags=()):
    location = ""
    if venue:
        location = (
            '<div class="location vcard"><span class="fn org">%s</span>'
            '<div class="adr"><span class="locality">Portland</span></div></div>' % venue
        )
    tag_links = "".join('<a rel="tag" href="/tags/%s">%s</a>' % (t, t) for t in tags)
    return (
        '<div class="vevent"><span class="summary">%s</span>'
        '<abbr class="dtstart" title="%s">start</abbr>%s%s</div>' % (title, start, location, tag_links)
    )


def _page(*vevents):
    return "<html><body>%s</body></html>" % "".join(vevents)


def _response(text):
    return Mock(text=text, raise_for_status=Mock())


PAGE = _page(
    _vevent("Ruby Brigade", "2030-01-15T19:00:00", venue="Free Geek", tags=("ruby",)),
    _vevent("Python meetup", "2030-01-16T18:30:00", venue="Free Geek"),
    _vevent("Last year's party", "2025-12-31T21:00:00"),
)


@pytest.fixture
def fetched():
    with patch("eventhub.services.importer.requests.get") as mock_get:
        mock_get.return_value = _response(PAGE)
        yield mock_get


def test_import_creates_source_events_and_venue(db_session, fetched):
    result = import_source(db_session, "calendar.example.com/events", now=NOW)

    assert result.ok
    assert result.message.splitlines() == ["Imported 2 entries:", "- Ruby Brigade", "- Python meetup"]
    assert result.source.url == SOURCE_URL
    assert result.source.imported_at is not None
    fetched.assert_called_once()
    assert fetched.call_args.args[0] == SOURCE_URL

    events = db_session.query(models.Event).order_by(models.Event.start_time).all()
    assert [e.title for e in events] == ["Ruby Brigade", "Python meetup"]
    assert all(e.source_id == result.source.id for e in events)
    assert events[0].tag_list == "ruby"

    venues = db_session.query(models.Venue).all()
    assert len(venues) == 1
    assert venues[0].source_id == result.source.id
    assert events[0].venue_id == events[1].venue_id == venues[0].id


def test_import_can_include_past_events(db_session, fetched):
    result = import_source(db_session, SOURCE_URL, skip_old=False, now=NOW)
    assert result.ok
    assert len(result.events) == 3


def test_reimport_reuses_existing_events(db_session, fetched):
    first = import_source(db_session, SOURCE_URL, now=NOW)
    second = import_source(db_session, SOURCE_URL, now=NOW)
    assert second.ok
    assert [e.id for e in second.events] == [e.id for e in first.events]
    assert db_session.query(models.Event).count() == 2
    assert db_session.query(models.Source).count() == 1


def test_reimport_resolves_squashed_events_to_master(db_session, fetched, event_factory):
    master = event_factory("Ruby Brigade (master)", start_time=datetime(2030, 1, 15, 19, 0))
    first = import_source(db_session, SOURCE_URL, now=NOW)
    imported = first.events[0]
    imported.duplicate_of_id = master.id
    db_session.commit()

    second = import_source(db_session, SOURCE_URL, now=NOW)
    assert second.events[0].id == master.id


def test_import_reuses_matching_venue(db_session, fetched, venue_factory):
    venue = venue_factory("Free Geek", locality="Portland")
    result = import_source(db_session, SOURCE_URL, now=NOW)
    assert {e.venue_id for e in result.events} == {venue.id}
    assert db_session.query(models.Venue).count() == 1


def test_import_tagged_event_at_existing_venue_without_orphan_warning(db_session, fetched, venue_factory):
    venue_factory("Free Geek", locality="Portland")
    with warnings.catch_warnings():
        warnings.simplefilter("error", SAWarning)
        result = import_source(db_session, SOURCE_URL, now=NOW)
    assert result.ok
    ruby = db_session.query(models.Event).filter_by(title="Ruby Brigade").one()
    assert ruby.tag_list == "ruby"


def test_dry_run_persists_nothing(db_session, fetched):
    result = import_source(db_session, SOURCE_URL, dry_run=True, now=NOW)
    assert result.ok
    assert result.source is None
    assert db_session.query(models.Event).count() == 0
    assert db_session.query(models.Source).count() == 0


def test_import_without_upcoming_events(db_session):
    page = _page(_vevent("Last year's party", "2025-12-31T21:00:00"))
    with patch("eventhub.services.importer.requests.get", return_value=_response(page)):
        result = import_source(db_session, SOURCE_URL, now=NOW)
    assert not result.ok
    assert result.message == NO_EVENTS_MESSAGE
    assert db_session.query(models.Source).count() == 0


def test_import_reports_fetch_failures(db_session):
    with patch("eventhub.services.importer.requests.get", side_effect=requests.ConnectionError("connection refused")):
        result = import_source(db_session, SOURCE_URL, now=NOW)
    assert not result.ok
    assert result.message.startswith("Unable to import:")
    assert "connection refused" in result.message
    assert db_session.query(models.Source).count() == 0


def test_import_reports_malformed_calendars(db_session):
    broken = "BEGIN:VCALENDAR\nthis is not a calendar"
    with patch("eventhub.services.importer.requests.get", return_value=_response(broken)):
        result = import_source(db_session, SOURCE_URL, now=NOW)
    assert not result.ok
    assert result.message.startswith("Unable to import:")


def test_import_blank_url(db_session):
    result = import_source(db_session, "   ")
    assert not result.ok


def test_sources_api_crud(client):
    resp = client.post("/sources/", json={"title": "Calagator", "url": "calagator.org/events.ics"})
    assert resp.status_code == 201
    source = resp.json()
    assert source["url"] == "http://calagator.org/events.ics"

    assert client.post("/sources/", json={"url": "http://calagator.org/events.ics"}).status_code == 400
    assert client.post("/sources/", json={"url": "  "}).status_code == 422

    resp = client.put(f"/sources/{source['id']}", json={"title": "Renamed"})
    assert resp.json()["title"] == "Renamed"
    assert resp.json()["url"] == source["url"]

    other = client.post("/sources/", json={"url": "http://other.example.com"}).json()
    assert client.put(f"/sources/{other['id']}", json={"url": "calagator.org/events.ics"}).status_code == 400

    assert [s["id"] for s in client.get("/sources/").json()] == [source["id"], other["id"]]
    assert client.delete(f"/sources/{source['id']}").status_code == 204
    assert client.get(f"/sources/{source['id']}").status_code == 404


def test_delete_source_keeps_imported_events(client, db_session, fetched):
    result = import_source(db_session, SOURCE_URL, now=NOW)
    assert client.delete(f"/sources/{result.source.id}").status_code == 204
    db_session.expire_all()
    events = db_session.query(models.Event).all()
    assert len(events) == 2
    assert all(e.source_id is None for e in events)


def test_import_api(client, fetched):
    body = client.post("/sources/import", json={"url": SOURCE_URL}).json()
    assert body["status"] == "success"
    assert body["source_id"] is not None
    assert [e["title"] for e in body["events"]] == ["Ruby Brigade", "Python meetup"]
    assert body["message"].startswith("Imported 2 entries:")


def test_import_api_failure_is_not_an_http_error(client):
    with patch("eventhub.services.importer.requests.get", side_effect=requests.Timeout("timed out")):
        resp = client.post("/sources/import", json={"url": SOURCE_URL})
    assert resp.status_code == 200
    assert resp.json()["status"] == "failure"
    assert resp.json()["source_id"] is None
