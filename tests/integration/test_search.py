from datetime import datetime

import pytest

from eventhub.db.repositories import events as repo_events
from eventhub.search import search_events, search_grouped_by_currentness, set_search_engine_kind

NOW = datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def catalog(db_session, venue_factory, event_factory):
    lab = venue_factory("Lucky Lab")
    geek = venue_factory("Free Geek")
    ruby = event_factory("Ruby Brigade", start_time=datetime(2026, 11, 1, 19, 0), venue_id=geek.id)
    repo_events.set_tags(db_session, ruby, "ruby, meetup")
    db_session.commit()
    events = {
        "ruby": ruby,
        "beer": event_factory(
            "Beer and code",
            start_time=datetime(2026, 10, 25, 18, 0),
            description="Bring a laptop and some Ruby questions",
            venue_id=lab.id,
        ),
        "old_ruby": event_factory("Ruby Brigade", start_time=datetime(2025, 11, 1, 19, 0)),
        "ongoing": event_factory(
            "Hackathon",
            start_time=datetime(2026, 10, 18, 9, 0),
            end_time=datetime(2026, 10, 20, 17, 0),
            url="http://hack.example.com",
        ),
    }
    event_factory("Ruby Brigade", start_time=datetime(2026, 11, 1, 19, 0), duplicate_of_id=ruby.id)
    return events


def _titles(results):
    return [r.event.title for r in results]


def test_sql_search_matches_title_and_description(db_session, catalog):
    results = search_events(db_session, "ruby", now=NOW)
    # newest first by default
    assert [r.event for r in results] == [catalog["ruby"], catalog["beer"], catalog["old_ruby"]]
    assert all(r.score is None for r in results)


def test_sql_search_matches_venue_url_and_tag(db_session, catalog):
    assert [r.event for r in search_events(db_session, "lucky", now=NOW)] == [catalog["beer"]]
    assert [r.event for r in search_events(db_session, "hack.example", now=NOW)] == [catalog["ongoing"]]
    assert [r.event for r in search_events(db_session, "meetup", now=NOW)] == [catalog["ruby"]]
    # tags match whole names only
    assert search_events(db_session, "meet", now=NOW) == []


def test_any_keyword_matches(db_session, catalog):
    titles = _titles(search_events(db_session, "hackathon lucky", now=NOW))
    assert sorted(titles) == ["Beer and code", "Hackathon"]


def test_blank_query_returns_nothing(db_session, catalog):
    assert search_events(db_session, "   ", now=NOW) == []


def test_skip_old_keeps_current_and_ongoing(db_session, catalog):
    results = search_events(db_session, "ruby hackathon", skip_old=True, now=NOW)
    assert catalog["old_ruby"] not in [r.event for r in results]
    assert catalog["ongoing"] in [r.event for r in results]


def test_search_orders(db_session, catalog):
    by_name = _titles(search_events(db_session, "ruby", order="name", now=NOW))
    assert by_name == ["Beer and code", "Ruby Brigade", "Ruby Brigade"]

    by_venue = [r.event for r in search_events(db_session, "ruby", order="venue", now=NOW)]
    assert by_venue == [catalog["ruby"], catalog["beer"], catalog["old_ruby"]]

    with pytest.raises(ValueError):
        search_events(db_session, "ruby", order="popularity", now=NOW)


def test_limit(db_session, catalog):
    assert len(search_events(db_session, "ruby", limit=1, now=NOW)) == 1


def test_fulltext_falls_back_with_rank_scores(db_session, catalog):
    set_search_engine_kind("fulltext")
    results = search_events(db_session, "ruby", now=NOW)
    assert [r.event for r in results] == [catalog["ruby"], catalog["beer"], catalog["old_ruby"]]
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)
    assert all(0 < s <= 1 for s in scores)


def test_grouped_by_currentness(db_session, catalog):
    grouped = search_grouped_by_currentness(db_session, "ruby hackathon", now=NOW)
    assert [r.event for r in grouped["current"]] == [catalog["ruby"], catalog["beer"], catalog["ongoing"]]
    assert [r.event for r in grouped["past"]] == [catalog["old_ruby"]]


def test_search_api(client, catalog):
    resp = client.get("/events/search", params={"q": "ruby"})
    assert resp.status_code == 200
    assert resp.headers["X-Search-Engine"] == "sql"
    body = resp.json()
    assert {r["event"]["id"] for r in body["current"] + body["past"]} == {
        catalog["ruby"].id,
        catalog["beer"].id,
        catalog["old_ruby"].id,
    }
    assert catalog["old_ruby"].id in [r["event"]["id"] for r in body["past"]]

    assert client.get("/events/search", params={"q": "ruby", "order": "bogus"}).status_code == 422


def test_search_api_reports_switched_engine(client, catalog):
    set_search_engine_kind("fulltext")
    resp = client.get("/events/search", params={"q": "ruby", "current": True})
    assert resp.headers["X-Search-Engine"] == "fulltext"
    body = resp.json()
    assert body["past"] == []
    assert all(r["score"] is not None for r in body["current"])
