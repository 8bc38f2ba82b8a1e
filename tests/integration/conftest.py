from datetime import datetime

import pytest
from sqlalchemy.orm import Session

from eventhub.db import models


@pytest.fixture
def venue_factory(db_session: Session):
    def _create(title: str = "Free Geek", **fields):
        venue = models.Venue(title=title, **fields)
        db_session.add(venue)
        db_session.commit()
        db_session.refresh(venue)
        return venue
    return _create


@pytest.fixture
def event_factory(db_session: Session):
    def _create(title: str = "Meetup", start_time: datetime = None, **fields):
        event = models.Event(title=title, start_time=start_time or datetime(2030, 1, 15, 19, 0), **fields)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event
    return _create


@pytest.fixture
def source_factory(db_session: Session):
    def _create(url: str = "http://example.com/calendar.ics", title: str = None):
        source = models.Source(url=url, title=title)
        db_session.add(source)
        db_session.commit()
        db_session.refresh(source)
        return source
    return _create
