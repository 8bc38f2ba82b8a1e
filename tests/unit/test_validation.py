from datetime import datetime

import pytest
from pydantic import ValidationError

from eventhub.db import models, schemas
from eventhub.db.validation import RecordValidationError, validate_event, validate_venue

START = datetime(2026, 5, 1, 18, 0)


def test_event_create_rejects_end_before_start():
    with pytest.raises(ValidationError) as exc:
        schemas.EventCreate(title="Meetup", start_time=START, end_time=datetime(2026, 5, 1, 17, 0))
    assert "must not be earlier than start time" in str(exc.value)


def test_event_create_accepts_missing_or_equal_end():
    assert schemas.EventCreate(title="Meetup", start_time=START).end_time is None
    assert schemas.EventCreate(title="Meetup", start_time=START, end_time=START).end_time == START


def test_event_create_normalizes_url():
    event = schemas.EventCreate(title="Meetup", start_time=START, url="example.com/meetup")
    assert event.url == "http://example.com/meetup"


def test_source_requires_url():
    with pytest.raises(ValidationError):
        schemas.SourceCreate(url="   ")


def test_validate_event_collects_field_errors():
    event = models.Event(title=" ", start_time=START, end_time=datetime(2026, 4, 30))
    with pytest.raises(RecordValidationError) as exc:
        validate_event(event)
    assert exc.value.errors == {
        "title": ["can't be blank"],
        "end_time": ["must not be earlier than start time"],
    }


def test_validate_event_requires_start_time():
    with pytest.raises(RecordValidationError) as exc:
        validate_event(models.Event(title="No start"))
    assert exc.value.errors == {"start_time": ["can't be blank"]}


def test_validate_event_passes_valid_record():
    validate_event(models.Event(title="Fine", start_time=START, end_time=None))


def test_validate_venue_requires_title():
    with pytest.raises(RecordValidationError):
        validate_venue(models.Venue(title=""))
    validate_venue(models.Venue(title="Library"))


def test_record_validation_error_is_value_error():
    err = RecordValidationError({"title": ["can't be blank"]})
    assert isinstance(err, ValueError)
    assert str(err) == "title can't be blank"
