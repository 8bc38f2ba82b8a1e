"""
Event repository functions.

Implements event CRUD, tagging, venue association, the date-range and
overview queries, exact-match lookup for imports and the duplicate helpers.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from eventhub.db import models, schemas
from eventhub.db.validation import validate_event
from eventhub.db.repositories import duplicates as repo_duplicates
from eventhub.db.repositories import venues as repo_venues
from eventhub.utils.dates import local_now, start_of_day, today as start_of_today
from eventhub.utils.settings import get_settings

logger = logging.getLogger(__name__)

ORDERINGS = {
    "start_time": (models.Event.start_time, models.Event.id),
    "end_time": (models.Event.end_time, models.Event.id),
    "title": (func.lower(models.Event.title), models.Event.start_time, models.Event.id),
    "created_at": (models.Event.created_at, models.Event.id),
}


def _ordering(order: Optional[str]):
    key = order or "start_time"
    if key not in ORDERINGS:
        raise ValueError(f"Unknown order '{order}'. Allowed: {', '.join(ORDERINGS)}")
    return ORDERINGS[key]


def _base_query(db: Session, *, include_duplicates: bool = False):
    q = db.query(models.Event).options(
        joinedload(models.Event.venue),
        selectinload(models.Event.event_tags).joinedload(models.EventTag.tag),
    )
    if not include_duplicates:
        q = q.filter(models.Event.duplicate_of_id.is_(None))
    return q


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return start_of_day(value)


# Tags

def parse_tag_list(tag_list: Union[str, Iterable[str], None]) -> List[str]:
    """Split a comma list into stripped names, de-duplicated case-insensitively."""
    if tag_list is None:
        return []
    raw = tag_list.split(",") if isinstance(tag_list, str) else list(tag_list)
    names: List[str] = []
    seen = set()
    for name in raw:
        cleaned = (name or "").strip()
        if cleaned and cleaned.lower() not in seen:
            seen.add(cleaned.lower())
            names.append(cleaned)
    return names


def _get_or_create_tag(db: Session, name: str) -> models.Tag:
    tag = db.query(models.Tag).filter(func.lower(models.Tag.name) == name.lower()).first()
    if not tag:
        tag = models.Tag(name=name)
        db.add(tag)
        db.flush()
    return tag


def set_tags(db: Session, event: models.Event, tag_list) -> models.Event:
    """Replace the event's tags with the names in ``tag_list``."""
    existing = {et.tag.name.lower(): et for et in event.event_tags if et.tag is not None}
    event_tags = []
    for name in parse_tag_list(tag_list):
        link = existing.get(name.lower())
        if link is None:
            link = models.EventTag(tag=_get_or_create_tag(db, name))
        event_tags.append(link)
    event.event_tags = event_tags
    return event


# Venues

def associate_with_venue(db: Session, event: models.Event, venue):
    """Point ``event`` at ``venue`` given as a Venue, title, id or None.

    A venue with the same title as the current one leaves the event unchanged;
    squashed venues resolve to their progenitor.
    """
    if venue is None or (isinstance(venue, str) and not venue.strip()):
        event.venue = None
        return None
    if isinstance(venue, models.Venue):
        candidate = venue
    elif isinstance(venue, str):
        candidate = repo_venues.find_or_initialize_by_title(db, venue)
    elif isinstance(venue, int) and not isinstance(venue, bool):
        candidate = repo_venues.get_venue(db, venue)
        if candidate is None:
            raise LookupError(f"Venue {venue} not found")
    else:
        raise TypeError(f"Unknown venue type: {type(venue).__name__}")

    if event.venue is None or event.venue.title != candidate.title:
        event.venue = candidate.progenitor()
    return event.venue


# CRUD

def create_event(db: Session, event: schemas.EventCreate, *, source: Optional[models.Source] = None):
    data = event.model_dump(exclude={"venue_id", "venue_title", "tag_list"})
    db_event = models.Event(**data, source=source)
    try:
        if event.venue_id is not None:
            associate_with_venue(db, db_event, event.venue_id)
        elif event.venue_title:
            associate_with_venue(db, db_event, event.venue_title)
        validate_event(db_event)
        db.add(db_event)
        if event.tag_list:
            set_tags(db, db_event, event.tag_list)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_event)
    return db_event


def get_event(db: Session, event_id: int):
    return _base_query(db, include_duplicates=True).filter(models.Event.id == event_id).first()


def get_events(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    *,
    order: Optional[str] = None,
    include_duplicates: bool = False,
):
    return (
        _base_query(db, include_duplicates=include_duplicates)
        .order_by(*_ordering(order))
        .offset(skip)
        .limit(limit)
        .all()
    )


def update_event(db: Session, event_id: int, event: schemas.EventUpdate):
    db_event = get_event(db, event_id)
    if not db_event:
        return None
    data = event.model_dump(exclude_unset=True)
    venue_id_set = "venue_id" in data
    venue_id = data.pop("venue_id", None)
    venue_title_set = "venue_title" in data
    venue_title = data.pop("venue_title", None)
    tag_list = data.pop("tag_list", None)
    try:
        for key, value in data.items():
            if key in ("title", "start_time") and value is None:
                continue
            setattr(db_event, key, value)
        if venue_id_set:
            associate_with_venue(db, db_event, venue_id)
        elif venue_title_set:
            associate_with_venue(db, db_event, venue_title)
        validate_event(db_event)
        if tag_list is not None:
            set_tags(db, db_event, tag_list)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_event)
    return db_event


def delete_event(db: Session, event_id: int) -> bool:
    db_event = get_event(db, event_id)
    if not db_event:
        return False
    try:
        for duplicate in list(db_event.duplicates):
            duplicate.duplicate_of = None
        db.delete(db_event)
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        raise RuntimeError(f"Failed to delete event {event_id}: {str(e)}")


# Date queries

def find_by_dates(
    db: Session,
    start: Union[date, datetime],
    end: Union[date, datetime],
    order: Optional[str] = "start_time",
    *,
    include_duplicates: bool = False,
):
    """Events starting in ``[start, end)`` or started earlier and still running at ``start``.

    When ``start == end`` the range covers the single day starting at ``start``.
    """
    start_dt = _as_datetime(start)
    end_dt = _as_datetime(end)
    if start_dt == end_dt:
        end_dt = end_dt + timedelta(days=1)
    Event = models.Event
    return (
        _base_query(db, include_duplicates=include_duplicates)
        .filter(
            or_(
                and_(Event.start_time >= start_dt, Event.start_time < end_dt),
                and_(Event.start_time < start_dt, Event.end_time.isnot(None), Event.end_time >= start_dt),
            )
        )
        .order_by(*_ordering(order))
        .all()
    )


def _future_clause(now: datetime):
    Event = models.Event
    return or_(Event.start_time >= start_of_today(now), Event.end_time > now)


def find_future_events(
    db: Session,
    order: Optional[str] = "start_time",
    now: Optional[datetime] = None,
    *,
    include_duplicates: bool = False,
):
    """Events starting today or later, plus earlier ones whose end is still ahead of ``now``."""
    now = now or local_now()
    return (
        _base_query(db, include_duplicates=include_duplicates)
        .filter(_future_clause(now))
        .order_by(*_ordering(order))
        .all()
    )


def find_past_events(
    db: Session,
    order: Optional[str] = "start_time",
    now: Optional[datetime] = None,
    *,
    include_duplicates: bool = False,
):
    now = now or local_now()
    Event = models.Event
    past = and_(
        Event.start_time < start_of_today(now),
        or_(Event.end_time.is_(None), Event.end_time <= now),
    )
    return (
        _base_query(db, include_duplicates=include_duplicates)
        .filter(past)
        .order_by(*_ordering(order))
        .all()
    )


def select_for_overview(db: Session, now: Optional[datetime] = None) -> dict:
    """Bucket upcoming events into today / tomorrow / later, plus the next one past the window."""
    day = start_of_today(now)
    tomorrow = day + timedelta(days=1)
    after_tomorrow = day + timedelta(days=2)
    cutoff = day + timedelta(days=get_settings().overview_days)

    overview = {"today": [], "tomorrow": [], "later": [], "more": None}
    for event in find_by_dates(db, day, cutoff):
        if event.start_time < tomorrow:
            overview["today"].append(event)
        elif event.start_time < after_tomorrow:
            overview["tomorrow"].append(event)
        else:
            overview["later"].append(event)

    overview["more"] = (
        _base_query(db)
        .filter(models.Event.start_time >= cutoff)
        .order_by(models.Event.start_time, models.Event.id)
        .first()
    )
    logger.debug(
        "Overview from %s: today=%d tomorrow=%d later=%d",
        day.date(),
        len(overview["today"]),
        len(overview["tomorrow"]),
        len(overview["later"]),
    )
    return overview


# Import support

def find_exact_match(db: Session, event: models.Event):
    """An existing event with the same title, times and url, if any."""
    Event = models.Event
    q = db.query(Event).filter(Event.title == event.title, Event.start_time == event.start_time)
    for column, value in ((Event.end_time, event.end_time), (Event.url, event.url)):
        q = q.filter(column.is_(None) if value is None else column == value)
    if event.id is not None:
        q = q.filter(Event.id != event.id)
    return q.order_by(Event.id).first()


# Duplicates

def find_duplicates_by(db: Session, fields, *, grouped: bool = False, exclude_squashed: bool = False):
    return repo_duplicates.find_duplicates_by(
        db, models.Event, fields, grouped=grouped, exclude_squashed=exclude_squashed
    )


def find_duplicate_pairs(db: Session, fields, *, exclude_squashed: bool = False):
    return repo_duplicates.find_duplicate_pairs(db, models.Event, fields, exclude_squashed=exclude_squashed)


def squash_duplicates(db: Session, master: models.Event, duplicates):
    return repo_duplicates.squash_duplicates(db, models.Event, master, duplicates)
