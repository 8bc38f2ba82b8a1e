"""
Source import: fetch a calendar URL, parse it and persist the events.

Import failures never raise to the caller; they come back as a failure
``ImportResult`` whose message carries the underlying error text, and
nothing from the failed attempt is persisted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

import requests
from sqlalchemy.orm import Session

from eventhub.db import models
from eventhub.db.repositories import events as repo_events
from eventhub.db.repositories import sources as repo_sources
from eventhub.db.repositories import venues as repo_venues
from eventhub.db.validation import RecordValidationError, validate_event, validate_venue
from eventhub.parsers import AbstractEvent, SourceParser
from eventhub.parsers.errors import SourceFetchError, SourceImportError, SourceParseError
from eventhub.utils.settings import get_settings
from eventhub.utils.urls import normalize_url

logger = logging.getLogger(__name__)

MAXIMUM_EVENTS_TO_DISPLAY_IN_FLASH = 5
NO_EVENTS_MESSAGE = "Unable to find any upcoming events to import from this source"

STATUS_SUCCESS = "success"
STATUS_FAILURE = "failure"

__all__ = [
    "MAXIMUM_EVENTS_TO_DISPLAY_IN_FLASH",
    "NO_EVENTS_MESSAGE",
    "ImportResult",
    "SourceImportError",
    "SourceFetchError",
    "SourceParseError",
    "fetch_source",
    "format_import_summary",
    "import_source",
]


@dataclass
class ImportResult:
    status: str
    message: str
    source: Optional[models.Source] = None
    events: List[models.Event] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCESS


def fetch_source(url: str) -> str:
    """GET ``url`` and return its body, raising SourceFetchError on any HTTP failure."""
    settings = get_settings()
    try:
        response = requests.get(
            url,
            headers={"User-Agent": settings.import_user_agent},
            timeout=settings.import_timeout,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise SourceFetchError(str(e)) from e
    return response.text


def format_import_summary(events: Sequence) -> str:
    """Success message listing at most MAXIMUM_EVENTS_TO_DISPLAY_IN_FLASH titles."""
    lines = [f"Imported {len(events)} entries:"]
    for i, event in enumerate(events):
        if i >= MAXIMUM_EVENTS_TO_DISPLAY_IN_FLASH:
            lines.append(f"And {len(events) - i} other events.")
            break
        lines.append(f"- {event.title}")
    return "\n".join(lines)


def _persist_abstract_event(db: Session, abstract: AbstractEvent, source: models.Source) -> models.Event:
    event = models.Event.from_abstract_event(abstract)
    existing = repo_events.find_exact_match(db, event)
    if existing is not None:
        logger.debug("Reusing existing event %s for '%s'", existing.id, abstract.title)
        return existing.progenitor()

    event.source = source
    if event.venue is not None:
        existing_venue = repo_venues.find_exact_match(db, event.venue)
        if existing_venue is not None:
            event.venue = existing_venue.progenitor()
        else:
            event.venue.source = source
            validate_venue(event.venue)
    validate_event(event)
    db.add(event)
    if abstract.tags:
        repo_events.set_tags(db, event, abstract.tags)
    db.flush()
    return event


def import_source(
    db: Session,
    url: str,
    *,
    skip_old: bool = True,
    dry_run: bool = False,
    now: Optional[datetime] = None,
) -> ImportResult:
    """Fetch, parse and persist the events at ``url`` under its Source."""
    normalized = normalize_url(url)
    if not normalized:
        return ImportResult(STATUS_FAILURE, "Unable to import: url can't be blank")

    try:
        content = fetch_source(normalized)
        abstract_events = SourceParser.to_abstract_events(
            content=content, url=normalized, skip_old=skip_old, now=now
        )
    except SourceImportError as e:
        logger.error("Import of %s failed: %s", normalized, e, extra={"source_url": normalized})
        return ImportResult(STATUS_FAILURE, f"Unable to import: {e}")

    if not abstract_events:
        logger.info("No upcoming events at %s", normalized, extra={"source_url": normalized})
        return ImportResult(STATUS_FAILURE, NO_EVENTS_MESSAGE)

    try:
        source = repo_sources.find_or_create_by_url(db, normalized)
        events: List[models.Event] = []
        for abstract in abstract_events:
            event = _persist_abstract_event(db, abstract, source)
            if event not in events:
                events.append(event)
        source.imported_at = models.now_utc()
        if dry_run:
            db.rollback()
            logger.info("Dry run: parsed %d events from %s", len(events), normalized)
            return ImportResult(STATUS_SUCCESS, format_import_summary(events), None, events)
        db.commit()
    except RecordValidationError as e:
        db.rollback()
        logger.error("Import of %s rejected: %s", normalized, e, extra={"source_url": normalized})
        return ImportResult(STATUS_FAILURE, f"Unable to import: {e}")
    except Exception:
        db.rollback()
        raise

    db.refresh(source)
    logger.info(
        "Imported %d events from %s",
        len(events),
        normalized,
        extra={"source_id": source.id, "source_url": normalized},
    )
    return ImportResult(STATUS_SUCCESS, format_import_summary(events), source, events)
