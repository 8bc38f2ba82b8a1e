"""
Venue repository functions.

Implements create/read/update/delete for venues, title lookups used when
associating events, exact-match detection for imports, and substring search.
"""
from __future__ import annotations

from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func, or_

from eventhub.db import models, schemas
from eventhub.db.validation import validate_venue
from eventhub.db.repositories import duplicates as repo_duplicates


def create_venue(db: Session, venue: schemas.VenueCreate, *, source: Optional[models.Source] = None):
    db_venue = models.Venue(**venue.model_dump(), source=source)
    validate_venue(db_venue)
    db.add(db_venue)
    db.commit()
    db.refresh(db_venue)
    return db_venue


def get_venue(db: Session, venue_id: int):
    return db.query(models.Venue).filter(models.Venue.id == venue_id).first()


def get_venues(db: Session, skip: int = 0, limit: int = 100, *, include_duplicates: bool = False):
    q = db.query(models.Venue)
    if not include_duplicates:
        q = q.filter(models.Venue.duplicate_of_id.is_(None))
    return q.order_by(func.lower(models.Venue.title), models.Venue.id).offset(skip).limit(limit).all()


def get_venue_by_title(db: Session, title: str):
    """First non-duplicate venue with ``title`` (case-insensitive)."""
    return (
        db.query(models.Venue)
        .filter(func.lower(models.Venue.title) == func.lower(title.strip()))
        .filter(models.Venue.duplicate_of_id.is_(None))
        .order_by(models.Venue.id)
        .first()
    )


def find_or_initialize_by_title(db: Session, title: str) -> models.Venue:
    """Existing venue with this title, or a new unsaved one."""
    return get_venue_by_title(db, title) or models.Venue(title=title.strip())


def find_exact_match(db: Session, venue: models.Venue):
    """An existing venue with the same title and address details, if any."""
    q = db.query(models.Venue).filter(func.lower(models.Venue.title) == func.lower(venue.title))
    for field in ("address", "street_address", "locality", "region", "postal_code", "country"):
        value = getattr(venue, field)
        column = getattr(models.Venue, field)
        q = q.filter(column.is_(None) if value is None else column == value)
    if venue.id is not None:
        q = q.filter(models.Venue.id != venue.id)
    return q.order_by(models.Venue.id).first()


def search_venues(db: Session, query: str, limit: int = 50) -> List[models.Venue]:
    terms = [t for t in (query or "").split() if t]
    if not terms:
        return []
    filters = []
    for term in terms:
        pattern = f"%{term.lower()}%"
        filters.append(
            or_(
                func.lower(models.Venue.title).like(pattern),
                func.lower(func.coalesce(models.Venue.address, "")).like(pattern),
                func.lower(func.coalesce(models.Venue.locality, "")).like(pattern),
            )
        )
    return (
        db.query(models.Venue)
        .filter(models.Venue.duplicate_of_id.is_(None))
        .filter(*filters)
        .order_by(func.lower(models.Venue.title), models.Venue.id)
        .limit(limit)
        .all()
    )


def update_venue(db: Session, venue_id: int, venue: schemas.VenueUpdate):
    db_venue = get_venue(db, venue_id)
    if db_venue:
        for key, value in venue.model_dump(exclude_unset=True).items():
            setattr(db_venue, key, value)
        try:
            validate_venue(db_venue)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(db_venue)
    return db_venue


def delete_venue(db: Session, venue_id: int) -> bool:
    """Delete a venue; its events and duplicates are detached, not deleted."""
    db_venue = get_venue(db, venue_id)
    if not db_venue:
        return False
    try:
        for event in list(db_venue.events):
            event.venue = None
        for duplicate in list(db_venue.duplicates):
            duplicate.duplicate_of = None
        db.delete(db_venue)
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        raise RuntimeError(f"Failed to delete venue {venue_id}: {str(e)}")


def find_duplicates_by(db: Session, fields, *, grouped: bool = False, exclude_squashed: bool = False):
    return repo_duplicates.find_duplicates_by(
        db, models.Venue, fields, grouped=grouped, exclude_squashed=exclude_squashed
    )


def find_duplicate_pairs(db: Session, fields, *, exclude_squashed: bool = False):
    return repo_duplicates.find_duplicate_pairs(db, models.Venue, fields, exclude_squashed=exclude_squashed)


def squash_duplicates(db: Session, master: models.Venue, duplicates):
    return repo_duplicates.squash_duplicates(db, models.Venue, master, duplicates)
