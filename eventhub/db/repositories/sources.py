"""
Source repository functions.
"""
from __future__ import annotations

from sqlalchemy.orm import Session

from eventhub.db import models, schemas
from eventhub.utils.urls import normalize_url


def create_source(db: Session, source: schemas.SourceCreate):
    db_source = models.Source(title=source.title, url=source.url)
    db.add(db_source)
    db.commit()
    db.refresh(db_source)
    return db_source


def get_source(db: Session, source_id: int):
    return db.query(models.Source).filter(models.Source.id == source_id).first()


def get_source_by_url(db: Session, url: str):
    return db.query(models.Source).filter(models.Source.url == normalize_url(url)).first()


def get_sources(db: Session, skip: int = 0, limit: int = 100):
    return db.query(models.Source).order_by(models.Source.id).offset(skip).limit(limit).all()


def find_or_create_by_url(db: Session, url: str) -> models.Source:
    """Existing source for ``url``, or a new one flushed into the session."""
    source = get_source_by_url(db, url)
    if source is None:
        source = models.Source(url=url)
        db.add(source)
        db.flush()
    return source


def update_source(db: Session, source_id: int, source: schemas.SourceUpdate):
    db_source = get_source(db, source_id)
    if db_source:
        for key, value in source.model_dump(exclude_unset=True).items():
            if key == 'url' and value is None:
                continue
            setattr(db_source, key, value)
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(db_source)
    return db_source


def delete_source(db: Session, source_id: int) -> bool:
    """Delete a source; imported events and venues are kept."""
    db_source = get_source(db, source_id)
    if not db_source:
        return False
    try:
        for event in list(db_source.events):
            event.source = None
        for venue in list(db_source.venues):
            venue.source = None
        db.delete(db_source)
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        raise RuntimeError(f"Failed to delete source {source_id}: {str(e)}")
