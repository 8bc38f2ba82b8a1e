"""
Duplicate detection and squashing shared by events and venues.

Duplicates are found with a self-join on equality of the requested columns
and linked to a master record through ``duplicate_of_id`` instead of being
deleted.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple, Union

from sqlalchemy import and_
from sqlalchemy.orm import Session, aliased

from eventhub.db import models

logger = logging.getLogger(__name__)

FieldSelection = Union[str, Sequence[str]]


def resolve_fields(model, fields: FieldSelection) -> List[str]:
    """Normalize a field selection (name, comma list, sequence or "all") to column names."""
    if isinstance(fields, str):
        names = [f.strip() for f in fields.split(",") if f.strip()]
    else:
        names = [str(f).strip() for f in fields if f and str(f).strip()]
    if names == ["all"]:
        return list(model.CONTENT_FIELDS)
    if not names:
        raise ValueError("At least one field is required to find duplicates")
    unknown = [n for n in names if n not in model.CONTENT_FIELDS]
    if unknown:
        raise ValueError(
            f"Unknown field(s) for {model.__tablename__} duplicates: {', '.join(unknown)}. "
            f"Allowed: {', '.join(model.CONTENT_FIELDS)} or 'all'"
        )
    return names


def find_duplicates_by(
    db: Session,
    model,
    fields: FieldSelection,
    *,
    grouped: bool = False,
    exclude_squashed: bool = False,
):
    """Return records sharing all ``fields`` with at least one other record.

    Ordered by the compared fields ascending. With ``grouped=True`` returns a
    dict mapping the tuple of shared values to the records that share them.
    """
    names = resolve_fields(model, fields)
    a = aliased(model, name="a")
    b = aliased(model, name="b")
    conditions = [getattr(a, n) == getattr(b, n) for n in names]
    q = db.query(a).join(b, and_(a.id != b.id, *conditions))
    if exclude_squashed:
        q = q.filter(a.duplicate_of_id.is_(None), b.duplicate_of_id.is_(None))
    records = q.distinct().order_by(*[getattr(a, n) for n in names], a.id).all()
    logger.debug("find_duplicates_by %s on %s: %d records", model.__tablename__, names, len(records))
    if not grouped:
        return records
    groups: Dict[Tuple, list] = {}
    for record in records:
        key = tuple(getattr(record, n) for n in names)
        groups.setdefault(key, []).append(record)
    return groups


def find_duplicate_pairs(
    db: Session,
    model,
    fields: FieldSelection,
    *,
    exclude_squashed: bool = False,
):
    """Return unordered pairs ``(a, b)`` with ``a.id < b.id`` and all fields equal."""
    names = resolve_fields(model, fields)
    a = aliased(model, name="a")
    b = aliased(model, name="b")
    conditions = [getattr(a, n) == getattr(b, n) for n in names]
    q = db.query(a, b).join(b, and_(a.id < b.id, *conditions))
    if exclude_squashed:
        q = q.filter(a.duplicate_of_id.is_(None), b.duplicate_of_id.is_(None))
    rows = q.order_by(*[getattr(a, n) for n in names], a.id, b.id).all()
    return [(row[0], row[1]) for row in rows]


def squash_duplicates(db: Session, model, master, duplicates: Sequence) -> list:
    """Link each duplicate to the master's progenitor and commit.

    Venue duplicates hand their events over to the master venue.
    """
    target = master.progenitor()
    squashed = []
    try:
        for duplicate in duplicates:
            if duplicate.id == target.id or duplicate.id == master.id:
                raise ValueError(f"Cannot squash {model.__tablename__} {duplicate.id} into itself")
            duplicate.duplicate_of = target
            if model is models.Venue:
                for event in list(duplicate.events):
                    event.venue = target
            squashed.append(duplicate)
        db.commit()
    except Exception:
        db.rollback()
        raise
    for record in squashed:
        db.refresh(record)
    logger.info(
        "Squashed %d %s into %s",
        len(squashed),
        model.__tablename__,
        target.id,
    )
    return squashed
