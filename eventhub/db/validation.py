"""
Record-level validation run before anything is persisted.

Pydantic schemas validate request bodies; these checks cover records built
elsewhere (imports, partial updates) so the same invariants hold everywhere.
"""
from __future__ import annotations

from typing import Dict, List

from eventhub.db.schemas.events import END_BEFORE_START


class RecordValidationError(ValueError):
    """Raised when a record fails validation; carries field-level messages."""

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        message = "; ".join(f"{field} {msg}" for field, msgs in errors.items() for msg in msgs)
        super().__init__(message)


def validate_event(event) -> None:
    errors: Dict[str, List[str]] = {}
    if not (event.title or "").strip():
        errors.setdefault("title", []).append("can't be blank")
    if event.start_time is None:
        errors.setdefault("start_time", []).append("can't be blank")
    elif event.end_time is not None and event.end_time < event.start_time:
        errors.setdefault("end_time", []).append(END_BEFORE_START)
    if errors:
        raise RecordValidationError(errors)


def validate_venue(venue) -> None:
    if not (venue.title or "").strip():
        raise RecordValidationError({"title": ["can't be blank"]})
