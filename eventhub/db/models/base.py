"""
Shared SQLAlchemy base and helpers.
"""
from sqlalchemy.orm import declarative_base
from datetime import datetime, UTC


def now_utc():
    """Return an aware UTC datetime for default/updated timestamps."""
    return datetime.now(UTC)


Base = declarative_base()


class DuplicateTrackingMixin:
    """Helpers for records linked to a master through ``duplicate_of``."""

    @property
    def is_duplicate(self) -> bool:
        return self.duplicate_of_id is not None

    def progenitor(self):
        """Follow ``duplicate_of`` links back to the root record."""
        seen = {id(self)}
        current = self
        while current.duplicate_of is not None:
            parent = current.duplicate_of
            if id(parent) in seen:
                break
            seen.add(id(parent))
            current = parent
        return current
