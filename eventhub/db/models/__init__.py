"""
Domain-split SQLAlchemy models with a single import surface.

Exposes `Base`, `now_utc`, and all ORM classes.
"""

from .base import Base, now_utc  # re-export

from .sources import Source
from .venues import Venue
from .events import Event
from .tags import Tag, EventTag

__all__ = [
    "Base",
    "now_utc",
    "Source",
    "Venue",
    "Event",
    "Tag",
    "EventTag",
]
