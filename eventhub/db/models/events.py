from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship, validates
from .base import Base, DuplicateTrackingMixin, now_utc
from .venues import Venue
from eventhub.utils.dates import today as start_of_today
from eventhub.utils.urls import normalize_url


class Event(DuplicateTrackingMixin, Base):
    __tablename__ = 'events'
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    url = Column(String(2048))
    # Naive local wall-clock times
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    venue_id = Column(Integer, ForeignKey('venues.id', ondelete='SET NULL'), nullable=True)
    source_id = Column(Integer, ForeignKey('sources.id', ondelete='SET NULL'), nullable=True)
    duplicate_of_id = Column(Integer, ForeignKey('events.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    venue = relationship("Venue", back_populates="events")
    source = relationship("Source", back_populates="events")
    duplicate_of = relationship("Event", remote_side=[id], back_populates="duplicates")
    duplicates = relationship("Event", back_populates="duplicate_of")
    event_tags = relationship("EventTag", back_populates="event", cascade="all, delete-orphan")

    # Columns compared when looking for duplicates with "all"
    CONTENT_FIELDS = ('title', 'description', 'start_time', 'end_time', 'url', 'venue_id')

    __table_args__ = (
        Index('idx_events_start_time', 'start_time'),
        Index('idx_events_end_time', 'end_time'),
        Index('idx_events_title', 'title'),
        Index('idx_events_venue_id', 'venue_id'),
        Index('idx_events_duplicate_of_id', 'duplicate_of_id'),
    )

    @validates('url')
    def _normalize_url(self, key, value):
        return normalize_url(value)

    @property
    def tags(self):
        return [et.tag for et in self.event_tags]

    @property
    def tag_list(self) -> str:
        return ", ".join(sorted((t.name for t in self.tags), key=str.lower))

    # Time status relative to the day containing ``now``

    def is_current(self, now: Optional[datetime] = None) -> bool:
        return (self.end_time or self.start_time) >= start_of_today(now)

    def is_old(self, now: Optional[datetime] = None) -> bool:
        return (self.end_time or self.start_time + timedelta(hours=1)) <= start_of_today(now)

    def is_ongoing(self, now: Optional[datetime] = None) -> bool:
        day = start_of_today(now)
        return bool(self.end_time and self.start_time < day and self.end_time >= day)

    @classmethod
    def from_abstract_event(cls, abstract_event, source=None):
        """Build an unsaved Event (and Venue) from a parsed AbstractEvent."""
        event = cls(
            title=abstract_event.title,
            description=abstract_event.description,
            start_time=abstract_event.start_time,
            end_time=abstract_event.end_time,
            url=abstract_event.url,
            source=source,
        )
        event.venue = Venue.from_abstract_location(abstract_event.location, source=source)
        return event

    def __repr__(self) -> str:
        return f"Event(id={self.id!r}, title={self.title!r}, start_time={self.start_time!r})"
