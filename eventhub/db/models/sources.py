from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship, validates
from .base import Base, now_utc
from eventhub.utils.urls import normalize_url


class Source(Base):
    __tablename__ = 'sources'
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255))
    url = Column(String(2048), nullable=False, unique=True)
    imported_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    events = relationship("Event", back_populates="source")
    venues = relationship("Venue", back_populates="source")

    @validates('url')
    def _normalize_url(self, key, value):
        return normalize_url(value)

    def __repr__(self) -> str:
        return f"Source(id={self.id!r}, url={self.url!r})"
