from sqlalchemy import Column, Integer, String, ForeignKey, Index
from sqlalchemy.orm import relationship
from .base import Base


class Tag(Base):
    __tablename__ = 'tags'
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)

    event_tags = relationship("EventTag", back_populates="tag")

    __table_args__ = (
        Index('idx_tags_name', 'name'),
    )


class EventTag(Base):
    __tablename__ = 'event_tags'
    event_id = Column(Integer, ForeignKey('events.id', ondelete='CASCADE'), primary_key=True)
    tag_id = Column(Integer, ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True)

    event = relationship("Event", back_populates="event_tags")
    tag = relationship("Tag", back_populates="event_tags")
