from sqlalchemy import Column, Integer, String, Text, DateTime, Float, ForeignKey, Index
from sqlalchemy.orm import relationship, validates
from .base import Base, DuplicateTrackingMixin, now_utc
from eventhub.utils.urls import normalize_url


class Venue(DuplicateTrackingMixin, Base):
    __tablename__ = 'venues'
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    address = Column(String(512))
    street_address = Column(String(255))
    locality = Column(String(255))
    region = Column(String(255))
    postal_code = Column(String(32))
    country = Column(String(255))
    latitude = Column(Float)
    longitude = Column(Float)
    email = Column(String(255))
    telephone = Column(String(64))
    url = Column(String(2048))
    source_id = Column(Integer, ForeignKey('sources.id', ondelete='SET NULL'), nullable=True)
    duplicate_of_id = Column(Integer, ForeignKey('venues.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    events = relationship("Event", back_populates="venue")
    source = relationship("Source", back_populates="venues")
    duplicate_of = relationship("Venue", remote_side=[id], back_populates="duplicates")
    duplicates = relationship("Venue", back_populates="duplicate_of")

    # Columns compared when looking for duplicates with "all"
    CONTENT_FIELDS = (
        'title', 'description', 'address', 'street_address', 'locality', 'region',
        'postal_code', 'country', 'latitude', 'longitude', 'email', 'telephone', 'url',
    )

    __table_args__ = (
        Index('idx_venues_title', 'title'),
        Index('idx_venues_duplicate_of_id', 'duplicate_of_id'),
    )

    @validates('url')
    def _normalize_url(self, key, value):
        return normalize_url(value)

    @property
    def full_address(self) -> str:
        if self.address:
            return self.address
        parts = [self.street_address, self.locality, self.region, self.postal_code, self.country]
        return ", ".join(p for p in parts if p)

    @classmethod
    def from_abstract_location(cls, location, source=None):
        """Build an unsaved Venue from a parsed location, or None."""
        if location is None or not location.title:
            return None
        return cls(
            title=location.title,
            description=location.description,
            address=location.address,
            street_address=location.street_address,
            locality=location.locality,
            region=location.region,
            postal_code=location.postal_code,
            country=location.country,
            latitude=location.latitude,
            longitude=location.longitude,
            email=location.email,
            telephone=location.telephone,
            url=location.url,
            source=source,
        )

    def __repr__(self) -> str:
        return f"Venue(id={self.id!r}, title={self.title!r})"
