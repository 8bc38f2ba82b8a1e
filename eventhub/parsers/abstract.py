"""
Format-neutral records produced by the calendar parsers.

Parsers never touch the database; the importer turns these into ORM rows
through ``Event.from_abstract_event`` and ``Venue.from_abstract_location``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class AbstractLocation:
    title: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    street_address: Optional[str] = None
    locality: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    url: Optional[str] = None
    email: Optional[str] = None
    telephone: Optional[str] = None


@dataclass
class AbstractEvent:
    title: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    description: Optional[str] = None
    url: Optional[str] = None
    location: Optional[AbstractLocation] = None
    tags: List[str] = field(default_factory=list)

    def ended_before(self, moment: datetime) -> bool:
        """True when the event is over before ``moment`` (start counts when there is no end)."""
        last = self.end_time or self.start_time
        return last is not None and last < moment
