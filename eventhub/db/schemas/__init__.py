"""
Domain-split Pydantic schemas with a single import surface.
"""

# Venues first: event schemas embed VenueSummary
from .venues import VenueBase, VenueCreate, VenueUpdate, VenueSummary, Venue, VenueDuplicateGroup
from .events import (
    EventBase,
    EventCreate,
    EventUpdate,
    Event,
    EventOverview,
    EventSearchResult,
    GroupedEventSearchResults,
    EventDuplicateGroup,
)
from .sources import (
    SourceBase,
    SourceCreate,
    SourceUpdate,
    Source,
    SourceImportRequest,
    ImportedEvent,
    SourceImportResult,
)
from .common import SquashRequest

__all__ = [
    # Venues
    "VenueBase",
    "VenueCreate",
    "VenueUpdate",
    "VenueSummary",
    "Venue",
    "VenueDuplicateGroup",
    # Events
    "EventBase",
    "EventCreate",
    "EventUpdate",
    "Event",
    "EventOverview",
    "EventSearchResult",
    "GroupedEventSearchResults",
    "EventDuplicateGroup",
    # Sources
    "SourceBase",
    "SourceCreate",
    "SourceUpdate",
    "Source",
    "SourceImportRequest",
    "ImportedEvent",
    "SourceImportResult",
    # Shared
    "SquashRequest",
]
