"""
Calendar source parsers producing format-neutral abstract events.
"""

from eventhub.parsers.abstract import AbstractEvent, AbstractLocation
from eventhub.parsers.errors import SourceImportError, SourceFetchError, SourceParseError
from eventhub.parsers.source_parser import SourceParser

__all__ = [
    "AbstractEvent",
    "AbstractLocation",
    "SourceImportError",
    "SourceFetchError",
    "SourceParseError",
    "SourceParser",
]
