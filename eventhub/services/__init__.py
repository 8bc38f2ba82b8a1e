"""Import and export services built on the repositories and parsers."""

from .importer import (
    MAXIMUM_EVENTS_TO_DISPLAY_IN_FLASH,
    ImportResult,
    format_import_summary,
    import_source,
)
from .calendar_export import to_hcal, to_ical

__all__ = [
    "MAXIMUM_EVENTS_TO_DISPLAY_IN_FLASH",
    "ImportResult",
    "format_import_summary",
    "import_source",
    "to_hcal",
    "to_ical",
]
