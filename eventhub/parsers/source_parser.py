"""
Format detection and dispatch for source content.

Content containing ``BEGIN:VCALENDAR`` is read as iCalendar; anything else
is treated as an HTML page carrying hCalendar markup.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from eventhub.parsers.abstract import AbstractEvent
from eventhub.parsers.errors import SourceParseError
from eventhub.parsers.hcal import HcalParser
from eventhub.parsers.ical import IcalParser
from eventhub.utils.dates import today as start_of_today

logger = logging.getLogger(__name__)


class SourceParser:
    parsers = (IcalParser, HcalParser)

    @classmethod
    def parser_for(cls, content: str):
        for parser in cls.parsers:
            if parser.matches(content):
                return parser()
        return HcalParser()

    @classmethod
    def to_abstract_events(
        cls,
        *,
        content: str,
        url: Optional[str] = None,
        skip_old: bool = True,
        now: Optional[datetime] = None,
    ) -> List[AbstractEvent]:
        """Parse ``content`` into abstract events, dropping ones already over when ``skip_old``."""
        if content is None:
            raise SourceParseError("No content to parse")
        parser = cls.parser_for(content)
        events = parser.parse(content, url=url)
        if skip_old:
            cutoff = start_of_today(now)
            kept = [e for e in events if not e.ended_before(cutoff)]
            if len(kept) != len(events):
                logger.info("Skipped %d past events from %s", len(events) - len(kept), url or "content")
            events = kept
        return events
