"""iCalendar (RFC 5545) source parser built on the ``ics`` library.

``ics`` reads floating times (no ``Z`` and no ``TZID``) as UTC. Each VEVENT is
therefore parsed on its own next to its raw content lines, so floating
DTSTART/DTEND values keep the wall-clock time the feed wrote.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Dict, List, Optional, Tuple

from ics import Calendar

from eventhub.parsers.abstract import AbstractEvent, AbstractLocation
from eventhub.parsers.errors import SourceParseError
from eventhub.utils.dates import end_of_day, start_of_day, to_naive_local

logger = logging.getLogger(__name__)

_TIME_PROPERTIES = ("DTSTART", "DTEND")


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _local(value, floating: bool = False):
    # ics hands back Arrow objects
    if value is None:
        return None
    if floating:
        return value.datetime.replace(tzinfo=None)
    return to_naive_local(value.datetime)


def _unfold(content: str) -> List[str]:
    lines: List[str] = []
    for raw in content.splitlines():
        if raw[:1] in (" ", "\t") and lines:
            lines[-1] += raw[1:]
        elif raw.strip():
            lines.append(raw)
    return lines


def _split_components(content: str) -> Tuple[List[str], List[str], List[List[str]]]:
    """Calendar property lines, VTIMEZONE lines and one line list per VEVENT."""
    properties: List[str] = []
    zones: List[str] = []
    events: List[List[str]] = []
    stack: List[str] = []
    current: Optional[List[str]] = None
    for line in _unfold(content):
        upper = line.strip().upper()
        if upper.startswith("BEGIN:"):
            stack.append(upper[6:])
            if len(stack) == 2:
                current = []
        if len(stack) >= 2 and current is not None:
            current.append(line)
        elif len(stack) == 1 and not upper.startswith(("BEGIN:", "END:")):
            properties.append(line)
        if upper.startswith("END:") and stack:
            if len(stack) == 2 and current is not None:
                if stack[1] == "VEVENT":
                    events.append(current)
                elif stack[1] == "VTIMEZONE":
                    zones.extend(current)
                current = None
            stack.pop()
    return properties, zones, events


def _floating_properties(block: List[str]) -> Dict[str, bool]:
    """Map DTSTART/DTEND to whether the value is floating (neither ``Z`` nor ``TZID``)."""
    found: Dict[str, bool] = {}
    for line in block:
        head, _, value = line.partition(":")
        name = head.split(";", 1)[0].strip().upper()
        if name in _TIME_PROPERTIES and name not in found:
            found[name] = "TZID=" not in head.upper() and not value.strip().upper().endswith("Z")
    return found


class IcalParser:
    name = "ical"

    @staticmethod
    def matches(content: str) -> bool:
        return "BEGIN:VCALENDAR" in (content or "").upper()

    def parse(self, content: str, url: Optional[str] = None) -> List[AbstractEvent]:
        try:
            Calendar(content)
            properties, zones, blocks = _split_components(content)
            parsed = [
                (
                    Calendar("\r\n".join(["BEGIN:VCALENDAR", *properties, *zones, *block, "END:VCALENDAR"])),
                    _floating_properties(block),
                )
                for block in blocks
            ]
        except Exception as e:
            raise SourceParseError(f"Invalid iCalendar data: {e}") from e

        events: List[AbstractEvent] = []
        for calendar, floating in parsed:
            start_floating = floating.get("DTSTART", False)
            # an end computed from DURATION follows DTSTART
            end_floating = floating.get("DTEND", start_floating)
            for item in calendar.events:
                event = self._to_abstract(item, start_floating, end_floating)
                if event is not None:
                    events.append(event)
        events.sort(key=lambda e: e.start_time)
        logger.info("Parsed %d iCalendar events from %s", len(events), url or "content")
        return events

    @staticmethod
    def _to_abstract(item, start_floating: bool, end_floating: bool) -> Optional[AbstractEvent]:
        if item.begin is None or not _clean(item.name):
            logger.debug("Skipping iCalendar event without summary or start: %r", item.uid)
            return None
        start = _local(item.begin, start_floating)
        end = _local(item.end, end_floating) if item.has_end() else None
        if item.all_day:
            start = start_of_day(start)
            # DTEND of an all-day event is the exclusive next midnight
            last_day = end - timedelta(days=1) if end is not None else start
            end = end_of_day(last_day) if last_day > start else None
        location = _clean(item.location)
        return AbstractEvent(
            title=_clean(item.name),
            start_time=start,
            end_time=end,
            description=_clean(item.description),
            url=_clean(item.url),
            location=AbstractLocation(title=location) if location else None,
            tags=sorted(item.categories or [], key=str.lower),
        )
