"""
Calendar rendering for events: iCalendar via ``ics`` and hCalendar via Jinja2.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional
from zoneinfo import ZoneInfo

from ics import Calendar, Event as IcsEvent
from jinja2 import Environment, FileSystemLoader, select_autoescape

from eventhub.utils.settings import get_settings
from eventhub.utils.urls import build_event_url, get_app_base_url

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

UrlHelper = Callable[[object], str]

_template_env: Optional[Environment] = None


def default_url_helper(event) -> str:
    return build_event_url(event.id)


def _localize(value):
    """Attach the community zone to a stored naive time; ics reads naive values as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    tz_name = get_settings().timezone
    if tz_name:
        return value.replace(tzinfo=ZoneInfo(tz_name))
    # system zone, as in to_naive_local
    return value.astimezone()


def _location_text(venue) -> Optional[str]:
    if venue is None:
        return None
    address = venue.full_address
    return f"{venue.title}: {address}" if address else venue.title


def to_ical(events: Iterable, url_helper: Optional[UrlHelper] = None) -> str:
    """Serialize events to an iCalendar document.

    Events without their own url link to their page on this site.
    """
    url_helper = url_helper or default_url_helper
    calendar = Calendar()
    count = 0
    for event in events:
        item = IcsEvent()
        item.uid = f"{url_helper(event)}#event-{event.id}"
        item.name = event.title
        item.begin = _localize(event.start_time)
        if event.end_time is not None:
            item.end = _localize(event.end_time)
        item.url = event.url or url_helper(event)
        if event.description:
            item.description = event.description
        location = _location_text(event.venue)
        if location:
            item.location = location
        tag_names = [tag.name for tag in event.tags]
        if tag_names:
            item.categories = set(tag_names)
        calendar.events.add(item)
        count += 1
    logger.debug("Rendered %d events as iCalendar", count)
    return "".join(calendar)


def _get_template_env() -> Environment:
    global _template_env
    if _template_env is None:
        _template_env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
        )
    return _template_env


def to_hcal(events: Iterable, url_helper: Optional[UrlHelper] = None) -> str:
    """Render events as an hCalendar HTML fragment."""
    url_helper = url_helper or default_url_helper
    template = _get_template_env().get_template("hcal.html")
    return template.render(
        events=list(events),
        url_for=lambda event: event.url or url_helper(event),
        base_url=get_app_base_url(),
    )
