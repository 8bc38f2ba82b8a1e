"""
hCalendar microformat parser.

Reads ``.vevent`` blocks from an HTML page with BeautifulSoup. Dates come from
``abbr[title]``, ``time[datetime]``, a ``.value-title[title]`` child or the
element text, parsed with dateutil. A ``.location`` holding a ``.vcard`` is
read as an hCard (``fn``/``org``, ``adr`` parts, ``geo``, contact fields);
otherwise its text becomes the venue title.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from dateutil import parser as duparser

from eventhub.parsers.abstract import AbstractEvent, AbstractLocation
from eventhub.utils.dates import to_naive_local

logger = logging.getLogger(__name__)


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = " ".join(value.split())
    return text or None


def _outside(node, excluded: Iterable) -> bool:
    excluded = [e for e in excluded if e is not None]
    return not any(parent is e for parent in node.parents for e in excluded)


def _find(scope, cls: str, *, exclude: Iterable = ()):
    for node in scope.select(f".{cls}"):
        if _outside(node, exclude):
            return node
    return None


def _text(scope, cls: str, *, exclude: Iterable = ()) -> Optional[str]:
    node = _find(scope, cls, exclude=exclude)
    if node is None:
        return None
    if node.name == "abbr" and node.get("title"):
        return clean_text(node["title"])
    return clean_text(node.get_text(" "))


def _link(scope, cls: str, base_url: Optional[str], *, exclude: Iterable = ()) -> Optional[str]:
    node = _find(scope, cls, exclude=exclude)
    if node is None:
        return None
    value = node.get("href") or clean_text(node.get_text(" "))
    if value and node.get("href") and base_url:
        value = urljoin(base_url, value)
    return value


def _datetime(scope, cls: str) -> Optional[datetime]:
    node = _find(scope, cls)
    if node is None:
        return None
    value_title = node.select_one(".value-title[title]")
    if value_title is not None:
        raw = value_title["title"]
    elif node.name == "abbr" and node.get("title"):
        raw = node["title"]
    elif node.name == "time" and node.get("datetime"):
        raw = node["datetime"]
    else:
        raw = node.get_text(" ")
    try:
        return to_naive_local(duparser.parse(raw.strip()))
    except (ValueError, OverflowError):
        logger.debug("Unparseable %s value %r", cls, raw)
        return None


def _float(value: Optional[str]) -> Optional[float]:
    try:
        return float(value) if value else None
    except ValueError:
        return None


def _location(node, base_url: Optional[str]) -> Optional[AbstractLocation]:
    if node is None:
        return None
    card = node if "vcard" in (node.get("class") or []) else node.select_one(".vcard")
    if card is None:
        title = clean_text(node.get_text(" "))
        return AbstractLocation(title=title) if title else None

    location = AbstractLocation(
        title=_text(card, "fn") or _text(card, "org"),
        description=_text(card, "note"),
        url=_link(card, "url", base_url),
        email=_text(card, "email"),
        telephone=_text(card, "tel"),
    )
    adr = card.select_one(".adr")
    if adr is not None:
        location.street_address = _text(adr, "street-address")
        location.locality = _text(adr, "locality")
        location.region = _text(adr, "region")
        location.postal_code = _text(adr, "postal-code")
        location.country = _text(adr, "country-name")
    geo = card.select_one(".geo")
    if geo is not None:
        location.latitude = _float(_text(geo, "latitude"))
        location.longitude = _float(_text(geo, "longitude"))
        if location.latitude is None and geo.name == "abbr" and ";" in (geo.get("title") or ""):
            lat, _, lon = geo["title"].partition(";")
            location.latitude, location.longitude = _float(lat), _float(lon)
    return location if location.title else None


def _tags(vevent) -> List[str]:
    names = [clean_text(n.get_text(" ")) for n in vevent.select(".category, a[rel~=tag]")]
    seen, tags = set(), []
    for name in names:
        if name and name.lower() not in seen:
            seen.add(name.lower())
            tags.append(name)
    return tags


class HcalParser:
    name = "hcal"

    @staticmethod
    def matches(content: str) -> bool:
        return "vevent" in (content or "")

    def parse(self, content: str, url: Optional[str] = None) -> List[AbstractEvent]:
        soup = BeautifulSoup(content or "", "html.parser")
        events: List[AbstractEvent] = []
        for vevent in soup.select(".vevent"):
            location_node = _find(vevent, "location")
            title = _text(vevent, "summary", exclude=[location_node])
            start = _datetime(vevent, "dtstart")
            if not title or start is None:
                logger.debug("Skipping hCalendar entry without summary or dtstart")
                continue
            end = _datetime(vevent, "dtend")
            description = _find(vevent, "description", exclude=[location_node])
            events.append(
                AbstractEvent(
                    title=title,
                    start_time=start,
                    end_time=end if end is None or end >= start else None,
                    description=(description.get_text("\n", strip=True) or None) if description else None,
                    url=_link(vevent, "url", url, exclude=[location_node]),
                    location=_location(location_node, url),
                    tags=_tags(vevent),
                )
            )
        logger.info("Parsed %d hCalendar events from %s", len(events), url or "content")
        return events
