"""
URL utilities: scheme normalization for stored links and absolute links
to events for calendar exports.

Primary source: APP_BASE_URL (e.g., https://calendar.example.org)
Fallback: APP_HOST (adds scheme heuristically if missing).
"""
from __future__ import annotations

import os
import re
from typing import Optional

_SCHEME_RE = re.compile(r"^[^\s:/]+://")


def normalize_url(url: Optional[str]) -> Optional[str]:
    """Return ``url`` with an ``http://`` prefix when it has no scheme.

    Blank values normalize to ``None``.
    """
    if url is None:
        return None
    value = url.strip()
    if not value:
        return None
    if _SCHEME_RE.match(value):
        return value
    return f"http://{value}"


def _add_scheme_if_missing(host: str) -> str:
    h = host.strip()
    if not h:
        return "http://localhost:8000"
    if h.startswith("http://") or h.startswith("https://"):
        return h
    # Simple heuristic: use http for localhost, otherwise https
    lower = h.lower()
    if lower.startswith("localhost") or lower.startswith("127.0.0.1"):
        return f"http://{h}"
    return f"https://{h}"


def _strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


def get_app_base_url() -> str:
    """Return normalized base URL for the public site.

    Precedence:
    1. APP_BASE_URL (recommended)
    2. APP_HOST (legacy), scheme added if missing
    Defaults to http://localhost:8000 if neither is set.
    """
    base = os.getenv("APP_BASE_URL")
    if base and base.strip():
        return _strip_trailing_slash(base.strip())
    host = os.getenv("APP_HOST")
    if host and host.strip():
        full = _add_scheme_if_missing(host.strip())
        return _strip_trailing_slash(full)
    return "http://localhost:8000"


def build_event_url(event_id: int) -> str:
    """Absolute link to an event's page."""
    return f"{get_app_base_url()}/events/{event_id}"
