"""
Global, swappable choice of event search engine.

The active kind comes from ``EVENTHUB_SEARCH_ENGINE`` (``sql`` by default) and
can be overridden at runtime with ``set_search_engine_kind``.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from eventhub.search.engines import (
    BaseSearchEngine,
    FullTextSearchEngine,
    SearchResult,
    SqlSearchEngine,
)
from eventhub.utils.settings import get_settings

logger = logging.getLogger(__name__)

SEARCH_ENGINES = {
    "sql": SqlSearchEngine,
    "fulltext": FullTextSearchEngine,
}

_kind_override: Optional[str] = None
_engines: Dict[str, BaseSearchEngine] = {}


def _validate_kind(kind: str) -> str:
    normalized = (kind or "").strip().lower()
    if normalized not in SEARCH_ENGINES:
        raise ValueError(
            f"Unknown search engine '{kind}'. Allowed: {', '.join(SEARCH_ENGINES)}"
        )
    return normalized


def get_search_engine_kind() -> str:
    return _kind_override or get_settings().search_engine


def set_search_engine_kind(kind: Optional[str]) -> None:
    """Select the engine for all later searches; ``None`` returns to the configured default."""
    global _kind_override
    _kind_override = _validate_kind(kind) if kind is not None else None
    logger.info("Search engine set to %s", get_search_engine_kind())


def get_search_engine() -> BaseSearchEngine:
    """Get or create the engine instance for the active kind."""
    kind = _validate_kind(get_search_engine_kind())
    if kind not in _engines:
        _engines[kind] = SEARCH_ENGINES[kind]()
    return _engines[kind]


def search_supports_score() -> bool:
    return get_search_engine().supports_score()


def search_events(
    db: Session,
    query: Optional[str],
    *,
    order: Optional[str] = None,
    skip_old: bool = False,
    limit: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[SearchResult]:
    return get_search_engine().search(
        db,
        query,
        order=order,
        skip_old=skip_old,
        limit=limit or get_settings().search_limit,
        now=now,
    )


def search_grouped_by_currentness(
    db: Session,
    query: Optional[str],
    *,
    order: Optional[str] = None,
    skip_old: bool = False,
    limit: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Dict[str, List[SearchResult]]:
    """Split search results into events still current and past ones, keeping rank order."""
    grouped: Dict[str, List[SearchResult]] = {"current": [], "past": []}
    for result in search_events(db, query, order=order, skip_old=skip_old, limit=limit, now=now):
        bucket = "current" if result.event.is_current(now) else "past"
        grouped[bucket].append(result)
    return grouped
