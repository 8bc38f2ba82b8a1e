"""
Event search: engines plus the global engine selector.
"""

from eventhub.search.engines import SearchResult, SqlSearchEngine, FullTextSearchEngine  # noqa: F401
from eventhub.search.search_service import (  # noqa: F401
    get_search_engine,
    get_search_engine_kind,
    set_search_engine_kind,
    search_events,
    search_supports_score,
    search_grouped_by_currentness,
)

__all__ = [
    "SearchResult",
    "SqlSearchEngine",
    "FullTextSearchEngine",
    "get_search_engine",
    "get_search_engine_kind",
    "set_search_engine_kind",
    "search_events",
    "search_supports_score",
    "search_grouped_by_currentness",
]
