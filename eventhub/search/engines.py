"""
Event search engines.

Two interchangeable strategies share one contract: ``search`` takes a query
string and returns ranked ``SearchResult`` rows, ``supports_score`` reports
whether those rows carry relevance scores.

- ``SqlSearchEngine`` matches any keyword with case-insensitive substring
  predicates over title, description, url and venue title, or an exact tag name.
- ``FullTextSearchEngine`` uses PostgreSQL's ``tsvector``/``tsquery`` ranked
  with ``ts_rank_cd``. Other dialects fall back to the SQL engine with
  inverted-rank scores.
"""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session, selectinload

from eventhub.db import models
from eventhub.utils.dates import local_now, today as start_of_today

logger = logging.getLogger(__name__)

SEARCH_ORDERS = ("score", "date", "name", "venue")

_OPERATOR_RE = re.compile(r'"|\b(?:or|and|not)\b|(?:^|\s)-\w', re.IGNORECASE)


@dataclass
class SearchResult:
    event: models.Event
    score: Optional[float] = None


def split_keywords(query: Optional[str]) -> List[str]:
    return [term for term in (query or "").split() if term.strip()]


def current_clause(now: Optional[datetime] = None):
    """SQL form of ``Event.is_current``: ends (or starts, without an end) today or later."""
    Event = models.Event
    day = start_of_today(now)
    return or_(
        and_(Event.end_time.isnot(None), Event.end_time >= day),
        and_(Event.end_time.is_(None), Event.start_time >= day),
    )


class BaseSearchEngine:
    """Shared query scaffolding: duplicate exclusion, currentness and ordering."""

    name = "base"

    def supports_score(self) -> bool:
        return False

    def search(
        self,
        db: Session,
        query: Optional[str],
        *,
        order: Optional[str] = None,
        skip_old: bool = False,
        limit: int = 50,
        now: Optional[datetime] = None,
    ) -> List[SearchResult]:
        if order is not None and order not in SEARCH_ORDERS:
            raise ValueError(f"Unknown search order '{order}'. Allowed: {', '.join(SEARCH_ORDERS)}")
        if not split_keywords(query):
            return []
        started = time.time()
        results = self._search(db, query.strip(), order=order, skip_old=skip_old, limit=limit, now=now)
        logger.info(
            "%s search for '%s' returned %d results in %.2fms",
            self.name,
            query,
            len(results),
            (time.time() - started) * 1000,
        )
        return results

    def _search(self, db, query, *, order, skip_old, limit, now) -> List[SearchResult]:
        raise NotImplementedError

    def _base_query(self, db: Session, *columns, skip_old: bool = False, now: Optional[datetime] = None):
        Event = models.Event
        q = (
            db.query(Event, *columns)
            .outerjoin(models.Venue, Event.venue_id == models.Venue.id)
            .options(selectinload(Event.venue), selectinload(Event.event_tags).selectinload(models.EventTag.tag))
            .filter(Event.duplicate_of_id.is_(None))
        )
        if skip_old:
            q = q.filter(current_clause(now or local_now()))
        return q

    @staticmethod
    def _order_clauses(order: Optional[str]):
        Event = models.Event
        if order == "name":
            return [func.lower(Event.title), Event.start_time.desc(), Event.id]
        if order == "venue":
            return [
                models.Venue.title.is_(None),
                func.lower(models.Venue.title),
                Event.start_time.desc(),
                Event.id,
            ]
        # "date", and "score" on engines without scores
        return [Event.start_time.desc(), Event.id.desc()]


class SqlSearchEngine(BaseSearchEngine):
    name = "sql"

    def keyword_filter(self, keywords: List[str]):
        Event = models.Event
        clauses = []
        for keyword in keywords:
            pattern = f"%{keyword}%"
            tagged = (
                select(models.EventTag.event_id)
                .join(models.Tag, models.Tag.id == models.EventTag.tag_id)
                .where(func.lower(models.Tag.name) == keyword.lower())
            )
            clauses.append(
                or_(
                    Event.title.ilike(pattern),
                    Event.description.ilike(pattern),
                    Event.url.ilike(pattern),
                    models.Venue.title.ilike(pattern),
                    Event.id.in_(tagged),
                )
            )
        return or_(*clauses)

    def _search(self, db, query, *, order, skip_old, limit, now) -> List[SearchResult]:
        q = self._base_query(db, skip_old=skip_old, now=now).filter(self.keyword_filter(split_keywords(query)))
        events = q.order_by(*self._order_clauses(order)).limit(limit).all()
        return [SearchResult(event=event) for event in events]


class FullTextSearchEngine(BaseSearchEngine):
    name = "fulltext"

    def __init__(self):
        self._fallback = SqlSearchEngine()

    def supports_score(self) -> bool:
        return True

    @staticmethod
    def document():
        Event = models.Event
        text = func.coalesce(Event.title, "") + " " + func.coalesce(Event.description, "")
        return func.to_tsvector("english", text)

    @staticmethod
    def tsquery(query: str):
        # websearch syntax only when the user wrote operators or phrases
        if _OPERATOR_RE.search(query):
            return func.websearch_to_tsquery("english", query)
        return func.plainto_tsquery("english", query)

    def _search(self, db, query, *, order, skip_old, limit, now) -> List[SearchResult]:
        dialect_name = getattr(db.bind.dialect, "name", "") if getattr(db, "bind", None) else ""
        if dialect_name != "postgresql":
            logger.info(
                "Full-text search unavailable, using SQL fallback",
                extra={"fallback_reason": f"dialect {dialect_name} does not support PostgreSQL full-text"},
            )
            rows = self._fallback._search(db, query, order=order, skip_old=skip_old, limit=limit, now=now)
            # No real relevance here, so rank position stands in for the score
            return [
                SearchResult(event=row.event, score=1.0 - (i / (len(rows) + 1)))
                for i, row in enumerate(rows)
            ]

        tsquery = self.tsquery(query)
        rank = func.ts_rank_cd(self.document(), tsquery).label("rank")
        q = self._base_query(db, rank, skip_old=skip_old, now=now).filter(self.document().op("@@")(tsquery))
        if order in (None, "score"):
            q = q.order_by(rank.desc(), models.Event.start_time.desc(), models.Event.id)
        else:
            q = q.order_by(*self._order_clauses(order))
        return [SearchResult(event=event, score=float(score or 0.0)) for event, score in q.limit(limit).all()]
