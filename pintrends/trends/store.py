"""
Keyed record store for resolved trends.

One entry per case-folded keyword. Writes are whole-record replacements
(`session.merge` on the primary key, serialized by a process-local lock),
so a concurrent reader never observes a half-written record and the last
writer for a keyword wins. Freshness is a read-time predicate; nothing is
ever swept or deleted here.

Methods are blocking and thread-safe; async callers run them in a worker
thread. On a single-connection engine (in-memory SQLite) reads take the
write lock too.
"""

import json
import logging
import threading
from contextlib import nullcontext
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import func

from pintrends.database import Database, TrendKeywordModel
from pintrends.schemas.base import TrendSource
from pintrends.schemas.trends import HistoryPoint, TrendRecord, lookup_key

logger = logging.getLogger(__name__)

# Demonstration trends shown before anyone has searched
SEED_TRENDS = [
    {"keyword": "Minimalist Home Decor", "category": "Home", "momentum_score": 95, "search_volume": 50000},
    {"keyword": "Sustainable Fashion 2024", "category": "Fashion", "momentum_score": 88, "search_volume": 30000},
    {"keyword": "Quick Vegan Recipes", "category": "Food", "momentum_score": 92, "search_volume": 45000},
    {"keyword": "iOS 18 Customization", "category": "Tech", "momentum_score": 98, "search_volume": 120000},
    {"keyword": "Self-Care Sunday Routine", "category": "Lifestyle", "momentum_score": 85, "search_volume": 25000},
]


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TrendStore:
    """Persistent map: lookup key → last resolved TrendRecord."""

    def __init__(self, db: Database):
        self.db = db
        self._write_lock = threading.Lock()

    def _read_guard(self):
        return self._write_lock if self.db.single_connection else nullcontext()

    # ── Reads ────────────────────────────────────────────────────────

    def get(self, keyword: str) -> Optional[TrendRecord]:
        """Return the stored record for *keyword* (any casing) or None."""
        key = lookup_key(keyword)
        with self._read_guard(), self.db.get_session() as session:
            row = session.get(TrendKeywordModel, key)
            return self._row_to_record(row) if row else None

    def list_trends(self, query: Optional[str] = None, limit: int = 20) -> List[TrendRecord]:
        """Stored trends, highest momentum first, optionally filtered by substring."""
        with self._read_guard(), self.db.get_session() as session:
            q = session.query(TrendKeywordModel)
            if query and query.strip():
                q = q.filter(TrendKeywordModel.keyword_key.contains(lookup_key(query), autoescape=True))
            rows = q.order_by(
                TrendKeywordModel.momentum_score.desc(),
                TrendKeywordModel.keyword_key,
            ).limit(limit).all()
            return [self._row_to_record(r) for r in rows]

    def count(self) -> int:
        with self._read_guard(), self.db.get_session() as session:
            return session.query(func.count(TrendKeywordModel.keyword_key)).scalar() or 0

    # ── Writes ───────────────────────────────────────────────────────

    def put(self, record: TrendRecord) -> None:
        """Upsert *record*, replacing any previous entry for its keyword."""
        row = TrendKeywordModel(
            keyword_key=record.key,
            keyword=record.keyword,
            source=TrendSource(record.source).value,
            category=record.category,
            momentum_score=record.momentum_score,
            search_volume=record.search_volume,
            related_keywords=json.dumps(list(record.related_keywords)),
            historical_data=json.dumps([p.model_dump() for p in record.historical_data]),
            resolved_at=_to_naive_utc(record.resolved_at),
        )
        with self._write_lock:
            with self.db.get_session() as session:
                session.merge(row)  # merge = upsert
        logger.debug(f"TrendStore: stored '{record.keyword}' ({record.source.value})")

    def seed_defaults(self, ttl_seconds: float, overwrite: bool = False) -> int:
        """Insert the demonstration trends. Returns number of rows written.

        Seeded rows are stamped one TTL in the past so a search for one of
        them still resolves live data.
        """
        stale_at = datetime.now(timezone.utc) - timedelta(seconds=ttl_seconds)
        written = 0
        for seed in SEED_TRENDS:
            if not overwrite and self.get(seed["keyword"]) is not None:
                continue
            self.put(TrendRecord(source=TrendSource.SEED, resolved_at=stale_at, **seed))
            written += 1
        if written:
            logger.info(f"TrendStore: seeded {written} demonstration trends")
        return written

    # ── Serialization helpers ──

    @staticmethod
    def _row_to_record(row: TrendKeywordModel) -> TrendRecord:
        try:
            related = json.loads(row.related_keywords or "[]")
        except (json.JSONDecodeError, TypeError):
            related = []
        try:
            history = [HistoryPoint(**p) for p in json.loads(row.historical_data or "[]")]
        except (json.JSONDecodeError, TypeError, ValueError):
            history = []

        return TrendRecord(
            keyword=row.keyword,
            category=row.category or "General",
            momentum_score=row.momentum_score or 0,
            search_volume=row.search_volume or 0,
            related_keywords=related,
            historical_data=history,
            source=row.source,
            resolved_at=row.resolved_at,
        )
