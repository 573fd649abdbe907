"""
Trend resolution orchestrator.

Flow for one query:

  CacheCheck ──fresh──────────────────────────────────────────────► Served
      │ miss/stale
      ▼
  SignalFetch (Google Trends, best effort)
      ▼
  EnrichmentFetch (LLM, steered by the signal when present)
      │
      ├─ at least one tier succeeded → Merge ─────► Persist ─► Served
      └─ both unavailable ───────────► Fallback ──► Persist ─► Served

Nothing is retried inside one resolution. A failed tier is simply absent,
the fallback tier cannot fail, and a store write failure is logged while the
computed record is still returned, so resolve() always produces a record.
Persisting fallback records too means a caller retrying within the TTL hits
the cache instead of the upstream providers.

Concurrent resolutions of the same keyword in one process share a single
in-flight task when single_flight is enabled (the default).
"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from pintrends.config import Settings, get_settings
from pintrends.schemas.trends import TrendRecord, lookup_key, normalize_keyword
from pintrends.trends.enrichment import TrendEnricher
from pintrends.trends.fallback import synthesize_fallback
from pintrends.trends.merge import merge_tiers
from pintrends.trends.signals.search_interest import SearchInterestSignal
from pintrends.trends.store import TrendStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrendResolver:
    """Resolve a keyword into a TrendRecord across cache, signal, enrichment and fallback."""

    def __init__(
        self,
        store: TrendStore,
        signal: SearchInterestSignal,
        enricher: TrendEnricher,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.signal = signal
        self.enricher = enricher
        self.settings = settings or get_settings()
        self._rng = rng or random.Random()
        self._clock = clock
        self._inflight: Dict[str, asyncio.Future] = {}

    async def resolve(self, query: str) -> TrendRecord:
        """Resolve *query*. Raises ValueError only for a blank query."""
        keyword = normalize_keyword(query)
        if not keyword:
            raise ValueError("query must be a non-empty string")

        if not self.settings.single_flight:
            return await self._resolve(keyword)

        key = lookup_key(keyword)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve(keyword))
            self._inflight[key] = task
            task.add_done_callback(lambda _t, k=key: self._inflight.pop(k, None))
        else:
            logger.debug(f"Joining in-flight resolution for '{keyword}'")
        # shield: one caller going away must not cancel the shared resolution
        return await asyncio.shield(task)

    async def _resolve(self, keyword: str) -> TrendRecord:
        cached = await self._read_cache(keyword)
        if cached is not None and cached.is_fresh(self._clock(), self.settings.trend_cache_ttl_seconds):
            logger.info(f"Cache hit for '{keyword}' ({cached.source.value})")
            return cached

        signal = await self.signal.fetch(keyword)
        enrichment = await self.enricher.enrich(keyword, signal)

        resolved_at = self._clock()
        if signal is None and enrichment is None:
            logger.warning(f"All providers unavailable for '{keyword}', serving fallback")
            record = synthesize_fallback(keyword, rng=self._rng, now=resolved_at)
        else:
            record = merge_tiers(keyword, signal, enrichment, now=resolved_at)

        await self._persist(record)
        logger.info(
            f"Resolved '{keyword}' via {record.source.value}: momentum={record.momentum_score} "
            f"volume={record.search_volume} related={len(record.related_keywords)}"
        )
        return record

    async def _read_cache(self, keyword: str) -> Optional[TrendRecord]:
        """Store read off the event loop; an unreadable store counts as a miss."""
        try:
            return await asyncio.to_thread(self.store.get, keyword)
        except SQLAlchemyError as e:
            logger.error(f"Trend cache read failed for '{keyword}': {e}")
            return None

    async def _persist(self, record: TrendRecord) -> None:
        """Best-effort store write off the event loop; the record is served either way."""
        try:
            await asyncio.to_thread(self.store.put, record)
        except SQLAlchemyError as e:
            logger.error(f"Failed to persist trend '{record.keyword}': {e}")
