"""
Search interest signal: measured trend data from Google Trends.

NOT just an API wrapper. This signal answers the question:
  "Is interest in this keyword rising or falling right now, and how big is it?"

HOW IT WORKS:
  1. Build one Google Trends payload for the keyword over the lookback window
     (default 7 days ending today)
  2. Fetch interest_over_time AND related_queries. Both belong to one logical
     fetch: if either fails, the whole signal is unavailable
  3. Collapse the series to one point per day (Google may answer hourly)
  4. momentum = clamp(50 + 2 × (last − previous), 0, 100)
     volume   = round(last × 1000), a linear scale-up of relative interest
     related  = top 5 ranked related queries (empty list is fine)

FAILURE CONTRACT: transport errors, 429s, parse errors, empty series and
timeouts all resolve to None ("unavailable"). Nothing raises past fetch().
Only transport failures and timeouts count against the provider in the
circuit breaker; a keyword Google has no data for is a per-keyword miss.

DATA SOURCE: pytrends (unofficial Google Trends client). Blocking, so it runs
in a worker thread bounded by provider_timeout_seconds. A timed-out thread is
not cancelled; it finishes in the background and its result is dropped.
"""

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd
from pytrends.request import TrendReq

from pintrends.config import Settings, get_settings
from pintrends.schemas.base import MAX_SIGNAL_RELATED
from pintrends.schemas.trends import HistoryPoint, SignalResult, clamp_momentum
from pintrends.tools.provider_health import ProviderHealthTracker

logger = logging.getLogger(__name__)

PROVIDER_NAME = "google_trends"

# Momentum is centred at 50 and amplified ×2 by the last day-over-day change
_MOMENTUM_BASE = 50
_MOMENTUM_SLOPE = 2
# Relative interest (0-100) → rough monthly search estimate
_VOLUME_SCALE = 1000


# ── Pure computations ──────────────────────────────────────────────────────

def compute_momentum(values: Sequence[float]) -> int:
    """Momentum from the final two samples; missing samples count as 0."""
    last = values[-1] if len(values) >= 1 else 0
    prev = values[-2] if len(values) >= 2 else 0
    return clamp_momentum(_MOMENTUM_BASE + _MOMENTUM_SLOPE * (last - prev))


def estimate_volume(values: Sequence[float]) -> int:
    """Volume estimate from the last normalized interest sample."""
    last = values[-1] if values else 0
    return max(0, int(round(last * _VOLUME_SCALE)))


def daily_history(df: Optional[pd.DataFrame], keyword: str, days: int = 7) -> List[HistoryPoint]:
    """Collapse an interest_over_time frame to at most *days* daily points."""
    if df is None or df.empty:
        return []
    if keyword in df.columns:
        series = df[keyword]
    else:
        value_cols = [c for c in df.columns if c != "isPartial"]
        if not value_cols:
            return []
        series = df[value_cols[0]]

    series = pd.to_numeric(series, errors="coerce")
    series.index = pd.to_datetime(series.index)
    series = series.resample("D").mean().dropna()
    if series.empty:
        return []

    series = series.iloc[-days:]
    return [
        HistoryPoint(date=ts.strftime("%Y-%m-%d"), value=round(max(0.0, float(v)), 1))
        for ts, v in series.items()
    ]


def top_related(related: Optional[Dict[str, Any]], keyword: str, limit: int = MAX_SIGNAL_RELATED) -> List[str]:
    """Top ranked related queries for *keyword* from a related_queries() answer."""
    if not related:
        return []
    entry = related.get(keyword)
    if entry is None:
        entry = next(iter(related.values()), None)
    if not isinstance(entry, dict):
        return []
    top = entry.get("top")
    if top is None or top.empty or "query" not in top.columns:
        return []
    return [str(q) for q in top["query"].head(limit).tolist()]


# ── Provider adapter ───────────────────────────────────────────────────────

class SearchInterestSignal:
    """Google Trends signal provider.

    Usage:
        signal = SearchInterestSignal()
        result = await signal.fetch("minimalist decor")   # SignalResult | None
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        health: Optional[ProviderHealthTracker] = None,
        client_factory: Optional[Callable[[], Any]] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.settings = settings or get_settings()
        self.health = health or ProviderHealthTracker(settings=self.settings)
        self._client_factory = client_factory or self._default_client
        self._today = today or (lambda: datetime.now(timezone.utc).date())

    def _default_client(self) -> TrendReq:
        timeout = self.settings.provider_timeout_seconds
        return TrendReq(
            hl=self.settings.trends_hl,
            tz=self.settings.trends_tz,
            timeout=(timeout, timeout),
        )

    def timeframe(self) -> str:
        """Explicit date range ending today; Google answers daily resolution."""
        end = self._today()
        start = end - timedelta(days=self.settings.trends_lookback_days - 1)
        return f"{start:%Y-%m-%d} {end:%Y-%m-%d}"

    async def fetch(self, keyword: str) -> Optional[SignalResult]:
        """Fetch the measured signal for *keyword*, or None when unavailable."""
        if not self.health.is_available(PROVIDER_NAME):
            logger.info(f"Google Trends in backoff, skipping signal for '{keyword}'")
            return None

        timeout = self.settings.provider_timeout_seconds
        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(self._fetch_sync, keyword),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Google Trends timed out after {timeout:.0f}s for '{keyword}'")
            self.health.record_failure(PROVIDER_NAME, "timeout")
            return None
        except Exception as e:
            logger.warning(f"Google Trends unavailable for '{keyword}': {type(e).__name__}: {str(e)[:200]}")
            self.health.record_failure(PROVIDER_NAME, str(e))
            return None

        self.health.record_success(PROVIDER_NAME)
        if result is None:
            logger.info(f"Google Trends has no usable data for '{keyword}'")
            return None
        logger.info(
            f"Google Trends '{keyword}': momentum={result.momentum_score} "
            f"volume={result.search_volume} related={len(result.related)}"
        )
        return result

    def _fetch_sync(self, keyword: str) -> Optional[SignalResult]:
        """Blocking fetch. Raises on transport failure, None when there is no data."""
        client = self._client_factory()
        client.build_payload([keyword], timeframe=self.timeframe(), geo=self.settings.trends_geo)

        interest = client.interest_over_time()
        related = client.related_queries()

        try:
            history = daily_history(interest, keyword, days=self.settings.trends_lookback_days)
            if not history:
                return None
            values = [p.value for p in history]
            return SignalResult(
                momentum_score=compute_momentum(values),
                search_volume=estimate_volume(values),
                related=top_related(related, keyword),
                history=history,
            )
        except (ValueError, TypeError, KeyError, OverflowError) as e:
            logger.warning(f"Google Trends answer for '{keyword}' unparseable: {str(e)[:200]}")
            return None
