"""
Terminal fallback tier: a synthetic but schema-valid trend record.

Used when both Google Trends and the LLM are unavailable (typically quota
exhaustion). Shape is fixed; only the history values are random. Pass a
seeded random.Random to make the values reproducible.
"""

import random
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from pintrends.schemas.base import DEFAULT_CATEGORY, MAX_HISTORY_POINTS, TrendSource
from pintrends.schemas.trends import HistoryPoint, TrendRecord

FALLBACK_MOMENTUM = 72
FALLBACK_VOLUME = 12500
FALLBACK_HISTORY_RANGE = (40, 100)

RELATED_TEMPLATES = (
    "{kw} ideas",
    "{kw} aesthetic",
    "best {kw}",
    "{kw} diy",
    "{kw} trends",
)


def synthesize_fallback(
    keyword: str,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> TrendRecord:
    """Build a fallback TrendRecord for *keyword*. Cannot fail."""
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    today: date = now.date()

    low, high = FALLBACK_HISTORY_RANGE
    history = [
        HistoryPoint(
            date=(today - timedelta(days=MAX_HISTORY_POINTS - 1 - i)).isoformat(),
            value=rng.randint(low, high),
        )
        for i in range(MAX_HISTORY_POINTS)
    ]

    return TrendRecord(
        keyword=keyword,
        category=DEFAULT_CATEGORY,
        momentum_score=FALLBACK_MOMENTUM,
        search_volume=FALLBACK_VOLUME,
        related_keywords=[t.format(kw=keyword) for t in RELATED_TEMPLATES],
        historical_data=history,
        source=TrendSource.FALLBACK,
        resolved_at=now,
    )
