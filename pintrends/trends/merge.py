"""
Merge & normalize: combine the measured and generative tiers into one record.

Precedence favours the measured Google Trends tier for quantitative fields
(momentum, history) and the generative tier for qualitative ones (category,
Pinterest phrasing of related keywords):

  field             | both present                  | signal only | enrichment only
  ------------------+-------------------------------+-------------+-----------------
  category          | E.category                    | "General"   | E.category
  momentum_score    | S.momentum_score              | S           | E or 50
  search_volume     | mean(S.volume, E.volume)      | S           | E or 1000
  related_keywords  | S.related ∪ E.related (≤ 8)   | S           | E
  historical_data   | S.history                     | S           | E
  source            | Signal+Enrichment             | Signal      | Enrichment

E.volume / E.related mean whichever estimate the enrichment tier contributed
(pinterest_* in steered mode, the plain fields otherwise). If the enrichment
tier omitted a volume, the signal volume stands alone instead of being halved.
"""

from datetime import datetime, timezone
from typing import Optional

from pintrends.schemas.base import (
    DEFAULT_CATEGORY,
    DEFAULT_MOMENTUM,
    DEFAULT_SEARCH_VOLUME,
    TrendSource,
)
from pintrends.schemas.trends import (
    EnrichmentResult,
    SignalResult,
    TrendRecord,
    dedupe_keywords,
)


def merge_tiers(
    keyword: str,
    signal: Optional[SignalResult],
    enrichment: Optional[EnrichmentResult],
    now: Optional[datetime] = None,
) -> TrendRecord:
    """Merge tier outputs for *keyword*. At least one tier must be present."""
    if signal is None and enrichment is None:
        raise ValueError("merge_tiers needs at least one tier; use the fallback synthesizer")

    now = now or datetime.now(timezone.utc)

    category = (enrichment.category if enrichment else None) or DEFAULT_CATEGORY

    if signal is not None:
        momentum = signal.momentum_score
    elif enrichment.momentum_score is not None:
        momentum = enrichment.momentum_score
    else:
        momentum = DEFAULT_MOMENTUM

    volumes = []
    if signal is not None:
        volumes.append(signal.search_volume)
    if enrichment is not None and enrichment.volume_estimate is not None:
        volumes.append(enrichment.volume_estimate)
    search_volume = sum(volumes) / len(volumes) if volumes else DEFAULT_SEARCH_VOLUME

    related = []
    if signal is not None:
        related.extend(signal.related)
    if enrichment is not None:
        related.extend(enrichment.related_estimate)
    related = dedupe_keywords(related)

    if signal is not None:
        history = signal.history
    elif enrichment is not None:
        history = enrichment.history
    else:
        history = []

    if signal is not None and enrichment is not None:
        source = TrendSource.SIGNAL_ENRICHMENT
    elif signal is not None:
        source = TrendSource.SIGNAL
    else:
        source = TrendSource.ENRICHMENT

    return TrendRecord(
        keyword=keyword,
        category=category,
        momentum_score=momentum,
        search_volume=search_volume,
        related_keywords=related,
        historical_data=history,
        source=source,
        resolved_at=now,
    )
