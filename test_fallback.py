"""
Fallback synthesizer tests.
"""

import random
from datetime import datetime, timezone

from pintrends.schemas import TrendSource
from pintrends.trends.fallback import FALLBACK_MOMENTUM, FALLBACK_VOLUME, synthesize_fallback

NOW = datetime(2024, 5, 7, 15, 30, tzinfo=timezone.utc)


def test_fallback_shape():
    record = synthesize_fallback("boho bedroom", rng=random.Random(1), now=NOW)

    assert record.source == TrendSource.FALLBACK
    assert record.category == "General"
    assert record.momentum_score == FALLBACK_MOMENTUM == 72
    assert record.search_volume == FALLBACK_VOLUME == 12500
    assert record.related_keywords == [
        "boho bedroom ideas",
        "boho bedroom aesthetic",
        "best boho bedroom",
        "boho bedroom diy",
        "boho bedroom trends",
    ]
    assert record.resolved_at == NOW


def test_fallback_history_is_last_seven_days():
    record = synthesize_fallback("kw", rng=random.Random(1), now=NOW)
    dates = [p.date for p in record.historical_data]
    assert dates[0] == "2024-05-01"
    assert dates[-1] == "2024-05-07"
    assert len(dates) == 7
    assert all(40 <= p.value <= 100 for p in record.historical_data)


def test_fallback_seeded_rng_is_reproducible():
    a = synthesize_fallback("kw", rng=random.Random(42), now=NOW)
    b = synthesize_fallback("kw", rng=random.Random(42), now=NOW)
    assert a.historical_data == b.historical_data
