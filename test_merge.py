"""
Merge policy tests: field precedence across the Signal and Enrichment tiers.
"""

from datetime import datetime, timezone

import pytest

from pintrends.schemas import EnrichmentResult, HistoryPoint, SignalResult, TrendSource
from pintrends.trends.merge import merge_tiers

NOW = datetime(2024, 5, 7, 12, 0, tzinfo=timezone.utc)

HISTORY = [HistoryPoint(date=f"2024-05-{d:02d}", value=40 + d) for d in range(1, 8)]


def _signal(**overrides):
    fields = dict(momentum_score=80, search_volume=5000, related=["minimalist"], history=HISTORY)
    fields.update(overrides)
    return SignalResult(**fields)


def test_both_tiers_end_to_end():
    enrichment = EnrichmentResult(
        steered=True, category="Home Decor", pinterest_volume=7000,
        pinterest_related=["decor ideas"],
    )
    record = merge_tiers("minimalist decor", _signal(), enrichment, now=NOW)

    assert record.keyword == "minimalist decor"
    assert record.category == "Home Decor"
    assert record.momentum_score == 80
    assert record.search_volume == 6000
    assert record.related_keywords == ["minimalist", "decor ideas"]
    assert record.historical_data == HISTORY
    assert record.source == TrendSource.SIGNAL_ENRICHMENT
    assert record.resolved_at == NOW


def test_signal_only():
    record = merge_tiers("kw", _signal(), None, now=NOW)
    assert record.category == "General"
    assert record.momentum_score == 80
    assert record.search_volume == 5000
    assert record.related_keywords == ["minimalist"]
    assert record.source == TrendSource.SIGNAL


def test_enrichment_only_uses_enrichment_fields():
    enrichment = EnrichmentResult(
        category="Fashion", momentum_score=64, search_volume=2400,
        related=["capsule wardrobe"], history=HISTORY,
    )
    record = merge_tiers("kw", None, enrichment, now=NOW)
    assert record.category == "Fashion"
    assert record.momentum_score == 64
    assert record.search_volume == 2400
    assert record.historical_data == HISTORY
    assert record.source == TrendSource.ENRICHMENT


def test_enrichment_only_defaults():
    record = merge_tiers("kw", None, EnrichmentResult(category="Tech"), now=NOW)
    assert record.momentum_score == 50
    assert record.search_volume == 1000
    assert record.related_keywords == []
    assert record.historical_data == []


def test_enrichment_without_category_defaults_to_general():
    record = merge_tiers("kw", _signal(), EnrichmentResult(steered=True, pinterest_volume=100), now=NOW)
    assert record.category == "General"


def test_missing_enrichment_volume_keeps_signal_volume():
    record = merge_tiers("kw", _signal(), EnrichmentResult(steered=True, category="DIY"), now=NOW)
    assert record.search_volume == 5000


def test_signal_momentum_wins_over_enrichment():
    enrichment = EnrichmentResult(category="DIY", momentum_score=10)
    record = merge_tiers("kw", _signal(momentum_score=90), enrichment, now=NOW)
    assert record.momentum_score == 90


def test_related_union_is_deduplicated_and_capped():
    signal = _signal(related=["a", "b", "c", "d", "e"])
    enrichment = EnrichmentResult(steered=True, pinterest_related=["c", "f", "g", "h", "i"])
    record = merge_tiers("kw", signal, enrichment, now=NOW)
    assert record.related_keywords == ["a", "b", "c", "d", "e", "f", "g", "h"]


def test_no_tiers_is_an_error():
    with pytest.raises(ValueError):
        merge_tiers("kw", None, None, now=NOW)
