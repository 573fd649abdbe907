"""
TrendStore tests against an in-memory SQLite database.
"""

from datetime import datetime, timedelta, timezone

from pintrends.database import Database
from pintrends.schemas import HistoryPoint, TrendRecord, TrendSource
from pintrends.trends.store import SEED_TRENDS, TrendStore

NOW = datetime(2024, 5, 7, 12, 0, tzinfo=timezone.utc)


def _store():
    db = Database("sqlite://")
    db.create_tables()
    return TrendStore(db)


def _record(keyword="Minimalist Decor", momentum=80, source=TrendSource.SIGNAL_ENRICHMENT, **overrides):
    fields = dict(
        keyword=keyword, category="Home Decor", momentum_score=momentum, search_volume=6000,
        related_keywords=["minimalist", "decor ideas"],
        historical_data=[HistoryPoint(date="2024-05-06", value=40), HistoryPoint(date="2024-05-07", value=50)],
        source=source, resolved_at=NOW,
    )
    fields.update(overrides)
    return TrendRecord(**fields)


def test_put_then_get_round_trips():
    store = _store()
    record = _record()
    store.put(record)
    assert store.get("Minimalist Decor") == record


def test_get_is_case_insensitive():
    store = _store()
    store.put(_record())
    assert store.get("  MINIMALIST   decor ").keyword == "Minimalist Decor"


def test_get_missing_returns_none():
    assert _store().get("nothing here") is None


def test_put_replaces_existing_entry():
    store = _store()
    store.put(_record(momentum=80))
    store.put(_record(keyword="minimalist decor", momentum=30, source=TrendSource.FALLBACK))

    assert store.count() == 1
    stored = store.get("minimalist decor")
    assert stored.momentum_score == 30
    assert stored.source == TrendSource.FALLBACK
    assert stored.keyword == "minimalist decor"


def test_resolved_at_comes_back_utc():
    store = _store()
    store.put(_record(resolved_at=NOW.astimezone(timezone(timedelta(hours=5)))))
    assert store.get("minimalist decor").resolved_at == NOW


def test_list_trends_orders_by_momentum():
    store = _store()
    store.put(_record("a", momentum=10))
    store.put(_record("b", momentum=90))
    store.put(_record("c", momentum=50))
    assert [r.keyword for r in store.list_trends()] == ["b", "c", "a"]


def test_list_trends_filters_and_limits():
    store = _store()
    store.put(_record("Vegan Recipes", momentum=70))
    store.put(_record("quick vegan snacks", momentum=90))
    store.put(_record("boho bedroom", momentum=99))

    assert [r.keyword for r in store.list_trends(query="VEGAN")] == ["quick vegan snacks", "Vegan Recipes"]
    assert len(store.list_trends(limit=2)) == 2


def test_list_trends_escapes_wildcards():
    store = _store()
    store.put(_record("100% cotton"))
    store.put(_record("1000 cotton"))
    assert [r.keyword for r in store.list_trends(query="100%")] == ["100% cotton"]


def test_seed_defaults_are_stale():
    store = _store()
    assert store.seed_defaults(ttl_seconds=600) == len(SEED_TRENDS)

    record = store.get("minimalist home decor")
    assert record.source == TrendSource.SEED
    assert not record.is_fresh(datetime.now(timezone.utc), 600)


def test_seed_defaults_does_not_overwrite_resolved_records():
    store = _store()
    store.put(_record("Minimalist Home Decor", momentum=12))
    assert store.seed_defaults(ttl_seconds=600) == len(SEED_TRENDS) - 1
    assert store.get("minimalist home decor").momentum_score == 12


def test_seed_defaults_overwrite():
    store = _store()
    store.put(_record("Minimalist Home Decor", momentum=12))
    store.seed_defaults(ttl_seconds=600, overwrite=True)
    assert store.get("minimalist home decor").momentum_score == 95
