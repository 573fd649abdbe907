"""
HTTP surface tests. app.state is wired by hand with fakes so the lifespan
(and its real providers) never runs.
"""

import random
from datetime import datetime

from fastapi.testclient import TestClient

from pintrends.config import Settings
from pintrends.database import Database
from pintrends.main import create_app
from pintrends.schemas import SignalResult
from pintrends.tools.provider_health import ProviderHealthTracker
from pintrends.trends.resolver import TrendResolver
from pintrends.trends.store import TrendStore


class FakeSignal:
    def __init__(self, result=None):
        self.result = result

    async def fetch(self, keyword):
        return self.result


class FakeEnricher:
    async def enrich(self, keyword, signal=None):
        return None


def _client(database_url="sqlite://", signal_result=None, **settings):
    s = Settings(_env_file=None, **settings)
    db = Database(database_url)
    store = TrendStore(db)
    if database_url == "sqlite://":
        db.create_tables()
    health = ProviderHealthTracker(db_path=None, settings=s)

    app = create_app()
    app.state.settings = s
    app.state.db = db
    app.state.store = store
    app.state.health = health
    app.state.resolver = TrendResolver(
        store, FakeSignal(signal_result), FakeEnricher(), settings=s, rng=random.Random(3),
    )
    return TestClient(app), app


# ════════════════════════════════════════════════════════════════════
# /api/trending/search
# ════════════════════════════════════════════════════════════════════

def test_search_returns_record():
    client, _ = _client(signal_result=SignalResult(momentum_score=66, search_volume=4000, related=["linen"]))
    resp = client.get("/api/trending/search", params={"q": "Linen  Shirts"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["keyword"] == "Linen Shirts"
    assert body["source"] == "Signal"
    assert body["momentum_score"] == 66
    assert body["category"] == "General"


def test_search_fallback_when_providers_down():
    client, _ = _client()
    body = client.get("/api/trending/search", params={"q": "boho bedroom"}).json()
    assert body["source"] == "Fallback"
    assert len(body["historical_data"]) == 7
    assert body["related_keywords"][0] == "boho bedroom ideas"


def test_search_requires_query():
    client, _ = _client()
    assert client.get("/api/trending/search").status_code == 400
    assert client.get("/api/trending/search", params={"q": "   "}).status_code == 400


def test_search_persists_record():
    client, app = _client()
    client.get("/api/trending/search", params={"q": "boho bedroom"})
    assert app.state.store.get("BOHO BEDROOM") is not None


# ════════════════════════════════════════════════════════════════════
# /api/trends and seeding
# ════════════════════════════════════════════════════════════════════

def test_list_trends_after_seed():
    client, _ = _client()
    resp = client.post("/api/admin/seed-trends")
    assert resp.json() == {"status": "ok", "seeded": 5}

    trends = client.get("/api/trends").json()
    assert [t["momentum_score"] for t in trends] == sorted((t["momentum_score"] for t in trends), reverse=True)
    assert all(t["source"] == "Seed" for t in trends)


def test_list_trends_search_filter():
    client, _ = _client()
    client.post("/api/admin/seed-trends")
    trends = client.get("/api/trends", params={"q": "vegan"}).json()
    assert [t["keyword"] for t in trends] == ["Quick Vegan Recipes"]


def test_seed_requires_api_key_when_configured():
    client, _ = _client(api_key="secret")
    assert client.post("/api/admin/seed-trends").status_code == 401
    assert client.post("/api/admin/seed-trends", headers={"X-API-Key": "secret"}).status_code == 200


# ════════════════════════════════════════════════════════════════════
# /health
# ════════════════════════════════════════════════════════════════════

def test_health_ok():
    client, app = _client()
    app.state.health.record_failure("google_trends", "429")

    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["providers"]["google_trends"]["status"] == "degraded"
    datetime.fromisoformat(body["timestamp"])


def test_health_reports_database_down():
    client, _ = _client(database_url="sqlite:////nonexistent-dir/pintrends.db")
    resp = client.get("/health")
    assert resp.status_code == 503
    assert resp.json()["database"] == "disconnected"
