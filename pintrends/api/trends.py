"""Trends API router -- keyword resolution and stored-trend listing.

Resolution never fails outward: provider outages degrade to cached, merged
or synthetic data, visible only through the `source` field.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from pintrends.api.dependencies import AppSettings, Resolver, Store, verify_api_key
from pintrends.api.schemas import SeedResponse, TrendResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/trending/search", response_model=TrendResponse)
async def search_trend(resolver: Resolver, q: Optional[str] = Query(default=None)):
    """Resolve one keyword into a trend record."""
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Query required")
    record = await resolver.resolve(q)
    return TrendResponse.from_record(record)


@router.get("/trends", response_model=List[TrendResponse])
def list_trends(store: Store, q: Optional[str] = Query(default=None), limit: int = Query(default=20, ge=1, le=100)):
    """Stored trends by momentum, optionally filtered by keyword substring."""
    return [TrendResponse.from_record(r) for r in store.list_trends(query=q, limit=limit)]


@router.post("/admin/seed-trends", response_model=SeedResponse, dependencies=[Depends(verify_api_key)])
def seed_trends(store: Store, settings: AppSettings):
    """Overwrite the demonstration trends."""
    seeded = store.seed_defaults(settings.trend_cache_ttl_seconds, overwrite=True)
    return SeedResponse(status="ok", seeded=seeded)
