"""Health check router -- DB status, provider breaker state, config summary."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from pintrends.api.dependencies import DB, AppSettings

router = APIRouter()


@router.get("/")
async def root():
    return {"service": "Pin Trends API", "version": "1.0.0"}


@router.get("/health")
def health(request: Request, db: DB, settings: AppSettings):
    db_ok = db.ping()
    providers = request.app.state.health.status_report()

    body = {
        "status": "ok" if db_ok else "error",
        "database": "connected" if db_ok else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "providers": providers,
        "config": {
            "primary_llm": settings.get_llm_config()["provider"],
            "trend_cache_ttl_seconds": settings.trend_cache_ttl_seconds,
            "provider_timeout_seconds": settings.provider_timeout_seconds,
            "single_flight": settings.single_flight,
        },
    }
    return JSONResponse(body, status_code=200 if db_ok else 503)
