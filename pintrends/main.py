"""
Pin Trends - Main Entry Point.
FastAPI server and CLI interface.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import health, trends
from .config import Settings, get_settings
from .database import Database
from .tools.llm_tool import LLMTool
from .tools.provider_health import ProviderHealthTracker
from .trends.enrichment import TrendEnricher
from .trends.resolver import TrendResolver
from .trends.signals.search_interest import SearchInterestSignal
from .trends.store import TrendStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

# Suppress noisy loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_components(settings: Optional[Settings] = None, db: Optional[Database] = None) -> dict:
    """Wire store, providers and resolver from settings."""
    settings = settings or get_settings()
    db = db or Database(settings.database_url)
    db.create_tables()

    store = TrendStore(db)
    if settings.seed_trends and store.count() == 0:
        store.seed_defaults(settings.trend_cache_ttl_seconds)

    health_tracker = ProviderHealthTracker(
        db_path=settings.provider_health_path or None, settings=settings,
    )
    signal = SearchInterestSignal(settings=settings, health=health_tracker)
    llm = LLMTool(settings=settings, health=health_tracker)
    if not llm.any_configured:
        logger.warning("No enrichment provider configured (set GEMINI_API_KEY or OPENROUTER_API_KEY)")
    enricher = TrendEnricher(llm=llm)
    resolver = TrendResolver(store, signal, enricher, settings=settings)

    return {
        "settings": settings,
        "db": db,
        "store": store,
        "health": health_tracker,
        "resolver": resolver,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Pin Trends API...")
    for name, component in build_components().items():
        setattr(app.state, name, component)
    logger.info(f"Trend store ready ({app.state.store.count()} keywords)")
    yield
    app.state.db.engine.dispose()
    logger.info("Pin Trends API stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Pin Trends API",
        description="Keyword trend resolution combining Google Trends signals with LLM enrichment",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(trends.router, prefix="/api", tags=["trends"])
    return app


app = create_app()


def parse_args(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description="Pin Trends")
    parser.add_argument("keywords", nargs="*", help="Keywords to resolve")
    parser.add_argument(
        "--server",
        action="store_true",
        help="Start the FastAPI server"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Server port (default: 8000)"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List stored trends by momentum"
    )

    return parser.parse_args(argv)


async def cli_main(args):
    """Resolve keywords from the command line, or list stored trends."""
    components = build_components()
    store: TrendStore = components["store"]
    resolver: TrendResolver = components["resolver"]

    if args.list or not args.keywords:
        print("\n" + "=" * 60)
        print("STORED TRENDS")
        print("=" * 60)
        for record in store.list_trends():
            print(f"{record.momentum_score:>4}  {record.search_volume:>8}  {record.source.value:<18} {record.keyword}")
        print("=" * 60 + "\n")
        return

    for keyword in args.keywords:
        record = await resolver.resolve(keyword)
        print(json.dumps(record.model_dump(mode="json"), indent=2))


def main():
    """Entry point for CLI."""
    args = parse_args()
    if args.server:
        import uvicorn
        logger.info(f"Starting server on port {args.port}...")
        uvicorn.run(app, host="0.0.0.0", port=args.port)
        return
    asyncio.run(cli_main(args))


if __name__ == "__main__":
    main()
