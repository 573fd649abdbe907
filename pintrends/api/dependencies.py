"""FastAPI dependency injection -- Depends() patterns using app.state from lifespan."""

from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request

from pintrends.config import Settings
from pintrends.database import Database
from pintrends.trends.resolver import TrendResolver
from pintrends.trends.store import TrendStore


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> TrendStore:
    return request.app.state.store


def get_resolver(request: Request) -> TrendResolver:
    return request.app.state.resolver


async def verify_api_key(
    request: Request,
    x_api_key: Annotated[Optional[str], Header()] = None,
):
    """API key gate. Empty API_KEY env var = dev mode (all requests pass)."""
    required_key = request.app.state.settings.api_key
    if required_key and x_api_key != required_key:
        raise HTTPException(status_code=401, detail="Invalid API key")


# Type aliases for cleaner route signatures
DB = Annotated[Database, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Store = Annotated[TrendStore, Depends(get_store)]
Resolver = Annotated[TrendResolver, Depends(get_resolver)]
