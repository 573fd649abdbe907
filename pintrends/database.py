"""
SQLite database: persists resolved trend records.

Tables:
  - trending_keywords: one row per case-folded keyword (upsert-only), holding
    the last resolved TrendRecord, its provenance tag and resolution time.

related_keywords and historical_data are stored as JSON text and decoded
back into native lists at read time.
"""

import logging
from typing import Optional

from sqlalchemy import (
    create_engine, text, Column, String, Integer, Text, DateTime,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager

from .config import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


# ── Models ───────────────────────────────────────────────────────────────────

class TrendKeywordModel(Base):
    """Last resolved trend record per keyword."""
    __tablename__ = "trending_keywords"

    keyword_key = Column(String(300), primary_key=True)  # case-folded lookup key
    keyword = Column(String(300), nullable=False)        # display form
    source = Column(String(30), nullable=False)
    category = Column(String(100), default="General")
    momentum_score = Column(Integer, default=50, index=True)
    search_volume = Column(Integer, default=0)
    related_keywords = Column(Text, default="[]")  # JSON array of strings
    historical_data = Column(Text, default="[]")   # JSON array of {date, value}
    resolved_at = Column(DateTime, nullable=False)  # naive UTC


# ── Database class ───────────────────────────────────────────────────────────

class Database:
    """Engine + session factory."""

    def __init__(self, database_url: Optional[str] = None):
        url = database_url or get_settings().database_url

        engine_kwargs = {"echo": False}
        if url.startswith("sqlite"):
            # Sessions are opened from request handlers on different threads
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise every session sees an empty DB
                engine_kwargs["poolclass"] = StaticPool

        self.url = url
        # Every session shares one DBAPI connection; callers must serialize access
        self.single_connection = engine_kwargs.get("poolclass") is StaticPool
        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_tables(self):
        """Create all tables (safe to call multiple times)."""
        Base.metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Cheap connectivity probe for health checks."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.warning(f"Database ping failed: {e}")
            return False

    @contextmanager
    def get_session(self) -> Session:
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
