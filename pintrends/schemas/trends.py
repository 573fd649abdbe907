"""
Trend data models: the canonical TrendRecord and the per-tier payloads.

Architecture:
  SignalResult      - measured tier (Google Trends): momentum, volume, related, history
  EnrichmentResult  - generative tier (LLM): category plus steered or unsteered fields
  TrendRecord       - canonical merged record served to callers and cached

Validators coerce loosely-typed provider output at the boundary so that
downstream code only ever sees well-shaped values:
  - related keyword lists are stripped, deduplicated (case-sensitive) and capped
  - history points are non-negative and kept in chronological order
  - momentum is an integer in [0, 100]
"""

import math
from datetime import date, datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from pintrends.schemas.base import (
    MAX_HISTORY_POINTS,
    MAX_RELATED_KEYWORDS,
    TrendSource,
)


def finite_float(value: Any) -> float:
    """float(value), rejecting NaN and infinities (JSON allows Infinity, 1e999)."""
    result = float(value)
    if not math.isfinite(result):
        raise ValueError(f"non-finite number: {value!r}")
    return result


def clamp_momentum(value: Any) -> int:
    """Round to int and clamp into [0, 100]."""
    return int(min(100, max(0, round(finite_float(value)))))


def dedupe_keywords(values: Any, limit: int = MAX_RELATED_KEYWORDS) -> List[str]:
    """Coerce to list of non-empty strings, first-seen order, capped at *limit*."""
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple)):
        return []
    seen = set()
    result = []
    for item in values:
        if item is None:
            continue
        text = str(item).strip()
        if not text or text in seen:
            continue
        seen.add(text)
        result.append(text)
        if len(result) >= limit:
            break
    return result


def _parse_iso_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        return None


# ══════════════════════════════════════════════════════════════════════════════
# HISTORY
# ══════════════════════════════════════════════════════════════════════════════

class HistoryPoint(BaseModel):
    """One daily interest sample."""
    date: str
    value: float = Field(..., ge=0)

    model_config = {"frozen": True}

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        if isinstance(v, (datetime, date)):
            return v.strftime("%Y-%m-%d")
        return str(v).strip()

    @field_validator("value", mode="before")
    @classmethod
    def validate_value(cls, v):
        """Negative or missing samples floor at zero."""
        if v is None:
            return 0.0
        if isinstance(v, (list, tuple)):
            v = v[0] if v else 0
        return max(0.0, finite_float(v))


def normalize_history(points: Any) -> List[HistoryPoint]:
    """Coerce to at most the latest MAX_HISTORY_POINTS chronological points.

    Points whose dates all parse as ISO dates are sorted by date. Any other
    labelling is kept in provider order, which is chronological by contract.
    """
    if not points or not isinstance(points, (list, tuple)):
        return []
    parsed = []
    for p in points:
        if isinstance(p, HistoryPoint):
            parsed.append(p)
        elif isinstance(p, dict) and "date" in p:
            parsed.append(HistoryPoint(date=p["date"], value=p.get("value")))
    dates = [_parse_iso_date(p.date) for p in parsed]
    if parsed and all(d is not None for d in dates):
        parsed = [p for _, p in sorted(zip(dates, parsed), key=lambda pair: pair[0])]
    return parsed[-MAX_HISTORY_POINTS:]


# ══════════════════════════════════════════════════════════════════════════════
# TIER PAYLOADS
# ══════════════════════════════════════════════════════════════════════════════

class SignalResult(BaseModel):
    """Measured tier output (Google Trends)."""
    momentum_score: int = Field(..., ge=0, le=100)
    search_volume: int = Field(..., ge=0)
    related: List[str] = Field(default_factory=list)
    history: List[HistoryPoint] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("momentum_score", mode="before")
    @classmethod
    def validate_momentum(cls, v):
        return clamp_momentum(v)

    @field_validator("related", mode="before")
    @classmethod
    def validate_related(cls, v):
        return dedupe_keywords(v)

    @field_validator("history", mode="before")
    @classmethod
    def validate_history(cls, v):
        return normalize_history(v)


class EnrichmentResult(BaseModel):
    """Generative tier output.

    Steered mode (a signal was available) fills pinterest_volume and
    pinterest_related; unsteered mode fills momentum_score, search_volume,
    related and history. category may appear in either.
    """
    category: Optional[str] = None
    steered: bool = False

    # Steered mode
    pinterest_volume: Optional[float] = Field(default=None, ge=0)
    pinterest_related: List[str] = Field(default_factory=list)

    # Unsteered mode
    momentum_score: Optional[int] = None
    search_volume: Optional[float] = Field(default=None, ge=0)
    related: List[str] = Field(default_factory=list)
    history: List[HistoryPoint] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v):
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("momentum_score", mode="before")
    @classmethod
    def validate_momentum(cls, v):
        if v is None or v == "":
            return None
        return clamp_momentum(v)

    @field_validator("pinterest_volume", "search_volume", mode="before")
    @classmethod
    def validate_volume(cls, v):
        """LLMs sometimes answer '12,500' or '12500+'."""
        if v is None or v == "":
            return None
        if isinstance(v, str):
            v = v.replace(",", "").replace("+", "").strip()
        return max(0.0, finite_float(v))

    @field_validator("pinterest_related", "related", mode="before")
    @classmethod
    def validate_related(cls, v):
        return dedupe_keywords(v)

    @field_validator("history", mode="before")
    @classmethod
    def validate_history(cls, v):
        return normalize_history(v)

    @property
    def volume_estimate(self) -> Optional[float]:
        """Whichever volume estimate this tier contributed."""
        if self.pinterest_volume is not None:
            return self.pinterest_volume
        return self.search_volume

    @property
    def related_estimate(self) -> List[str]:
        """Whichever related-keyword list this tier contributed."""
        return self.pinterest_related or self.related


# ══════════════════════════════════════════════════════════════════════════════
# TREND RECORD
# ══════════════════════════════════════════════════════════════════════════════

class TrendRecord(BaseModel):
    """Normalized trend record, immutable once constructed."""
    keyword: str = Field(..., min_length=1)
    category: str
    momentum_score: int = Field(..., ge=0, le=100)
    search_volume: int = Field(..., ge=0)
    related_keywords: List[str] = Field(default_factory=list)
    historical_data: List[HistoryPoint] = Field(default_factory=list)
    source: TrendSource
    resolved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}

    @field_validator("keyword", mode="before")
    @classmethod
    def validate_keyword(cls, v):
        return str(v).strip()

    @field_validator("momentum_score", mode="before")
    @classmethod
    def validate_momentum(cls, v):
        return clamp_momentum(v)

    @field_validator("search_volume", mode="before")
    @classmethod
    def validate_volume(cls, v):
        return max(0, int(round(finite_float(v))))

    @field_validator("related_keywords", mode="before")
    @classmethod
    def validate_related(cls, v):
        return dedupe_keywords(v)

    @field_validator("historical_data", mode="before")
    @classmethod
    def validate_history(cls, v):
        return normalize_history(v)

    @field_validator("resolved_at", mode="before")
    @classmethod
    def validate_resolved_at(cls, v):
        """SQLite hands back naive datetimes; everything is stored as UTC."""
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def key(self) -> str:
        """Case-folded store key."""
        return lookup_key(self.keyword)

    def is_fresh(self, now: datetime, ttl_seconds: float) -> bool:
        """True iff the record is younger than the TTL."""
        return (now - self.resolved_at).total_seconds() < ttl_seconds


def normalize_keyword(query: str) -> str:
    """Trim surrounding whitespace and collapse inner runs; case is preserved."""
    return " ".join(str(query).split())


def lookup_key(keyword: str) -> str:
    """Case-folded cache key for a normalized keyword."""
    return normalize_keyword(keyword).casefold()
