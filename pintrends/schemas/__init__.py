"""
Schemas package: all data models for the Pin Trends service.

Models are organized by domain in submodules:
  - base.py: TrendSource provenance enum and shape limits
  - trends.py: TrendRecord, HistoryPoint, SignalResult, EnrichmentResult
"""

from pintrends.schemas.base import TrendSource
from pintrends.schemas.trends import (
    HistoryPoint, SignalResult, EnrichmentResult, TrendRecord,
    normalize_keyword, lookup_key,
)

__all__ = [
    "TrendSource",
    "HistoryPoint", "SignalResult", "EnrichmentResult", "TrendRecord",
    "normalize_keyword", "lookup_key",
]
