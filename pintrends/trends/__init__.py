"""
Trend resolution engine.

Tiers, in order of preference:
  Cache:      last stored record, served while younger than the TTL
  Signal:     Google Trends interest series (measured)
  Enrichment: LLM category, volume and related keywords (generative)
  Fallback:   deterministic-shape synthetic record (never fails)

Modules:
  - store.py: TrendStore, keyed persistent record store
  - signals/: measured signal providers (search_interest.py)
  - enrichment.py: TrendEnricher, steered and unsteered LLM prompts
  - merge.py: merge_tiers, precedence rules across Signal and Enrichment
  - fallback.py: synthesize_fallback
  - resolver.py: TrendResolver, the orchestrator
"""

from pintrends.trends.resolver import TrendResolver
from pintrends.trends.store import TrendStore

__all__ = ["TrendResolver", "TrendStore"]
