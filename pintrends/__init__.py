"""
Pin Trends: keyword trend resolution service.

Resolves a search keyword into a TrendRecord by combining a measured
Google Trends signal with LLM enrichment, degrading to a synthetic
record when both providers are unavailable.
"""

__version__ = "1.0.0"
