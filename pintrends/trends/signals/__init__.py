"""
Measured signal providers.

Modules:
- search_interest.py: Google Trends interest-over-time and related queries
"""

from pintrends.trends.signals.search_interest import SearchInterestSignal

__all__ = ["SearchInterestSignal"]
