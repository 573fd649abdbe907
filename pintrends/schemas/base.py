"""
Common enums and constants used across the application.

These define the vocabulary of the system: which tier produced a record,
and the shape limits every trend record honours.
"""

from enum import Enum


# ══════════════════════════════════════════════════════════════════════════════
# ENUMS - Provenance
# ══════════════════════════════════════════════════════════════════════════════

class TrendSource(str, Enum):
    """Provenance tag: which tier(s) produced a trend record."""
    SIGNAL_ENRICHMENT = "Signal+Enrichment"   # measured series + generative context
    ENRICHMENT = "Enrichment"                 # generative only
    SIGNAL = "Signal"                         # measured only
    FALLBACK = "Fallback"                     # synthetic, both providers down
    SEED = "Seed"                             # demonstration rows inserted at startup


# ══════════════════════════════════════════════════════════════════════════════
# LIMITS
# ══════════════════════════════════════════════════════════════════════════════

MAX_RELATED_KEYWORDS = 8
MAX_HISTORY_POINTS = 7
MAX_SIGNAL_RELATED = 5

DEFAULT_CATEGORY = "General"
DEFAULT_MOMENTUM = 50
DEFAULT_SEARCH_VOLUME = 1000
