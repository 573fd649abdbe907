"""
Generative enrichment: asks an LLM to categorize and contextualize a keyword.

Two prompts:
  - STEERED (a Google Trends signal is available): the measured momentum and
    related queries are given to the model, which returns a category plus
    Pinterest-specific volume and related keywords.
  - UNSTEERED (no signal): the model produces the full trend shape itself
    (momentum, volume, category, related, 7-day history).

The enricher never raises. Provider errors, timeouts, malformed JSON and
schema mismatches all come back as None ("unavailable").
"""

import logging
from typing import Optional

from pydantic import ValidationError

from pintrends.schemas.trends import EnrichmentResult, SignalResult
from pintrends.tools.json_repair import is_parse_error, parse_json_response
from pintrends.tools.llm_tool import LLMTool

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a Pinterest and Google Trends analyst. "
    "Respond with valid JSON only. No markdown, no explanation."
)

STEERED_PROMPT = """Act as a Pinterest Trends expert. I have Google Trends data for "{keyword}": Momentum {momentum}, Related: {related}.
Provide:
- A specific category (e.g., Home Decor, Tech, DIY, Fashion).
- Refined related trending keywords specific to Pinterest (mix with Google ones).
- Estimated monthly search volume on Pinterest (realistic numbers).
Return ONLY a raw JSON object: {{ "category": string, "pinterest_volume": number, "pinterest_related": string[] }}"""

UNSTEERED_PROMPT = """Act as a Pinterest and Google Trends analyzer. Generate realistic, high-quality trend data for the keyword: "{keyword}".
Provide:
- A momentum score (0-100) based on current rising interest.
- Estimated monthly search volume (realistic numbers).
- A specific category (e.g., Home Decor, Tech, DIY, Fashion).
- 5 highly relevant related trending keywords.
- 7 data points for a historical trend graph (last 7 days, oldest first), each point being {{ "date": "YYYY-MM-DD", "value": number }}.
Return ONLY a raw JSON object: {{ "momentum_score": number, "search_volume": number, "category": string, "related": string[], "history": Array<{{date: string, value: number}}> }}"""

_STEERED_KEYS = {"category", "pinterest_volume", "pinterest_related"}
_UNSTEERED_KEYS = {"category", "momentum_score", "search_volume", "related", "history"}


def build_prompt(keyword: str, signal: Optional[SignalResult] = None) -> str:
    """Pick the steered or unsteered prompt for *keyword*."""
    if signal is not None:
        return STEERED_PROMPT.format(
            keyword=keyword,
            momentum=signal.momentum_score,
            related=", ".join(signal.related) or "none",
        )
    return UNSTEERED_PROMPT.format(keyword=keyword)


def parse_enrichment(text: str, steered: bool) -> Optional[EnrichmentResult]:
    """Validate an LLM answer into an EnrichmentResult, or None if malformed."""
    data = parse_json_response(text or "", allow_truncated=False)
    if is_parse_error(data):
        logger.warning(f"Enrichment: unparseable response: {data.get('error')}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"Enrichment: expected JSON object, got {type(data).__name__}")
        return None

    expected = _STEERED_KEYS if steered else _UNSTEERED_KEYS
    if not expected & set(data):
        logger.warning(f"Enrichment: none of {sorted(expected)} in response keys {sorted(data)[:8]}")
        return None

    try:
        return EnrichmentResult(steered=steered, **{k: v for k, v in data.items() if k in expected})
    except (ValidationError, TypeError, ValueError, OverflowError) as e:
        logger.warning(f"Enrichment: schema mismatch: {str(e)[:200]}")
        return None


class TrendEnricher:
    """Enrichment provider adapter over LLMTool."""

    def __init__(self, llm: Optional[LLMTool] = None):
        self.llm = llm or LLMTool()

    async def enrich(self, keyword: str, signal: Optional[SignalResult] = None) -> Optional[EnrichmentResult]:
        """Enrich *keyword*, steered by *signal* when given. None = unavailable."""
        steered = signal is not None
        prompt = build_prompt(keyword, signal)
        try:
            text = await self.llm.generate(
                prompt=prompt,
                system_prompt=SYSTEM_PROMPT,
                temperature=0.4,
                max_tokens=1024,
                json_mode=True,
            )
        except Exception as e:
            logger.warning(f"Enrichment unavailable for '{keyword}': {str(e)[:200]}")
            return None

        result = parse_enrichment(text, steered)
        if result is not None:
            logger.info(
                f"Enrichment '{keyword}' ({'steered' if steered else 'unsteered'}): "
                f"category={result.category!r} via {self.llm.last_provider}"
            )
        return result
