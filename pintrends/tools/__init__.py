# Tools module
from .llm_tool import LLMTool
from .provider_health import ProviderHealthTracker
from .json_repair import parse_json_response, is_parse_error

__all__ = [
    "LLMTool",
    # Provider health / circuit breaker
    "ProviderHealthTracker",
    # LLM output parsing
    "parse_json_response",
    "is_parse_error",
]
