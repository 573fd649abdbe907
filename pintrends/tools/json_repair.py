"""
Standalone JSON repair utilities for LLM output parsing.

Handles common LLM output issues:
- Markdown code block wrapping
- Leading/trailing prose around the JSON object
- Truncated JSON (unclosed brackets/strings)
- Control characters inside strings
"""

import json
import logging
import re
from typing import Any, Dict

logger = logging.getLogger(__name__)


def strip_code_fences(response: str) -> str:
    """Remove ```json ... ``` wrapping, wherever the fences appear."""
    cleaned = response.strip()
    cleaned = re.sub(r'```(?:json|JSON)?', '', cleaned)
    return cleaned.strip()


def parse_json_response(response: str, allow_truncated: bool = True) -> Dict[str, Any]:
    """Parse JSON from LLM response, handling common issues.

    Returns {"error": ..., "raw": ...} when nothing parseable is found;
    callers check with is_parse_error(). With allow_truncated=False an
    answer cut off mid-structure is an error instead of being closed up.
    """
    if not response or not response.strip():
        return {"error": "Empty response", "raw": ""}

    cleaned = strip_code_fences(response)

    # Extract the JSON structure (array or object) from the response
    json_str = extract_json_string(cleaned, repair=allow_truncated)

    try:
        return json.loads(json_str)
    except json.JSONDecodeError:
        # LLMs insert literal newlines/tabs inside string values
        try:
            return json.loads(json_str, strict=False)
        except json.JSONDecodeError:
            pass
        # Last resort: strip control characters from inside strings
        sanitized = re.sub(r'[\x00-\x1f\x7f]', ' ', json_str)
        try:
            return json.loads(sanitized)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse JSON: {e} | response: {json_str[:200]}")
            return {"error": "Failed to parse JSON", "raw": json_str[:500]}


def is_parse_error(data: Any) -> bool:
    """True for the sentinel dict parse_json_response returns on failure."""
    return isinstance(data, dict) and "error" in data and set(data) <= {"error", "raw"}


_CLOSING = {'{': '}', '[': ']'}


def _scan(text: str, start: int = 0):
    """Walk *text* from *start* tracking open brackets outside strings.

    Returns (end, stack, in_string): end is the index just past the bracket
    that closes the structure opened at *start*, or None if it never closes.
    """
    stack = []
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in _CLOSING:
            stack.append(_CLOSING[ch])
        elif stack and ch == stack[-1]:
            stack.pop()
            if not stack:
                return i + 1, stack, False
    return None, stack, in_string


def extract_json_string(text: str, repair: bool = True) -> str:
    """Cut the outermost JSON object or array out of surrounding prose.

    The first opening bracket wins. An unclosed structure is closed up by
    repair_truncated_json, or returned as-is when *repair* is False.
    """
    starts = [i for i in (text.find('{'), text.find('[')) if i != -1]
    if not starts:
        return text
    start = min(starts)
    end, _, _ = _scan(text, start)
    if end is not None:
        return text[start:end]
    if not repair:
        return text[start:]
    return repair_truncated_json(text[start:])


def repair_truncated_json(text: str) -> str:
    """Close an open string and any open brackets at the end of *text*."""
    _, stack, in_string = _scan(text)
    if in_string:
        text += '"'
    text = text.rstrip().rstrip(',')
    return text + ''.join(reversed(stack))
