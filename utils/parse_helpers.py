"""Helpers for pulling structured data out of model replies."""
import json
import logging
import re
from typing import Any, Dict, Optional

logger = logging.getLogger("ParseHelpers")

FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def _balanced_object(text: str) -> Optional[str]:
    """Return the first brace-balanced ``{...}`` block, ignoring braces inside strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start:i + 1]
        start = text.find("{", start + 1)
    return None


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Parse a JSON object out of a model reply.

    Models often wrap JSON in code fences or prose. Tries, in order: the raw
    text, the first fenced block, and the first brace-balanced object.

    Args:
        text: Raw reply text

    Returns:
        The parsed dict, or None when nothing parses to an object
    """
    if not text:
        return None

    candidates = [text.strip()]
    fenced = FENCE_RE.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())
    block = _balanced_object(text)
    if block:
        candidates.append(block)

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    logger.warning(f"Could not extract a JSON object from reply ({len(text)} chars)")
    return None


def extract_string_field(text: str, field: str) -> Optional[str]:
    """Regex fallback for ``"field": "value"`` when the surrounding JSON is broken."""
    m = re.search(rf'"{re.escape(field)}"\s*:\s*"((?:[^"\\]|\\.)*)"', text or "", re.DOTALL)
    if not m:
        return None
    try:
        return json.loads(f'"{m.group(1)}"')
    except json.JSONDecodeError:
        return m.group(1)


def extract_percentage(text: str, default: int = 50) -> int:
    """Find an AI percentage in free text, e.g. ``"aiPercentage": 72`` or ``72%``."""
    m = re.search(r'"aiPercentage"\s*:\s*(\d+)|(\d+)\s*%', text or "")
    if not m:
        return default
    return max(0, min(100, int(m.group(1) or m.group(2))))
