"""Utility to coerce free-form LLM responses into JSON values."""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Literal, Optional

Shape = Literal["object", "array"]
Strategy = Callable[[str], Optional[Any]]

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def _loads(text: str) -> Any | None:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def _parse_direct(text: str) -> Any | None:
    """Parse the trimmed text as-is."""
    return _loads(text.strip())


def _parse_unfenced(text: str) -> Any | None:
    """Drop markdown code fence markers, then parse."""
    stripped = _FENCE_RE.sub("", text).strip()
    if stripped == text.strip():
        return None
    return _loads(stripped)


def _slice_between(text: str, open_char: str, close_char: str) -> Any | None:
    start = text.find(open_char)
    end = text.rfind(close_char)
    if start != -1 and end != -1 and end > start:
        return _loads(text[start : end + 1])
    return None


def _parse_array_literal(text: str) -> Any | None:
    """First '[' to last ']'."""
    return _slice_between(text, "[", "]")


def _parse_object_literal(text: str) -> Any | None:
    """First '{' to last '}'."""
    return _slice_between(text, "{", "}")


def _repair_truncated(text: str) -> Any | None:
    """Close braces/brackets left open by a response cut off at max_tokens."""
    start = text.find("{")
    if start == -1:
        return None

    candidate = _FENCE_RE.sub("", text[start:]).rstrip()
    open_braces = candidate.count("{") - candidate.count("}")
    open_brackets = candidate.count("[") - candidate.count("]")
    if open_braces <= 0 and open_brackets <= 0:
        return None

    repaired = candidate.rstrip(",")
    repaired += "]" * max(0, open_brackets) + "}" * max(0, open_braces)
    result = _loads(repaired)
    if result is not None:
        return result

    # Cut back to the last complete string value and close again
    last_quote = candidate.rfind('"')
    if last_quote > 0:
        truncated = candidate[: last_quote + 1]
        ob = truncated.count("{") - truncated.count("}")
        ol = truncated.count("[") - truncated.count("]")
        if ob > 0 or ol > 0:
            repaired = truncated.rstrip().rstrip(",")
            repaired += "]" * max(0, ol) + "}" * max(0, ob)
            return _loads(repaired)
    return None


STRATEGIES: tuple[Strategy, ...] = (
    _parse_direct,
    _parse_unfenced,
    _parse_array_literal,
    _parse_object_literal,
    _repair_truncated,
)


def _matches(value: Any, shape: Shape | None) -> bool:
    if shape == "object":
        return isinstance(value, dict)
    if shape == "array":
        return isinstance(value, list)
    return isinstance(value, (dict, list))


def parse_structured(text: str | None, shape: Shape | None = None) -> Any | None:
    """Return the first value any strategy recovers from ``text``, or None.

    Strategies run in order and a candidate is accepted only when it has the
    expected shape, so an array nested inside an object does not shadow the
    object itself.
    """
    if not text:
        return None
    for strategy in STRATEGIES:
        value = strategy(text)
        if value is not None and _matches(value, shape):
            return value
    return None

