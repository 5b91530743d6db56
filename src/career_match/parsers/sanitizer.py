"""Normalize and bound extracted resume text before it is sent to the LLM."""

from __future__ import annotations

import re

from career_match.errors import ExtractionTooShort

DEFAULT_MAX_CHARS = 3000
DEFAULT_MIN_CHARS = 30
PREVIEW_CHARS = 220

_KEEP_CONTROLS = frozenset("\n\r\t")
_WHITESPACE_RUN = re.compile(r"\s{4,}")


def clean_text(text: str) -> str:
    """Replace non-printable characters with spaces and collapse long whitespace runs.

    Newlines and tabs survive. Runs of four or more whitespace characters
    become three spaces.
    """
    text = "".join(
        ch if ch.isprintable() or ch in _KEEP_CONTROLS else " " for ch in text
    )
    text = _WHITESPACE_RUN.sub("   ", text)
    return text.strip()


def sanitize_text(
    raw: str,
    *,
    max_chars: int = DEFAULT_MAX_CHARS,
    min_chars: int = DEFAULT_MIN_CHARS,
) -> str:
    """Clean, trim and truncate ``raw``; raise ExtractionTooShort when too little survives."""
    cleaned = clean_text(raw or "")[:max_chars].rstrip()
    if len(cleaned) < min_chars:
        raise ExtractionTooShort(len(cleaned), min_chars)
    return cleaned


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    """Single-line excerpt for display."""
    flat = re.sub(r"\n+", " ", text[:limit])
    return f"{flat}…" if len(text) > limit else flat
