"""Rough token counts for description text."""
from __future__ import annotations

import re

# Whitespace plus , . ; : ! ? ( ) [ ] { } and straight/curly quotes.
_SPLIT_RE = re.compile(r"[\s,.;:!?()\[\]{}\"'“”‘’]+")


def estimate_token_count(text: str | None) -> int:
    """Count the non-empty segments left after splitting on whitespace and punctuation.

    An approximation for the export, not a model tokenizer.
    """
    if not text:
        return 0
    return sum(1 for part in _SPLIT_RE.split(text) if part)
