"""Input normalization for natural-language queries.

Every string that enters the engine goes through :func:`normalize`
first. It removes C0/C1 control characters, truncates overly long input
and trims surrounding whitespace. Everything else (mixed scripts,
full-width forms, emoji) is kept verbatim.

Example
-------
    >>> normalize("  台北\\x00到台中  ")
    '台北到台中'
"""

from __future__ import annotations

import re
from typing import Any

MAX_QUERY_LENGTH = 1000
MAX_CONTEXT_LENGTH = 500

_CONTROL_CHARS = re.compile("[\x00-\x1f\x7f-\x9f]")


def normalize(raw: Any, max_length: int = MAX_QUERY_LENGTH) -> str:
    """Return a safe-to-process version of ``raw``.

    Parameters
    ----------
    raw : Any
        The text to normalize. Anything that is not a string is
        treated as the empty string.
    max_length : int, optional
        Maximum length of the result. Excess characters are dropped
        silently.

    Returns
    -------
    str
        The cleaned text, never longer than ``max_length``.
    """
    if not isinstance(raw, str):
        return ""

    text = _CONTROL_CHARS.sub("", raw).strip()
    if len(text) > max_length:
        text = text[: max(max_length, 0)].rstrip()
    return text


def normalize_query(raw: Any, max_length: int = MAX_QUERY_LENGTH) -> str:
    """Normalize a primary query string."""
    return normalize(raw, max_length)


def normalize_context(raw: Any, max_length: int = MAX_CONTEXT_LENGTH) -> str:
    """Normalize an optional secondary context string."""
    return normalize(raw, max_length)
