"""Detect inline "skip this dependency" sentinels in manifest text.

Two tokens are recognised: the legacy ``exhortignore`` and the current
``trustify-da-ignore``. Matching is exact and case-sensitive.
"""

from __future__ import annotations

LEGACY_IGNORE_PATTERN = "exhortignore"
IGNORE_PATTERN = "trustify-da-ignore"

_PATTERNS = (LEGACY_IGNORE_PATTERN, IGNORE_PATTERN)
_INLINE_PATTERNS = tuple(
    prefix + token for token in _PATTERNS for prefix in ("#", "# ")
)


def contains_ignore_pattern(text: str) -> bool:
    """True if either token appears anywhere in *text*."""
    return any(token in text for token in _PATTERNS)


def is_ignore_comment(text: str) -> bool:
    """True if the whole comment text (whitespace stripped) is a token.

    For formats whose parser hands back isolated comment text, e.g. XML.
    """
    return text.strip() in _PATTERNS


def contains_inline_ignore_pattern(text: str) -> bool:
    """True if a token follows ``#`` with at most one space in between."""
    return any(pattern in text for pattern in _INLINE_PATTERNS)
