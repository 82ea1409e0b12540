"""Text helpers."""

from __future__ import annotations

import re
import unicodedata

_UNSAFE = re.compile(r"[^a-z0-9\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")


def slugify(text: str | None) -> str:
    """Convert a title to a URL slug.

    Accents are transliterated to ASCII, punctuation is dropped and runs
    of whitespace or hyphens collapse to a single hyphen.

    >>> slugify("Series 1: Part 2")
    'series-1-part-2'
    >>> slugify("Café à Paris")
    'cafe-a-paris'
    """
    if not text:
        return ""
    normalized = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    cleaned = _UNSAFE.sub("", normalized.lower())
    return _SEPARATORS.sub("-", cleaned).strip("-")
