"""
Slug and reading-time helpers shared by blog posts, tags and engagements.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable

_NON_SLUG = re.compile(r"[^a-z0-9]+")

WORDS_PER_MINUTE = 200


def slugify(text: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', strip edge dashes."""
    return _NON_SLUG.sub("-", text.lower()).strip("-")


def make_unique_slug(base: str, exists: Callable[[str], bool]) -> str:
    """
    Return `base`, or `base-1`, `base-2`, ... for the first candidate
    for which `exists` is false.
    """
    slug = base
    counter = 1
    while exists(slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def calculate_reading_time(content: str) -> int:
    """Minutes to read at 200 words per minute, never less than one."""
    words = len(content.split())
    return max(1, math.ceil(words / WORDS_PER_MINUTE))
