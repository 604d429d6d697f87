"""
Tag normalization and validation.

Tags are lowercased, trimmed, stripped of every character outside
``[a-z0-9-_]``, de-duplicated (first occurrence wins) and dropped when empty.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

MAX_TAGS = 10

VALID_TAG_PATTERN = re.compile(r"^[a-z0-9\-_]+$")
INVALID_CHARS_PATTERN = re.compile(r"[^a-z0-9\-_]")


def normalize_tags(tags: Iterable[str | None] | None) -> list[str] | None:
    """
    Normalize a collection of free-text tags.

    Args:
        tags: Raw tags (entries may be None)

    Returns:
        Normalized tags in first-occurrence order, or None when nothing is left
    """
    if not tags:
        return None

    normalized: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        cleaned = INVALID_CHARS_PATTERN.sub("", (tag or "").lower().strip())
        if not cleaned or cleaned in seen:
            continue
        seen.add(cleaned)
        normalized.append(cleaned)

    return normalized or None


def is_valid_tag(tag: str | None) -> bool:
    """Check whether a tag is already in canonical form."""
    if tag is None or not tag.strip():
        return False
    return VALID_TAG_PATTERN.fullmatch(tag) is not None
