"""
Text normalization shared by every stage of the standup pipeline.

Two families of helpers live here:
- display normalization (whitespace collapsing, truncation, reference suffixes)
- canonicalization used only to build merge/dedup keys, never shown to users
"""

from __future__ import annotations

import re
from collections.abc import Iterable

ELLIPSIS = "…"

_WHITESPACE = re.compile(r"\s+")
_LABEL_PREFIX = re.compile(r"^[^:]{2,40}:\s*")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def collapse_whitespace(text: str | None) -> str:
    """
    Collapse runs of whitespace into a single space and strip the ends.

    Side Effects: None (pure function)
    """
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def canonical_text(text: str | None) -> str:
    """
    Canonicalize text for merge keys.

    Strips one leading "Label: " prefix (2-40 non-colon characters), lowercases,
    drops everything that is not ASCII alphanumeric or whitespace, then collapses
    whitespace again. "Dev A: Need PO approval." and "need po approval" share a key.

    Side Effects: None (pure function)
    """
    normalized = collapse_whitespace(text)
    normalized = _LABEL_PREFIX.sub("", normalized, count=1)
    normalized = _NON_ALNUM.sub("", normalized.lower())
    return collapse_whitespace(normalized)


def truncate_line(text: str | None, limit: int) -> str:
    """
    Normalize then truncate to at most ``limit`` characters.

    Truncated output ends with a single ellipsis character, so the result is
    always <= limit characters.

    Side Effects: None (pure function)
    """
    normalized = collapse_whitespace(text)
    if len(normalized) <= limit:
        return normalized
    if limit <= 0:
        return ""
    return normalized[: limit - 1].rstrip() + ELLIPSIS


def normalize_id_list(values: Iterable[str | None] | None) -> list[str]:
    """
    Strip, drop blanks, deduplicate and sort an id list.

    Side Effects: None (pure function - returns new list)
    """
    if not values:
        return []
    return sorted({value.strip() for value in values if value and value.strip()})


def reference_suffix(linked_work_ids: Iterable[str] | None, include_references: bool) -> str:
    """Return ``" (refs: A, B)"`` for the given ids, or "" when disabled or empty."""
    if not include_references:
        return ""
    references = normalize_id_list(linked_work_ids)
    if not references:
        return ""
    return f" (refs: {', '.join(references)})"


def has_text(value: str | None) -> bool:
    return bool(value and value.strip())
