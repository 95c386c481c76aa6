"""
Unit tests for text normalization helpers

Tests:
- Whitespace collapsing and canonical merge text
- Line truncation guarantees
- Id list normalization and reference suffixes
"""

import pytest

from huddle.utils.text import (
    ELLIPSIS,
    canonical_text,
    collapse_whitespace,
    has_text,
    normalize_id_list,
    reference_suffix,
    truncate_line,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("  Need   API\taccess \n", "Need API access"),
        ("", ""),
        (None, ""),
        ("\n\n", ""),
    ],
)
def test_collapse_whitespace(raw, expected):
    """Runs of whitespace collapse to one space and the ends are trimmed"""
    assert collapse_whitespace(raw) == expected


def test_canonical_text_strips_label_prefix_and_punctuation():
    """'Dev A: Need PO approval.' and 'need po approval' share a canonical form"""
    assert canonical_text("Dev A: Need PO approval.") == "need po approval"
    assert canonical_text("need po approval") == "need po approval"


def test_canonical_text_strips_only_first_label():
    """Only one leading label is removed"""
    assert canonical_text("Dana: Backend: waiting on keys") == "backend waiting on keys"


def test_canonical_text_keeps_short_or_long_prefixes():
    """A one-character or over-40-character prefix is not treated as a label"""
    assert canonical_text("A: thing") == "a thing"
    long_prefix = "x" * 41
    assert canonical_text(f"{long_prefix}: thing") == f"{long_prefix} thing"


def test_canonical_text_matches_whitespace_variants():
    """Case and whitespace variants canonicalize identically"""
    assert canonical_text("Need API access") == canonical_text("need   api access")


def test_truncate_line_leaves_short_text_alone():
    """Text within the limit is only whitespace-normalized"""
    assert truncate_line("  short   text ", 20) == "short text"


def test_truncate_line_respects_limit():
    """Truncated output ends with an ellipsis and never exceeds the limit"""
    text = "word " * 100
    result = truncate_line(text, 48)

    assert len(result) <= 48
    assert result.endswith(ELLIPSIS)


def test_truncate_line_non_positive_limit():
    """A zero limit yields an empty string"""
    assert truncate_line("anything", 0) == ""


def test_normalize_id_list_dedupes_and_sorts():
    """Blank ids are dropped and the rest sorted"""
    assert normalize_id_list([" e2", "e1", "", None, "e2 "]) == ["e1", "e2"]
    assert normalize_id_list(None) == []


def test_reference_suffix():
    """Suffix only appears when enabled and ids exist"""
    assert reference_suffix(["HUD-2", "HUD-1"], True) == " (refs: HUD-1, HUD-2)"
    assert reference_suffix(["HUD-1"], False) == ""
    assert reference_suffix([], True) == ""


def test_has_text():
    """Whitespace-only values carry no text"""
    assert has_text("blocked")
    assert not has_text("   ")
    assert not has_text(None)
