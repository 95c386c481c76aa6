"""
Keyword patterns for blocker classification.

Kept as explicit lists so the classification boundary can be reviewed and
tested on its own. All matching is case-insensitive.

Classification:
- DECISION: blocker waits on a decision, approval or the product owner
- SCOPE: subset of DECISION, the open question is scope
- URGENT: blocker also warrants a same-day escalation
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Whole-word terms signalling a decision or product-owner dependency
DECISION_TERMS: list[str] = [
    "po",
    "product owner",
    "decision",
    "approve",
    "approval",
    "scope",
]

SCOPE_TERMS: list[str] = [
    "scope",
]

# "blocked" is matched as a word prefix ("blocked", "blockedby"), "escalate" and
# "escalation" as word suffixes; the rest anywhere in the text.
URGENCY_PATTERNS: list[str] = [
    r"\bblocked",
    r"stuck",
    r"urgent",
    r"critical",
    r"escalat(?:e|ion)\b",
]


def _word_regex(terms: list[str]) -> re.Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(re.escape(term) for term in terms) + r")\b", re.I)


DECISION_REGEX = _word_regex(DECISION_TERMS)
SCOPE_REGEX = _word_regex(SCOPE_TERMS)
URGENCY_REGEX = re.compile("|".join(URGENCY_PATTERNS), re.I)


@dataclass(frozen=True)
class BlockerClassification:
    """Result of keyword classification for one blocker text."""

    is_decision: bool
    is_scope: bool
    is_urgent: bool


def is_decision_text(text: str) -> bool:
    return bool(DECISION_REGEX.search(text or ""))


def is_scope_text(text: str) -> bool:
    return bool(SCOPE_REGEX.search(text or ""))


def is_urgent_text(text: str) -> bool:
    return bool(URGENCY_REGEX.search(text or ""))


def classify_blocker(text: str) -> BlockerClassification:
    """
    Classify blocker text against the keyword lists.

    Side Effects: None (pure function)
    """
    is_decision = is_decision_text(text)
    return BlockerClassification(
        is_decision=is_decision,
        is_scope=is_decision and is_scope_text(text),
        is_urgent=is_urgent_text(text),
    )
