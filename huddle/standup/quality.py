"""
Standup data-quality scoring.

Scores one project-day batch of entries on four rates and blends them into a
0-100 composite. The denominator is max(total members, entries, 1): members
who did not submit count against the batch instead of being ignored.

The "vague" heuristic (under 25 characters, or any stoplist phrase as a
substring) is fixed: downstream reports are calibrated against this exact
threshold and stoplist.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from huddle import config
from huddle.observability.logging import get_logger
from huddle.standup.models import QualityMetrics, QualitySignal, StandupEntry
from huddle.utils.text import has_text

logger = get_logger(__name__)

VAGUE_PHRASES: list[str] = [
    "same",
    "as usual",
    "nothing",
    "n/a",
    "na",
    "todo",
    "tbd",
    "working on it",
    "stuff",
]


@dataclass(frozen=True)
class QualityInput:
    """The subset of an entry the scorer reads, plus its linked work count."""

    summary_today: str | None
    progress_since_yesterday: str | None
    blockers: str | None
    is_complete: bool
    linked_work_count: int

    @classmethod
    def from_entry(cls, entry: StandupEntry) -> QualityInput:
        return cls(
            summary_today=entry.summary_today,
            progress_since_yesterday=entry.progress_since_yesterday,
            blockers=entry.blockers,
            is_complete=entry.is_complete,
            linked_work_count=entry.linked_work_count(),
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp_percentage(value: float) -> float:
    return max(0.0, min(100.0, value))


def _to_rate(hits: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return hits / total * 100


def is_vague_text(value: str | None) -> bool:
    """
    True when update text carries too little information.

    Side Effects: None (pure function)
    """
    text = (value or "").strip().lower()
    if not text:
        return True
    if len(text) < config.VAGUE_MIN_LENGTH:
        return True
    return any(phrase in text for phrase in VAGUE_PHRASES)


def combined_update_text(item: QualityInput) -> str:
    parts = [item.progress_since_yesterday, item.summary_today]
    return " ".join(part.strip() for part in parts if part and part.strip())


def calculate_standup_quality(
    entries: Iterable[QualityInput | StandupEntry], total_members: int
) -> QualitySignal:
    """
    Score a batch of entries.

    Args:
        entries: Scorer inputs, or full entries (converted via QualityInput.from_entry)
        total_members: Project member count for the day

    Returns:
        QualitySignal with integer rates and a clamped, rounded composite score

    Side Effects: None (pure function)
    """
    items: Sequence[QualityInput] = [
        QualityInput.from_entry(entry) if isinstance(entry, StandupEntry) else entry
        for entry in entries
    ]
    denominator = max(total_members, len(items), 1)

    completion_rate = _to_rate(sum(1 for item in items if item.is_complete), denominator)
    missing_linked_work_rate = _to_rate(
        sum(1 for item in items if item.linked_work_count == 0), denominator
    )
    missing_blockers_rate = _to_rate(
        sum(1 for item in items if not has_text(item.blockers)), denominator
    )
    vague_rate = _to_rate(
        sum(1 for item in items if is_vague_text(combined_update_text(item))), denominator
    )

    score = _clamp_percentage(
        completion_rate * config.QUALITY_WEIGHT_COMPLETION
        + (100 - missing_linked_work_rate) * config.QUALITY_WEIGHT_LINKED_WORK
        + (100 - missing_blockers_rate) * config.QUALITY_WEIGHT_BLOCKERS
        + (100 - vague_rate) * config.QUALITY_WEIGHT_SPECIFICITY
    )

    signal = QualitySignal(
        quality_score=_round_half_up(score),
        metrics=QualityMetrics(
            completion_rate=_round_half_up(completion_rate),
            missing_linked_work_rate=_round_half_up(missing_linked_work_rate),
            missing_blockers_rate=_round_half_up(missing_blockers_rate),
            vague_update_rate=_round_half_up(vague_rate),
        ),
    )
    logger.debug(
        "Quality score %d over %d entries (denominator %d)",
        signal.quality_score,
        len(items),
        denominator,
    )
    return signal
