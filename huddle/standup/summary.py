"""
Summary helpers around the structured standup summary.

- build_fallback_summary: deterministic summary straight from entries, used
  when no upstream summarizer output exists for the day
- normalize_summary_bullet_ids: content-derived bullet ids
- attach_summary_evidence: fill missing source entry ids from linked work
- build_validation_flags / compute_summary_confidence: consistency checks
  between a summary and the entries it claims to summarize
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from huddle import config
from huddle.observability.logging import get_logger
from huddle.standup.identity import stable_bullet_id
from huddle.standup.models import (
    BULLET_SECTIONS,
    StandupEntry,
    StandupSummary,
    SummaryBullet,
)
from huddle.utils.text import collapse_whitespace, has_text, normalize_id_list

logger = get_logger(__name__)


def make_summary_id(project_id: str, date: str) -> str:
    return f"{project_id}:{date}"


# =============================================================================
# Section 1: Fallback summary
# =============================================================================


def _entry_bullet(entry: StandupEntry, prefix: str, text: str) -> SummaryBullet:
    return SummaryBullet(
        id=f"{prefix}-{entry.id}",
        text=f"{entry.user.display_name()}: {text.strip()}",
        source_entry_ids=[entry.id],
        linked_work_ids=entry.linked_work_ids(),
    )


def build_fallback_summary(
    project_id: str, date: str, entries: Sequence[StandupEntry]
) -> StandupSummary:
    """
    Build a summary directly from entries, without a summarizer.

    Each non-blank "today", blockers and dependencies field becomes one bullet
    prefixed with the author's display name; entries without linked work become
    assignment gaps.

    Side Effects: None (pure function)
    """
    if entries:
        plural = "" if len(entries) == 1 else "s"
        progress = f"Captured {len(entries)} stand-up update{plural} for {date}."
    else:
        progress = f"No stand-up entries were submitted for {date}."

    return StandupSummary(
        summary_id=make_summary_id(project_id, date),
        project_id=project_id,
        date=date,
        overall_progress=progress,
        achievements=[
            _entry_bullet(entry, "achievement", entry.summary_today)
            for entry in entries
            if has_text(entry.summary_today)
        ],
        blockers=[
            _entry_bullet(entry, "blocker", entry.blockers)
            for entry in entries
            if has_text(entry.blockers)
        ],
        dependencies=[
            _entry_bullet(entry, "dependency", entry.dependencies)
            for entry in entries
            if has_text(entry.dependencies)
        ],
        assignment_gaps=[
            SummaryBullet(
                id=f"gap-{entry.id}",
                text=f"{entry.user.display_name()} has no linked issues or research items.",
                source_entry_ids=[entry.id],
                linked_work_ids=[],
            )
            for entry in entries
            if entry.linked_work_count() == 0
        ],
    )


# =============================================================================
# Section 2: Bullet identity and evidence
# =============================================================================


def normalize_summary_bullet_ids(summary: StandupSummary) -> StandupSummary:
    """
    Return a copy with every bullet trimmed, evidence normalized and re-identified.

    Bullet ids become ``<section>_<12 hex>``, so the same bullet in the same
    section keeps its id across runs while moving sections changes it.

    Side Effects: None (pure function - returns new summary)
    """
    updates: dict[str, list[SummaryBullet]] = {}
    for section in BULLET_SECTIONS:
        bullets = []
        for bullet in getattr(summary, section):
            text = collapse_whitespace(bullet.text)
            source_ids = normalize_id_list(bullet.source_entry_ids)
            work_ids = normalize_id_list(bullet.linked_work_ids)
            bullets.append(
                SummaryBullet(
                    id=stable_bullet_id(section, text, source_ids, work_ids),
                    text=text,
                    source_entry_ids=source_ids,
                    linked_work_ids=work_ids,
                )
            )
        updates[section] = bullets
    return summary.model_copy(update=updates)


def attach_summary_evidence(
    summary: StandupSummary, entries: Sequence[StandupEntry]
) -> StandupSummary:
    """
    Fill empty ``source_entry_ids`` from entries whose linked work overlaps the bullet's.

    Linked work matches on item id or key. Bullets that already cite entries are
    left untouched.

    Side Effects: None (pure function - returns new summary)
    """
    updates: dict[str, list[SummaryBullet]] = {}
    for section in BULLET_SECTIONS:
        bullets = []
        for bullet in getattr(summary, section):
            work_ids = set(normalize_id_list(bullet.linked_work_ids))
            if bullet.source_entry_ids or not work_ids:
                bullets.append(bullet)
                continue
            sources = [
                entry.id
                for entry in entries
                if any(item.matches(work_ids) for item in entry.linked_work_items())
            ]
            bullets.append(
                bullet.model_copy(update={"source_entry_ids": normalize_id_list(sources)})
            )
        updates[section] = bullets
    return summary.model_copy(update=updates)


# =============================================================================
# Section 3: Validation flags and confidence
# =============================================================================


@dataclass(frozen=True)
class ValidationFlag:
    """A detected inconsistency between a summary and its source entries."""

    flag_type: str
    details: dict[str, Any] = field(default_factory=dict)


NO_BLOCKERS_CONTRADICTION = "NO_BLOCKERS_CONTRADICTION"
BLOCKERS_WITHOUT_SOURCE = "BLOCKERS_WITHOUT_SOURCE"
ACHIEVEMENTS_WITHOUT_PROGRESS = "ACHIEVEMENTS_WITHOUT_PROGRESS"


def build_validation_flags(
    summary: StandupSummary, entries: Sequence[StandupEntry]
) -> list[ValidationFlag]:
    """
    Check a summary against its entries.

    Flags:
    - NO_BLOCKERS_CONTRADICTION: summary has no blockers, some entry reports one
    - BLOCKERS_WITHOUT_SOURCE: summary lists blockers, every entry's blocker field is empty
    - ACHIEVEMENTS_WITHOUT_PROGRESS: summary lists achievements, no entry has progress text

    Side Effects: None (pure function)
    """
    any_entry_blockers = any(has_text(entry.blockers) for entry in entries)
    all_progress_empty = all(entry.is_missing_update() for entry in entries)
    flags: list[ValidationFlag] = []

    if not summary.blockers and any_entry_blockers:
        flags.append(
            ValidationFlag(
                NO_BLOCKERS_CONTRADICTION,
                {"reason": "Summary claims no blockers but source entries include blocker text."},
            )
        )

    if summary.blockers and not any_entry_blockers:
        flags.append(
            ValidationFlag(
                BLOCKERS_WITHOUT_SOURCE,
                {"reason": "Summary lists blockers while all standup blocker fields are empty."},
            )
        )

    if summary.achievements and all_progress_empty:
        flags.append(
            ValidationFlag(
                ACHIEVEMENTS_WITHOUT_PROGRESS,
                {
                    "reason": "Summary lists achievements while all progress and today "
                    "fields are empty in source entries."
                },
            )
        )

    if flags:
        logger.info(
            "Summary %s raised validation flags: %s",
            summary.summary_id,
            ", ".join(flag.flag_type for flag in flags),
        )
    return flags


@dataclass(frozen=True)
class SummaryConfidence:
    confidence_score: float
    evidence_coverage: float
    validation_penalty: float


def compute_summary_confidence(summary: StandupSummary, flag_count: int) -> SummaryConfidence:
    """
    Score how well a summary is backed by evidence.

    coverage = share of bullets citing at least one entry (1.0 with no bullets);
    penalty = 0.2 per validation flag, at most 0.6; score = coverage - penalty,
    floored at 0.2. All three are rounded to two decimals.

    Side Effects: None (pure function)
    """
    bullets = summary.all_bullets()
    covered = sum(1 for bullet in bullets if bullet.source_entry_ids)
    coverage = covered / len(bullets) if bullets else 1.0
    penalty = min(
        config.CONFIDENCE_MAX_PENALTY, max(flag_count, 0) * config.CONFIDENCE_FLAG_PENALTY
    )
    score = max(config.CONFIDENCE_FLOOR, coverage - penalty)

    return SummaryConfidence(
        confidence_score=round(score, 2),
        evidence_coverage=round(coverage, 2),
        validation_penalty=round(penalty, 2),
    )
