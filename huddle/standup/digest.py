"""
Digest Renderer - one structured summary, three audience templates.

Templates:
- stakeholder:     exactly 5 lines, every line <= 160 characters
- team-detailed:   Action Center, Open Questions, Signals, Full Summary (in that order)
- sprint-snapshot: markdown document with a week-of (or sprint) heading

Shared preprocessing makes output deterministic regardless of input order:
bullets sort by normalized text (case-insensitive, then exact) then id, actions
by the ranking order, open questions by priority, normalized text, then id.
Every template ends with the same cleanup: no trailing whitespace on any
line, no runs of more than one blank line, no leading or trailing blank lines.

Side Effects: None (all functions are pure)
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from datetime import UTC, date, datetime, timedelta

from huddle import config
from huddle.observability.logging import get_logger
from huddle.standup.models import (
    ActionItem,
    DigestOptions,
    DigestSource,
    DigestType,
    OpenQuestion,
    QualitySignal,
    StandupSummary,
    SummaryBullet,
)
from huddle.standup.ranking import rank_actions
from huddle.utils.text import collapse_whitespace, reference_suffix, truncate_line

logger = get_logger(__name__)

PRIORITY_RANK: dict[str, int] = {"high": 0, "med": 1, "low": 2}
_MISSING_PRIORITY_RANK = len(PRIORITY_RANK)

_BLANK_RUNS = re.compile(r"\n{3,}")


# ============================================================================
# Ordering
# ============================================================================


def _text_key(text: str) -> tuple[str, str]:
    normalized = collapse_whitespace(text)
    return normalized.casefold(), normalized


def sort_bullets(items: Sequence[SummaryBullet]) -> list[SummaryBullet]:
    return sorted(items, key=lambda item: (*_text_key(item.text), item.id))


def sort_questions(items: Sequence[OpenQuestion]) -> list[OpenQuestion]:
    return sorted(
        items,
        key=lambda item: (
            PRIORITY_RANK.get(item.priority or "", _MISSING_PRIORITY_RANK),
            *_text_key(item.question_text),
            item.id,
        ),
    )


def _actions(source: DigestSource) -> list[ActionItem]:
    if source.visible_actions is not None:
        return rank_actions(source.visible_actions)
    return rank_actions(source.summary.actions_required if source.summary else [])


def _questions(source: DigestSource) -> list[OpenQuestion]:
    if source.visible_open_questions is not None:
        return sort_questions(source.visible_open_questions)
    return sort_questions(source.summary.open_questions if source.summary else [])


# ============================================================================
# Formatting helpers
# ============================================================================


def format_list(items: Sequence[str]) -> str:
    if not items:
        return f"- {config.NONE_REPORTED}"
    return "\n".join(f"- {item}" for item in items)


def as_percent(value: int | float | None) -> str:
    if value is None:
        return "n/a"
    return f"{round(value)}%"


def describe_bullet(bullet: SummaryBullet, include_references: bool) -> str:
    return collapse_whitespace(bullet.text) + reference_suffix(
        bullet.linked_work_ids, include_references
    )


def describe_action(action: ActionItem, include_references: bool) -> str:
    return (
        f"{collapse_whitespace(action.title)} — {collapse_whitespace(action.reason)}"
        f"{reference_suffix(action.linked_work_ids, include_references)}"
    )


def describe_question(question: OpenQuestion, include_references: bool) -> str:
    return collapse_whitespace(question.question_text) + reference_suffix(
        question.source_entry_ids, include_references
    )


def finalize_output(lines: Sequence[str]) -> str:
    """Strip trailing whitespace per line, collapse blank runs, trim the document."""
    physical = "\n".join(lines).split("\n")
    text = "\n".join(line.rstrip() for line in physical)
    return _BLANK_RUNS.sub("\n\n", text).strip()


def week_of(date_value: str) -> str:
    """Return the ISO week Monday (YYYY-MM-DD) for a date string, or the input if unparseable."""
    try:
        day = date.fromisoformat(date_value[:10])
    except (TypeError, ValueError):
        return date_value
    return (day - timedelta(days=day.weekday())).isoformat()


def format_generated_timestamp(value: str | None) -> str:
    """Format an ISO timestamp as ``YYYY-MM-DD HH:MM UTC``; unparseable input is returned as is."""
    if not value:
        return ""
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).strftime("%Y-%m-%d %H:%M") + " UTC"


def _compact_items(texts: Sequence[str]) -> str:
    texts = [text for text in texts if text.strip()]
    if not texts:
        return config.NONE_REPORTED
    return "; ".join(
        truncate_line(text, config.STAKEHOLDER_ITEM_LENGTH)
        for text in texts[: config.STAKEHOLDER_MAX_ITEMS]
    )


def _stakeholder_line(label: str, body: str) -> str:
    return truncate_line(f"{label}{body}", config.STAKEHOLDER_LINE_LENGTH)


def _signal_lines(signals: QualitySignal | None) -> list[str]:
    metrics = signals.metrics if signals else None

    def rate(name: str) -> str:
        return as_percent(getattr(metrics, name) if metrics else None)

    return [
        f"Data quality score: {signals.quality_score if signals else 'n/a'}",
        f"Completion rate: {rate('completion_rate')}",
        f"Missing linked work rate: {rate('missing_linked_work_rate')}",
        f"Missing blockers rate: {rate('missing_blockers_rate')}",
        f"Vague update rate: {rate('vague_update_rate')}",
    ]


# ============================================================================
# Templates
# ============================================================================


class _Prepared:
    """Sorted, normalized view of a digest source shared by all templates."""

    def __init__(self, source: DigestSource, include_references: bool):
        summary = source.summary
        self.source = source
        self.include_references = include_references
        self.overall_progress = collapse_whitespace(
            source.rendered_progress
            or (summary.overall_progress if summary else "")
            or config.NO_SUMMARY_TEXT
        )
        self.achievements = sort_bullets(summary.achievements if summary else [])
        self.blockers = sort_bullets(summary.blockers if summary else [])
        self.dependencies = sort_bullets(summary.dependencies if summary else [])
        self.assignment_gaps = sort_bullets(summary.assignment_gaps if summary else [])
        self.actions = _actions(source)
        self.open_questions = _questions(source)

    def bullets(self, items: Sequence[SummaryBullet]) -> list[str]:
        return [describe_bullet(item, self.include_references) for item in items]

    def action_lines(self) -> list[str]:
        return [describe_action(item, self.include_references) for item in self.actions]

    def question_lines(self) -> list[str]:
        return [describe_question(item, self.include_references) for item in self.open_questions]


def _render_stakeholder(view: _Prepared) -> str:
    refs = view.include_references
    wins = _compact_items(view.bullets(view.achievements))
    risks = _compact_items(view.bullets(view.blockers))
    actions = _compact_items(
        [
            collapse_whitespace(action.title) + reference_suffix(action.linked_work_ids, refs)
            for action in view.actions
        ]
    )

    return finalize_output(
        [
            _stakeholder_line("Stakeholder Digest — As of ", view.source.date),
            _stakeholder_line(
                "Progress: ",
                truncate_line(view.overall_progress, config.STAKEHOLDER_PROGRESS_LENGTH),
            ),
            _stakeholder_line("Wins: ", wins),
            _stakeholder_line("Risks: ", risks),
            _stakeholder_line("Actions needed: ", actions),
        ]
    )


def _render_team_detailed(view: _Prepared) -> str:
    return finalize_output(
        [
            f"Detailed Team Digest — {view.source.date}",
            "",
            "Action Center",
            format_list(view.action_lines()),
            "",
            "Open Questions",
            format_list(view.question_lines()),
            "",
            "Signals",
            format_list(_signal_lines(view.source.signals)),
            "",
            "Full Summary",
            f"Overall progress\n{view.overall_progress}",
            f"Achievements\n{format_list(view.bullets(view.achievements))}",
            f"Blockers and risks\n{format_list(view.bullets(view.blockers))}",
            "Dependencies requiring PO involvement\n"
            f"{format_list(view.bullets(view.dependencies))}",
            f"Assignment gaps\n{format_list(view.bullets(view.assignment_gaps))}",
        ]
    )


def _render_sprint_snapshot(view: _Prepared) -> str:
    source = view.source
    if source.sprint_name:
        heading = f"{source.sprint_name} ({source.date})"
    else:
        heading = f"Week of {week_of(source.date)}"
    generated_on = format_generated_timestamp(source.generated_at)

    return finalize_output(
        [
            f"# Sprint Snapshot — {heading}",
            f"Generated on {generated_on}" if generated_on else "",
            f"Date range: {source.sprint_date_range}" if source.sprint_date_range else "",
            "## Progress",
            view.overall_progress,
            "",
            "## Wins",
            format_list(view.bullets(view.achievements)),
            "",
            "## Risks / Blockers",
            format_list(view.bullets(view.blockers)),
            "",
            "## Actions Needed",
            format_list(view.action_lines()),
            "",
            "## Open Questions",
            format_list(view.question_lines()),
            "",
            "## Dependencies",
            format_list(view.bullets(view.dependencies)),
            "",
            "## Assignment Gaps",
            format_list(view.bullets(view.assignment_gaps)),
        ]
    )


_TEMPLATES: dict[DigestType, Callable[[_Prepared], str]] = {
    DigestType.STAKEHOLDER: _render_stakeholder,
    DigestType.TEAM_DETAILED: _render_team_detailed,
    DigestType.SPRINT_SNAPSHOT: _render_sprint_snapshot,
}


def render_digest(
    digest_type: DigestType | str,
    source: DigestSource,
    options: DigestOptions | dict | None = None,
) -> str:
    """
    Render a digest for one audience.

    Args:
        digest_type: "stakeholder", "team-detailed" or "sprint-snapshot"
        source: Summary, actions, questions and signals to render
        options: Rendering options, as DigestOptions or a dict such as
            {"includeReferences": True} (adds "(refs: ...)" suffixes)

    Returns:
        Cleaned-up digest text

    Raises:
        ValueError: If digest_type is not a known template
    """
    kind = DigestType(digest_type)
    include_references = DigestOptions.model_validate(options or {}).include_references
    view = _Prepared(source, include_references)
    text = _TEMPLATES[kind](view)
    logger.debug("Rendered %s digest for %s (%d chars)", kind.value, source.date, len(text))
    return text


def render_summary_markdown(summary: StandupSummary) -> str:
    """
    Render the bold-headed summary text stored alongside the structured summary.

    Side Effects: None (pure function)
    """
    actions = rank_actions(summary.actions_required)
    sections = [
        ("Overall progress", None),
        ("Action required today", [action.title for action in actions]),
        ("Achievements", [item.text for item in summary.achievements]),
        ("Blockers and risks", [item.text for item in summary.blockers]),
        ("Dependencies requiring PO involvement", [item.text for item in summary.dependencies]),
        ("Assignment gaps", [item.text for item in summary.assignment_gaps]),
    ]
    blocks = []
    for heading, items in sections:
        if items is None:
            blocks.append(f"**{heading}**\n{collapse_whitespace(summary.overall_progress)}")
        else:
            lines = [collapse_whitespace(item) for item in items]
            blocks.append(f"**{heading}**\n{format_list(lines)}")
    return "\n\n".join(blocks)
