"""
Action Derivation Engine

Turns a day's summary bullets and raw standup entries into ranked follow-ups.

Flow:
    blockers / dependencies / assignment gaps / missing updates
        → candidate actions (each normalized and hashed on creation)
        → merge (merge.py)
        → rank + cap (ranking.py)

Ownership routing: decision, escalation, scope, status and assignment actions go
to the project lead (first ADMIN/PO author, else the first author). Help
requests stay with the person who asked.

Principles:
- No side effects: entries and summaries are read, never modified
- Deterministic: identical inputs produce identical ids and order
"""

from __future__ import annotations

from collections.abc import Sequence

from huddle import config
from huddle.observability.logging import get_logger
from huddle.observability.structured import EventType, StructuredLogger
from huddle.standup.identity import stable_action_id
from huddle.standup.merge import merge_actions, rebuild_action
from huddle.standup.models import (
    DUE_TODAY,
    ActionItem,
    ActionType,
    Severity,
    StandupEntry,
    StandupSummary,
    SummaryBullet,
)
from huddle.standup.patterns import classify_blocker
from huddle.standup.ranking import rank_actions
from huddle.utils.text import collapse_whitespace, normalize_id_list

logger = get_logger(__name__)

LEAD_ROUTED_TYPES: frozenset[str] = frozenset(
    {
        ActionType.UNBLOCK_DECISION.value,
        ActionType.ESCALATE_BLOCKER.value,
        ActionType.CLARIFY_SCOPE.value,
        ActionType.FOLLOW_UP_STATUS.value,
        ActionType.ASSIGN_OWNER.value,
    }
)

BLOCKER_TITLES: dict[ActionType, str] = {
    ActionType.CLARIFY_SCOPE: "Clarify scope to unblock work",
    ActionType.UNBLOCK_DECISION: "Unblock decision on blocker",
    ActionType.FOLLOW_UP_STATUS: "Follow up on blocker status",
}
ESCALATE_TITLE = "Escalate critical blocker"
REQUEST_HELP_TITLE = "Request help on dependency"
ASSIGN_OWNER_TITLE = "Assign a clear owner"
MISSING_UPDATE_TITLE = "Follow up on missing standup"

DEFAULT_BLOCKER_REASON = "A blocker was reported and needs a same-day update."
DEFAULT_DEPENDENCY_REASON = "Dependency requires coordination to proceed."
DEFAULT_GAP_REASON = "Workstream has no clear owner."


# ============================================================================
# Ownership
# ============================================================================


def find_project_lead_user_id(entries: Sequence[StandupEntry]) -> str | None:
    """
    Return the first ADMIN/PO author in entry order, else the first author.

    Side Effects: None (pure function)
    """
    for entry in entries:
        if (entry.user.role or "").upper() in config.LEAD_ROLES:
            return entry.user_id
    return entries[0].user_id if entries else None


def pick_owner_user_id(
    action_type: ActionType | str,
    source_owner_user_id: str,
    entries: Sequence[StandupEntry],
) -> str:
    """
    Route an action to its accountable owner.

    Side Effects: None (pure function)
    """
    lead_user_id = find_project_lead_user_id(entries)
    if not lead_user_id:
        return source_owner_user_id
    if getattr(action_type, "value", action_type) in LEAD_ROUTED_TYPES:
        return lead_user_id
    return source_owner_user_id


def infer_dependency_owner(
    entries: Sequence[StandupEntry], linked_work_ids: Sequence[str]
) -> str | None:
    """
    Find the assignee of the first linked issue/research item matching a work id.

    Entries are scanned in the given order, issues before research; an item
    matches on its id or its key. Matches without an assignee are skipped.

    Side Effects: None (pure function)
    """
    work_ids = set(normalize_id_list(linked_work_ids))
    if not work_ids:
        return None

    for entry in entries:
        for group in (entry.issues, entry.research):
            for item in group:
                if item.matches(work_ids) and item.assignee_id:
                    return item.assignee_id
    return None


# ============================================================================
# Candidate construction
# ============================================================================


def build_action(
    summary_id: str,
    *,
    title: str,
    owner_user_id: str,
    action_type: ActionType,
    reason: str,
    severity: Severity,
    source_entry_ids: Sequence[str],
    linked_work_ids: Sequence[str],
    due: str = DUE_TODAY,
    target_user_id: str | None = None,
) -> ActionItem:
    """
    Create a normalized action with its stable id.

    Side Effects: None (pure function)
    """
    fields = {
        "title": collapse_whitespace(title),
        "owner_user_id": owner_user_id,
        "target_user_id": target_user_id,
        "action_type": action_type.value,
        "reason": collapse_whitespace(reason),
        "due": due,
        "severity": severity.value,
        "source_entry_ids": normalize_id_list(source_entry_ids),
        "linked_work_ids": normalize_id_list(linked_work_ids),
    }
    return ActionItem(id=stable_action_id(summary_id, fields), **fields)


def _source_owner(
    bullet: SummaryBullet,
    entry_by_id: dict[str, StandupEntry],
    entries: Sequence[StandupEntry],
) -> str | None:
    first_source = bullet.source_entry_ids[0] if bullet.source_entry_ids else ""
    source_entry = entry_by_id.get(first_source)
    if source_entry is not None:
        return source_entry.user_id
    return entries[0].user_id if entries else None


def _blocker_actions(
    summary_id: str,
    bullet: SummaryBullet,
    entry_by_id: dict[str, StandupEntry],
    entries: Sequence[StandupEntry],
) -> list[ActionItem]:
    # The reporting entry must resolve; otherwise the blocker has no accountable source
    first_source = bullet.source_entry_ids[0] if bullet.source_entry_ids else ""
    source_entry = entry_by_id.get(first_source)
    if source_entry is None:
        return []

    classification = classify_blocker(bullet.text)
    if classification.is_decision:
        action_type = (
            ActionType.CLARIFY_SCOPE if classification.is_scope else ActionType.UNBLOCK_DECISION
        )
        severity = Severity.HIGH
    else:
        action_type = ActionType.FOLLOW_UP_STATUS
        severity = Severity.MED

    actions = [
        build_action(
            summary_id,
            title=BLOCKER_TITLES[action_type],
            owner_user_id=pick_owner_user_id(action_type, source_entry.user_id, entries),
            action_type=action_type,
            reason=bullet.text or DEFAULT_BLOCKER_REASON,
            severity=severity,
            source_entry_ids=bullet.source_entry_ids,
            linked_work_ids=bullet.linked_work_ids,
        )
    ]

    if classification.is_urgent:
        actions.append(
            build_action(
                summary_id,
                title=ESCALATE_TITLE,
                owner_user_id=pick_owner_user_id(
                    ActionType.ESCALATE_BLOCKER, source_entry.user_id, entries
                ),
                action_type=ActionType.ESCALATE_BLOCKER,
                reason=bullet.text,
                severity=Severity.HIGH,
                source_entry_ids=bullet.source_entry_ids,
                linked_work_ids=bullet.linked_work_ids,
            )
        )
    return actions


def _missing_update_action(
    summary_id: str, entry: StandupEntry, entries: Sequence[StandupEntry]
) -> ActionItem:
    return build_action(
        summary_id,
        title=MISSING_UPDATE_TITLE,
        owner_user_id=pick_owner_user_id(ActionType.FOLLOW_UP_STATUS, entry.user_id, entries),
        target_user_id=entry.user_id,
        action_type=ActionType.FOLLOW_UP_STATUS,
        reason=f"{entry.user.display_name()} has not submitted a standup update.",
        severity=Severity.LOW,
        source_entry_ids=[entry.id],
        linked_work_ids=entry.linked_work_ids(),
    )


def derive_candidate_actions(
    summary: StandupSummary, entries: Sequence[StandupEntry]
) -> list[ActionItem]:
    """
    Emit every candidate action for a summary, before merge and ranking.

    Side Effects: None (pure function - returns new list)
    """
    summary_id = summary.summary_id
    entry_by_id = {entry.id: entry for entry in entries}
    candidates: list[ActionItem] = []

    for blocker in summary.blockers:
        candidates.extend(_blocker_actions(summary_id, blocker, entry_by_id, entries))

    for dependency in summary.dependencies:
        owner = _source_owner(dependency, entry_by_id, entries)
        if not owner:
            continue
        candidates.append(
            build_action(
                summary_id,
                title=REQUEST_HELP_TITLE,
                owner_user_id=pick_owner_user_id(ActionType.REQUEST_HELP, owner, entries),
                target_user_id=infer_dependency_owner(entries, dependency.linked_work_ids),
                action_type=ActionType.REQUEST_HELP,
                reason=dependency.text or DEFAULT_DEPENDENCY_REASON,
                severity=Severity.MED,
                source_entry_ids=dependency.source_entry_ids,
                linked_work_ids=dependency.linked_work_ids,
            )
        )

    for gap in summary.assignment_gaps:
        owner = _source_owner(gap, entry_by_id, entries)
        if not owner:
            continue
        candidates.append(
            build_action(
                summary_id,
                title=ASSIGN_OWNER_TITLE,
                owner_user_id=pick_owner_user_id(ActionType.ASSIGN_OWNER, owner, entries),
                action_type=ActionType.ASSIGN_OWNER,
                reason=gap.text or DEFAULT_GAP_REASON,
                severity=Severity.MED,
                source_entry_ids=gap.source_entry_ids,
                linked_work_ids=gap.linked_work_ids,
            )
        )

    for entry in entries:
        if entry.is_missing_update():
            candidates.append(_missing_update_action(summary_id, entry, entries))

    return candidates


def derive_step(
    summary: StandupSummary,
    entries: Sequence[StandupEntry],
    events: StructuredLogger,
    *,
    keep_supplied: bool = False,
) -> list[ActionItem]:
    """
    Produce candidate actions and log ACTIONS_DERIVED.

    With ``keep_supplied``, actions already on the summary are re-identified and
    used instead of deriving new ones.
    """
    if keep_supplied and summary.actions_required:
        candidates = normalize_action_items(summary.summary_id, summary.actions_required)
        origin = "supplied"
    else:
        candidates = derive_candidate_actions(summary, entries)
        origin = "derived"
    events.log_event(EventType.ACTIONS_DERIVED, candidates=len(candidates), origin=origin)
    return candidates


def merge_step(
    summary_id: str, candidates: Sequence[ActionItem], events: StructuredLogger
) -> list[ActionItem]:
    merged = merge_actions(summary_id, candidates)
    events.log_event(EventType.ACTIONS_MERGED, before=len(candidates), after=len(merged))
    return merged


def rank_step(
    merged: Sequence[ActionItem], limit: int, events: StructuredLogger
) -> list[ActionItem]:
    ranked = rank_actions(merged, limit=limit)
    if len(ranked) < len(merged):
        events.actions_capped(before=len(merged), after=len(ranked))
    return ranked


def generate_actions_required(
    summary: StandupSummary,
    entries: Sequence[StandupEntry],
    limit: int = config.ACTION_LIMIT,
) -> list[ActionItem]:
    """
    Derive, merge, rank and cap the actions for a summary.

    The cap is applied after ranking, so ranking always sees the full merged set.
    The pipeline's action stages run the same three steps.

    Side Effects: None (pure function; emits log events only)
    """
    events = StructuredLogger(summary.summary_id)

    candidates = derive_step(summary, entries, events)
    merged = merge_step(summary.summary_id, candidates, events)
    ranked = rank_step(merged, limit, events)
    logger.debug(
        "Generated %d actions for %s (%d candidates, %d merged)",
        len(ranked),
        summary.summary_id,
        len(candidates),
        len(merged),
    )
    return ranked


# ============================================================================
# Helpers for caller-supplied actions
# ============================================================================


def normalize_action_items(summary_id: str, actions: Sequence[ActionItem]) -> list[ActionItem]:
    """
    Re-normalize and re-identify actions supplied by a caller (e.g. stored JSON).

    Ids passed in are ignored; each action gets the id its payload hashes to.

    Side Effects: None (pure function - returns new list)
    """
    return [rebuild_action(summary_id, action) for action in actions]


def with_generated_actions(
    summary: StandupSummary, entries: Sequence[StandupEntry]
) -> StandupSummary:
    """
    Return a copy of ``summary`` with ranked, stably identified actions attached.

    Existing actions are kept (normalized and re-ranked); only an empty list is
    replaced by freshly generated actions.

    Side Effects: None (pure function - returns new summary)
    """
    source = summary.actions_required or generate_actions_required(summary, entries)
    actions = rank_actions(normalize_action_items(summary.summary_id, source))
    return summary.model_copy(update={"actions_required": actions})


def extract_action_titles(actions: Sequence[ActionItem]) -> list[str]:
    return [f"{action.title} ({action.severity})" for action in actions]


def has_action_evidence(action: ActionItem) -> bool:
    return bool(action.source_entry_ids or action.linked_work_ids)


def action_has_source(action: ActionItem, bullet: SummaryBullet) -> bool:
    """True when the action shares an entry id or linked work id with the bullet."""
    return any(entry_id in bullet.source_entry_ids for entry_id in action.source_entry_ids) or any(
        work_id in bullet.linked_work_ids for work_id in action.linked_work_ids
    )
