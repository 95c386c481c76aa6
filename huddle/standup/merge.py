"""
Dedup/merge stage for candidate actions.

Candidates that mean the same thing share a merge key:
``action_type + ":" + canonical_text(reason or title)``. Each group collapses
into one action whose severity is the group maximum, whose due is "today" if any
member is due today, and whose evidence lists are the union of the group's.
The merged action is re-identified from its new payload.
"""

from __future__ import annotations

from collections.abc import Iterable

from huddle.observability.logging import get_logger
from huddle.standup.identity import stable_action_id
from huddle.standup.models import DUE_TODAY, SEVERITY_WEIGHT, ActionItem
from huddle.utils.text import canonical_text, collapse_whitespace, normalize_id_list

logger = get_logger(__name__)


def merge_key(action: ActionItem) -> str:
    """
    Generate the deduplication key for an action.

    Side Effects: None (pure function)
    """
    meaning = canonical_text(action.reason) or canonical_text(action.title)
    return f"{action.action_type}:{meaning}"


def rebuild_action(summary_id: str, action: ActionItem, **changes: object) -> ActionItem:
    """
    Return a copy of ``action`` with ``changes`` applied, normalized and re-identified.

    Side Effects: None (pure function)
    """
    fields = action.model_dump()
    fields.update(changes)
    fields["title"] = collapse_whitespace(fields["title"])
    fields["reason"] = collapse_whitespace(fields["reason"])
    fields["source_entry_ids"] = normalize_id_list(fields["source_entry_ids"])
    fields["linked_work_ids"] = normalize_id_list(fields["linked_work_ids"])
    fields["id"] = stable_action_id(summary_id, fields)
    return ActionItem(**fields)


def _combine(summary_id: str, existing: ActionItem, incoming: ActionItem) -> ActionItem:
    severity = existing.severity
    if SEVERITY_WEIGHT.get(incoming.severity, 0) > SEVERITY_WEIGHT.get(existing.severity, 0):
        severity = incoming.severity
    due = DUE_TODAY if DUE_TODAY in (existing.due, incoming.due) else existing.due

    return rebuild_action(
        summary_id,
        existing,
        severity=severity,
        due=due,
        source_entry_ids=[*existing.source_entry_ids, *incoming.source_entry_ids],
        linked_work_ids=[*existing.linked_work_ids, *incoming.linked_work_ids],
    )


def merge_actions(summary_id: str, actions: Iterable[ActionItem]) -> list[ActionItem]:
    """
    Collapse candidates sharing a merge key.

    Candidates are first put in canonical order (by id, itself a content hash),
    so the base of each group and therefore the merged payload and id do not
    depend on the order candidates were generated in.

    Side Effects: None (pure function - returns new list)
    """
    canonical_order = sorted(actions, key=lambda action: action.id)
    merged: dict[str, ActionItem] = {}

    for action in canonical_order:
        key = merge_key(action)
        existing = merged.get(key)
        if existing is None:
            merged[key] = action
            continue
        merged[key] = _combine(summary_id, existing, action)

    if len(merged) < len(canonical_order):
        logger.debug(
            "Merged %d candidate actions into %d", len(canonical_order), len(merged)
        )
    return list(merged.values())
