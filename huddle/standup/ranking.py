"""
Ranking stage: a total order over action items.

Priority, highest first:
1. severity (high > med > low)
2. due urgency ("today" > "tomorrow" > explicit date or anything else)
3. decision-oriented types (UNBLOCK_DECISION, CLARIFY_SCOPE) over the rest
4. evidence strength (source entries + linked work, more first)
5. id, ascending, so no two distinct actions ever tie
"""

from __future__ import annotations

from collections.abc import Iterable

from huddle.standup.models import DUE_TODAY, DUE_TOMORROW, SEVERITY_WEIGHT, ActionItem

DUE_RANK: dict[str, int] = {DUE_TODAY: 0, DUE_TOMORROW: 1}
_OTHER_DUE_RANK = 2


def action_sort_key(action: ActionItem) -> tuple[int, int, int, int, str]:
    """
    Sort key implementing the ranking order (ascending sort = highest priority first).

    Side Effects: None (pure function)
    """
    return (
        -SEVERITY_WEIGHT.get(action.severity, 0),
        DUE_RANK.get(action.due, _OTHER_DUE_RANK),
        0 if action.is_decision() else 1,
        -action.evidence_strength(),
        action.id,
    )


def rank_actions(actions: Iterable[ActionItem], limit: int | None = None) -> list[ActionItem]:
    """
    Return actions in priority order, optionally truncated to ``limit``.

    Side Effects: None (pure function - returns new list)
    """
    ranked = sorted(actions, key=action_sort_key)
    if limit is not None:
        return ranked[: max(limit, 0)]
    return ranked
