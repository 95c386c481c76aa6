"""
Stable identities for derived standup records.

An action id is a pure function of the action's meaning: the same logical
action derived from the same logical inputs gets the same id on every run,
whatever order the candidates or their evidence lists arrived in. External
layers (read/dismiss state, notification dedup) key on these ids.
"""

from __future__ import annotations

import json
from hashlib import sha256
from typing import Any

from huddle.utils.text import collapse_whitespace, normalize_id_list

ACTION_ID_PREFIX = "action_"
_DIGEST_CHARS = 12


def _short_digest(payload: dict[str, Any]) -> str:
    serialized = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return sha256(serialized.encode("utf-8")).hexdigest()[:_DIGEST_CHARS]


def canonical_action_payload(summary_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    """
    Build the canonical representation hashed into an action id.

    Titles and reasons are whitespace-collapsed, the two evidence lists are
    deduplicated and sorted, and a missing target becomes "".

    Side Effects: None (pure function)
    """
    return {
        "summaryId": summary_id,
        "action_type": str(_enum_value(fields.get("action_type"))),
        "owner_user_id": fields.get("owner_user_id") or "",
        "target_user_id": fields.get("target_user_id") or "",
        "title": collapse_whitespace(fields.get("title")),
        "reason": collapse_whitespace(fields.get("reason")),
        "due": fields.get("due") or "",
        "severity": str(_enum_value(fields.get("severity"))),
        "source_entry_ids": normalize_id_list(fields.get("source_entry_ids")),
        "linked_work_ids": normalize_id_list(fields.get("linked_work_ids")),
    }


def stable_action_id(summary_id: str, fields: dict[str, Any]) -> str:
    """
    Return ``action_<12 hex>`` for an action payload.

    Side Effects: None (pure function)
    """
    return ACTION_ID_PREFIX + _short_digest(canonical_action_payload(summary_id, fields))


def stable_bullet_id(
    section: str,
    text: str,
    source_entry_ids: list[str] | None,
    linked_work_ids: list[str] | None,
) -> str:
    """Return ``<section>_<12 hex>`` for a summary bullet."""
    payload = {
        "section": section,
        "text": collapse_whitespace(text),
        "source_entry_ids": normalize_id_list(source_entry_ids),
        "linked_work_ids": normalize_id_list(linked_work_ids),
    }
    return f"{section}_{_short_digest(payload)}"


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value) if value is not None else ""
