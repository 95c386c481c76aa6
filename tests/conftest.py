"""
Pytest configuration for Huddle tests

Provides factory fixtures for entries, bullets, actions and summaries shared
across the unit tests.
"""

from __future__ import annotations

import pytest

from huddle.standup.models import (
    ActionItem,
    EntryAuthor,
    LinkedWorkItem,
    StandupEntry,
    StandupSummary,
    SummaryBullet,
)

SUMMARY_ID = "project-1:2026-02-16"


def build_entry(
    entry_id: str,
    user_id: str,
    *,
    name: str | None = None,
    role: str = "DEV",
    progress: str = "",
    today: str = "",
    blockers: str = "",
    dependencies: str = "",
    is_complete: bool = True,
    issues: list[dict] | None = None,
    research: list[dict] | None = None,
) -> StandupEntry:
    return StandupEntry(
        id=entry_id,
        user_id=user_id,
        user=EntryAuthor(id=user_id, name=name, role=role),
        progress_since_yesterday=progress,
        summary_today=today,
        blockers=blockers,
        dependencies=dependencies,
        is_complete=is_complete,
        issues=[LinkedWorkItem(kind="issue", **item) for item in issues or []],
        research=[LinkedWorkItem(kind="research", **item) for item in research or []],
    )


def build_bullet(
    bullet_id: str,
    text: str,
    sources: list[str] | None = None,
    work: list[str] | None = None,
) -> SummaryBullet:
    return SummaryBullet(
        id=bullet_id,
        text=text,
        source_entry_ids=sources or [],
        linked_work_ids=work or [],
    )


def build_summary(**sections) -> StandupSummary:
    sections.setdefault("summary_id", SUMMARY_ID)
    sections.setdefault("project_id", "project-1")
    sections.setdefault("date", "2026-02-16")
    return StandupSummary(**sections)


def build_action(action_id: str, **fields) -> ActionItem:
    fields.setdefault("title", "Follow up on blocker status")
    fields.setdefault("owner_user_id", "lead1")
    fields.setdefault("action_type", "FOLLOW_UP_STATUS")
    return ActionItem(id=action_id, **fields)


@pytest.fixture
def make_entry():
    """Factory for StandupEntry (complete, no blockers, no linked work by default)"""
    return build_entry


@pytest.fixture
def make_bullet():
    """Factory for SummaryBullet"""
    return build_bullet


@pytest.fixture
def make_summary():
    """Factory for StandupSummary with summary_id project-1:2026-02-16"""
    return build_summary


@pytest.fixture
def make_action():
    """Factory for ActionItem with explicit id"""
    return build_action


@pytest.fixture
def team_entries():
    """A lead plus two developers, one of them with a linked issue"""
    return [
        build_entry(
            "e-lead",
            "lead1",
            name="Lena",
            role="PO",
            progress="Reviewed pull requests for the billing service",
            today="Planning the sprint review agenda with design",
        ),
        build_entry(
            "e1",
            "dev1",
            name="Dana",
            progress="Shipped login form validation and wrote unit tests",
            today="Pairing with QA on the checkout regression suite",
            blockers="Waiting on PO approval for scope change",
            issues=[{"id": "issue-1", "key": "HUD-1", "assignee_id": "dev1"}],
        ),
        build_entry(
            "e2",
            "dev2",
            name="Omar",
            progress="Profiled the report export job and fixed two slow queries",
            today="Writing the migration for the audit log table",
            issues=[{"id": "issue-2", "key": "HUD-2", "assignee_id": "dev3"}],
        ),
    ]
