"""
Unit tests for standup models
"""

import pytest
from pydantic import ValidationError

from huddle.standup.models import (
    ActionItem,
    DigestOptions,
    EntryAuthor,
    Role,
    StandupEntry,
)


def test_entry_text_fields_accept_none():
    """None text fields become empty strings"""
    entry = StandupEntry(
        id="e1",
        user_id="dev1",
        user={"id": "dev1"},
        summary_today=None,
        blockers=None,
        dependencies=None,
    )

    assert entry.summary_today == ""
    assert entry.blockers == ""
    assert entry.is_missing_update()


def test_entry_linked_work(make_entry):
    """Issues come before research in linked work"""
    entry = make_entry(
        "e1",
        "dev1",
        issues=[{"id": "issue-1"}],
        research=[{"id": "research-1", "key": "R-1"}],
    )

    assert entry.linked_work_ids() == ["issue-1", "research-1"]
    assert entry.linked_work_count() == 2
    assert entry.research[0].matches({"R-1"})


def test_entries_are_frozen(make_entry):
    """Entries cannot be mutated by pipeline stages"""
    entry = make_entry("e1", "dev1")

    with pytest.raises(ValidationError):
        entry.blockers = "changed"


@pytest.mark.parametrize(
    "author,expected",
    [
        (EntryAuthor(id="u1", name="Dana", email="dana@example.com"), "Dana"),
        (EntryAuthor(id="u1", name="  ", email="dana@example.com"), "dana@example.com"),
        (EntryAuthor(id="u1"), "u1"),
    ],
)
def test_display_name_fallbacks(author, expected):
    """Name, then email, then id"""
    assert author.display_name() == expected


def test_action_defaults_are_plain_strings():
    """Enum-typed defaults are stored as their values"""
    action = ActionItem(id="a1", title="t", owner_user_id="u1", action_type="ASSIGN_OWNER")

    assert action.severity == "med"
    assert type(action.severity) is str
    assert action.due == "today"
    assert not action.is_decision()
    assert action.evidence_strength() == 0


def test_action_rejects_unknown_type():
    """Action types are a closed set"""
    with pytest.raises(ValidationError):
        ActionItem(id="a1", title="t", owner_user_id="u1", action_type="DO_SOMETHING")


def test_digest_options_alias():
    """includeReferences and include_references are both accepted"""
    assert DigestOptions.model_validate({"includeReferences": True}).include_references
    assert DigestOptions(include_references=True).include_references
    assert not DigestOptions().include_references


def test_author_role_defaults_to_dev():
    """Authors without a role are developers; unknown roles are kept as given"""
    assert EntryAuthor(id="u1").role == Role.DEV.value
    assert EntryAuthor(id="u1", role="DESIGNER").role == "DESIGNER"
