"""
Unit tests for action ranking

Ranking must be a total order: the output never depends on input order.
"""

import random

import pytest

from huddle.standup.ranking import action_sort_key, rank_actions


def test_severity_ranks_first(make_action):
    """High beats med beats low"""
    actions = [
        make_action("a1", severity="low"),
        make_action("a2", severity="high"),
        make_action("a3", severity="med"),
    ]

    assert [a.id for a in rank_actions(actions)] == ["a2", "a3", "a1"]


def test_due_breaks_severity_ties(make_action):
    """today > tomorrow > explicit date"""
    actions = [
        make_action("a1", due="2026-03-01"),
        make_action("a2", due="tomorrow"),
        make_action("a3", due="today"),
    ]

    assert [a.id for a in rank_actions(actions)] == ["a3", "a2", "a1"]


def test_decision_types_break_due_ties(make_action):
    """Decision actions rank above other types at equal severity and due"""
    actions = [
        make_action("a1", action_type="REQUEST_HELP"),
        make_action("a2", action_type="CLARIFY_SCOPE"),
        make_action("a3", action_type="UNBLOCK_DECISION"),
    ]

    ranked = [a.id for a in rank_actions(actions)]

    assert ranked[2] == "a1"
    assert set(ranked[:2]) == {"a2", "a3"}


def test_evidence_then_id_break_remaining_ties(make_action):
    """More evidence first, then ascending id"""
    actions = [
        make_action("a3"),
        make_action("a1"),
        make_action("a2", source_entry_ids=["e1"], linked_work_ids=["HUD-1"]),
    ]

    assert [a.id for a in rank_actions(actions)] == ["a2", "a1", "a3"]


def test_ranking_is_independent_of_input_order(make_action):
    """Any permutation ranks identically"""
    actions = [
        make_action(
            f"a{i:02d}",
            severity=["low", "med", "high"][i % 3],
            due=["today", "tomorrow", "2026-03-01"][i % 2],
            action_type=["REQUEST_HELP", "UNBLOCK_DECISION"][i % 2],
            source_entry_ids=[f"e{j}" for j in range(i % 4)],
        )
        for i in range(30)
    ]
    expected = [a.id for a in rank_actions(actions)]

    rng = random.Random(42)
    for _ in range(20):
        shuffled = actions[:]
        rng.shuffle(shuffled)
        assert [a.id for a in rank_actions(shuffled)] == expected


def test_sort_keys_are_unique(make_action):
    """No two distinct actions share a sort key"""
    actions = [make_action(f"a{i}") for i in range(5)]
    keys = [action_sort_key(a) for a in actions]

    assert len(set(keys)) == len(keys)


@pytest.mark.parametrize("limit,expected", [(None, 20), (15, 15), (0, 0), (-1, 0)])
def test_limit(make_action, limit, expected):
    """The cap truncates after ordering"""
    actions = [make_action(f"a{i:02d}") for i in range(20)]

    ranked = rank_actions(actions, limit=limit)

    assert len(ranked) == expected
    assert [a.id for a in ranked] == [a.id for a in rank_actions(actions)][:expected]
