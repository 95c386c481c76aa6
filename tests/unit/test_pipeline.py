"""
Unit tests for the standup pipeline

Tests:
- Stage dependency validation
- Default stages end to end
- Failure handling (stage errors halt the run and are reported)
"""

from dataclasses import dataclass, field

import pytest

from huddle.standup.actions import generate_actions_required
from huddle.standup.pipeline import (
    MergeActionsStage,
    PipelineValidationError,
    StageResult,
    StandupContext,
    StandupPipeline,
    build_standup_digest,
    default_stages,
)

# ============================================================================
# Mock Stages for Testing
# ============================================================================


@dataclass
class RecordingStage:
    """Stage that records it ran"""

    name: str = "recording"
    depends_on: list[str] = field(default_factory=list)

    def process(self, context: StandupContext) -> StageResult:
        context.digest_text += f"[{self.name}]"
        return StageResult(
            success=True, stage_name=self.name, items_processed=0, items_output=0
        )


@dataclass
class ExplodingStage:
    """Stage that raises"""

    name: str = "exploding"
    depends_on: list[str] = field(default_factory=list)

    def process(self, context: StandupContext) -> StageResult:
        raise RuntimeError("boom")


# ============================================================================
# Tests
# ============================================================================


def test_default_stages_are_valid():
    """The default stage list satisfies its own dependencies"""
    assert StandupPipeline().validate_dependencies() == []
    assert [s.name for s in default_stages()] == [
        "derive_actions",
        "merge_actions",
        "rank_actions",
        "score_quality",
        "render_digest",
    ]


def test_pipeline_rejects_out_of_order_stages(make_summary):
    """A stage listed before its dependency fails validation"""
    pipeline = StandupPipeline(
        [RecordingStage(name="b", depends_on=["a"]), RecordingStage(name="a")]
    )

    errors = pipeline.validate_dependencies()
    assert len(errors) == 1
    assert "depends on 'a'" in errors[0]

    with pytest.raises(PipelineValidationError) as exc_info:
        pipeline.run(make_summary(), [])
    assert "Pipeline validation failed" in str(exc_info.value)


def test_pipeline_halts_on_exception(make_summary):
    """An exception is captured as a failed stage and later stages do not run"""
    pipeline = StandupPipeline(
        [RecordingStage(name="first"), ExplodingStage(), RecordingStage(name="last")]
    )

    result = pipeline.run(make_summary(), [])

    assert not result.success
    assert [r.stage_name for r in result.stage_results] == ["first", "exploding"]
    assert result.stage_results[-1].errors == ["boom"]
    assert result.context.digest_text == "[first]"


def test_full_run(team_entries, make_summary, make_bullet):
    """Default stages derive, rank, score and render"""
    summary = make_summary(
        overall_progress="Login shipped",
        blockers=[make_bullet("b1", "Waiting on PO approval for scope change", ["e1"])],
    )

    result = StandupPipeline().run(summary, team_entries, "team-detailed")

    assert result.success
    assert [a.action_type for a in result.actions] == ["CLARIFY_SCOPE"]
    assert result.context.signals.metrics.completion_rate == 100
    assert result.digest.startswith("Detailed Team Digest — 2026-02-16")
    assert "Clarify scope to unblock work" in result.digest
    # Caller's summary is untouched
    assert summary.actions_required == []


def test_total_members_defaults_to_distinct_authors(team_entries, make_summary):
    """Quality is scored against the distinct author count unless given"""
    default = StandupPipeline().run(make_summary(), team_entries, "stakeholder")
    explicit = StandupPipeline().run(
        make_summary(), team_entries, "stakeholder", total_members=6
    )

    assert default.context.total_members == 3
    assert explicit.context.signals.metrics.completion_rate == 50


def test_supplied_actions_are_kept(team_entries, make_summary, make_action):
    """Actions already on the summary are normalized instead of regenerated"""
    summary = make_summary(actions_required=[make_action("legacy", reason="Check in")])

    result = StandupPipeline().run(summary, team_entries)

    assert len(result.actions) == 1
    assert result.actions[0].reason == "Check in"
    assert result.stage_results[0].metadata == {"origin": "supplied"}


def test_action_limit(make_entry, make_summary):
    """The rank stage applies the action limit"""
    entries = [make_entry(f"e{i}", f"dev{i}", name=f"Dev {i}") for i in range(6)]

    result = StandupPipeline().run(make_summary(), entries, action_limit=4)

    assert len(result.actions) == 4
    assert result.stage_results[2].metadata == {"dropped": 2}


def test_unknown_digest_type_raises(make_summary):
    """Digest type is validated before any stage runs"""
    with pytest.raises(ValueError):
        StandupPipeline().run(make_summary(), [], "weekly-poem")


def test_build_standup_digest_uses_fallback_summary(team_entries):
    """Without a summary, the fallback summary drives the run"""
    result = build_standup_digest("project-1", "2026-02-16", team_entries, "sprint-snapshot")

    assert result.success
    assert result.context.summary.summary_id == "project-1:2026-02-16"
    assert result.digest.startswith("# Sprint Snapshot — Week of 2026-02-16")
    # The fallback blocker bullet yields a scope action; the lead's gap an owner action
    assert {a.action_type for a in result.actions} == {"CLARIFY_SCOPE", "ASSIGN_OWNER"}


def test_result_to_dict(team_entries):
    """The result serializes to plain JSON values"""
    result = build_standup_digest("project-1", "2026-02-16", team_entries, "stakeholder")

    payload = result.to_dict()

    assert payload["summary_id"] == "project-1:2026-02-16"
    assert payload["digest_type"] == "stakeholder"
    assert payload["success"] is True
    assert payload["quality"]["metrics"]["completion_rate"] == 100
    assert all(isinstance(a["id"], str) for a in payload["actions"])
    assert [m["stage"] for m in payload["stage_metrics"]] == [
        "derive_actions",
        "merge_actions",
        "rank_actions",
        "score_quality",
        "render_digest",
    ]


def test_stage_dependencies_are_per_instance():
    """Changing one stage's dependencies leaves other instances alone"""
    first, second = MergeActionsStage(), MergeActionsStage()
    first.depends_on.append("extra")

    assert second.depends_on == ["derive_actions"]
    assert StandupPipeline().validate_dependencies() == []


def test_pipeline_actions_match_generated_actions(make_entry, make_summary, make_bullet):
    """The action stages and generate_actions_required agree, cap included"""
    entries = [make_entry("e-lead", "lead1", role="PO", progress="Ran the planning session")]
    entries += [make_entry(f"e{i:02d}", f"dev{i:02d}", name=f"Dev {i:02d}") for i in range(18)]
    summary = make_summary(
        blockers=[make_bullet("b1", "Waiting on PO approval for scope change", ["e00"])],
        dependencies=[
            make_bullet("d1", "Need API access", ["e01"]),
            make_bullet("d2", "need   api access", ["e02"]),
        ],
    )

    result = StandupPipeline().run(summary, entries)

    assert [a.id for a in result.actions] == [
        a.id for a in generate_actions_required(summary, entries)
    ]
    assert len(result.actions) == 15
