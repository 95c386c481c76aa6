"""
Standup Pipeline - one project-day from entries to a rendered digest

Stages (each declares what it depends on):
    derive_actions → merge_actions → rank_actions → score_quality → render_digest

Principles:
- Stages read and write a shared StandupContext; caller snapshots are never mutated
- Dependencies are declared and validated before anything runs
- A failing stage halts the run and is reported in the result, never re-raised
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from huddle import config
from huddle.observability.logging import get_logger
from huddle.observability.structured import EventType, StructuredLogger
from huddle.standup.actions import derive_step, merge_step, rank_step
from huddle.standup.digest import render_digest
from huddle.standup.models import (
    ActionItem,
    DigestOptions,
    DigestSource,
    DigestType,
    QualitySignal,
    StandupEntry,
    StandupSummary,
)
from huddle.standup.quality import calculate_standup_quality
from huddle.standup.summary import build_fallback_summary
from huddle.utils.serialization import to_json_value

logger = get_logger(__name__)


# ============================================================================
# Data Structures
# ============================================================================


@dataclass
class StandupContext:
    """
    Shared context across pipeline stages.

    Inputs are set when the run starts; each stage fills in its own outputs.
    """

    # Inputs
    summary: StandupSummary
    entries: list[StandupEntry]
    digest_type: DigestType
    total_members: int
    options: DigestOptions = field(default_factory=DigestOptions)
    action_limit: int = config.ACTION_LIMIT
    sprint_name: str | None = None
    sprint_date_range: str | None = None
    generated_at: str | None = None

    # Stage outputs
    candidates: list[ActionItem] = field(default_factory=list)
    merged: list[ActionItem] = field(default_factory=list)
    actions: list[ActionItem] = field(default_factory=list)
    signals: QualitySignal | None = None
    digest_text: str = ""

    @property
    def events(self) -> StructuredLogger:
        return StructuredLogger(self.summary.summary_id)


@dataclass
class StageResult:
    """Output contract for pipeline stages."""

    success: bool
    stage_name: str
    items_processed: int
    items_output: int
    metadata: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)


class StandupStage(Protocol):
    """
    Contract for pipeline stages.

    Side Effects: Stages write their outputs into the context (documented per stage)
    """

    name: str
    depends_on: list[str]

    def process(self, context: StandupContext) -> StageResult: ...


# ============================================================================
# Stages
# ============================================================================


@dataclass
class DeriveActionsStage:
    """
    Produce candidate actions.

    Caller-supplied actions on the summary are kept (re-normalized and
    re-identified); otherwise candidates are derived from bullets and entries.

    Side Effects: Sets context.candidates
    """

    name: str = "derive_actions"
    depends_on: list[str] = field(default_factory=list)

    def process(self, context: StandupContext) -> StageResult:
        origin = "supplied" if context.summary.actions_required else "derived"
        context.candidates = derive_step(
            context.summary, context.entries, context.events, keep_supplied=True
        )
        return StageResult(
            success=True,
            stage_name=self.name,
            items_processed=len(context.entries),
            items_output=len(context.candidates),
            metadata={"origin": origin},
        )


@dataclass
class MergeActionsStage:
    """
    Collapse duplicate candidates.

    Side Effects: Sets context.merged
    """

    name: str = "merge_actions"
    depends_on: list[str] = field(default_factory=lambda: ["derive_actions"])

    def process(self, context: StandupContext) -> StageResult:
        context.merged = merge_step(
            context.summary.summary_id, context.candidates, context.events
        )
        return StageResult(
            success=True,
            stage_name=self.name,
            items_processed=len(context.candidates),
            items_output=len(context.merged),
        )


@dataclass
class RankActionsStage:
    """
    Order merged actions and apply the action cap.

    Side Effects: Sets context.actions
    """

    name: str = "rank_actions"
    depends_on: list[str] = field(default_factory=lambda: ["merge_actions"])

    def process(self, context: StandupContext) -> StageResult:
        context.actions = rank_step(context.merged, context.action_limit, context.events)
        return StageResult(
            success=True,
            stage_name=self.name,
            items_processed=len(context.merged),
            items_output=len(context.actions),
            metadata={"dropped": len(context.merged) - len(context.actions)},
        )


@dataclass
class ScoreQualityStage:
    """
    Score the day's entries.

    Side Effects: Sets context.signals
    """

    name: str = "score_quality"
    depends_on: list[str] = field(default_factory=list)

    def process(self, context: StandupContext) -> StageResult:
        signals = calculate_standup_quality(context.entries, context.total_members)
        context.signals = signals
        context.events.log_event(
            EventType.QUALITY_SCORED,
            quality_score=signals.quality_score,
            entries=len(context.entries),
            total_members=context.total_members,
        )
        return StageResult(
            success=True,
            stage_name=self.name,
            items_processed=len(context.entries),
            items_output=1,
            metadata={"quality_score": signals.quality_score},
        )


@dataclass
class RenderDigestStage:
    """
    Render the requested digest template.

    Side Effects: Sets context.digest_text
    """

    name: str = "render_digest"
    depends_on: list[str] = field(default_factory=lambda: ["rank_actions", "score_quality"])

    def process(self, context: StandupContext) -> StageResult:
        summary = context.summary.model_copy(update={"actions_required": context.actions})
        source = DigestSource(
            date=summary.date,
            generated_at=context.generated_at,
            sprint_name=context.sprint_name,
            sprint_date_range=context.sprint_date_range,
            summary=summary,
            signals=context.signals,
        )
        context.digest_text = render_digest(context.digest_type, source, context.options)
        context.events.log_event(
            EventType.DIGEST_RENDERED,
            digest_type=context.digest_type.value,
            chars=len(context.digest_text),
        )
        return StageResult(
            success=True,
            stage_name=self.name,
            items_processed=len(context.actions),
            items_output=len(context.digest_text.splitlines()),
        )


def default_stages() -> list[StandupStage]:
    return [
        DeriveActionsStage(),
        MergeActionsStage(),
        RankActionsStage(),
        ScoreQualityStage(),
        RenderDigestStage(),
    ]


# ============================================================================
# Pipeline Orchestrator
# ============================================================================


class PipelineValidationError(Exception):
    """Raised when pipeline stage dependencies are invalid"""

    pass


@dataclass
class StandupPipeline:
    """
    Declarative standup pipeline with explicit stage dependencies.

    Example:
        pipeline = StandupPipeline(default_stages())
        result = pipeline.run(summary, entries, digest_type="stakeholder")
    """

    stages: list[StandupStage] = field(default_factory=default_stages)

    def validate_dependencies(self) -> list[str]:
        """
        Check that every stage's dependencies run before it.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        completed_stages: set[str] = set()

        for stage in self.stages:
            for dep in stage.depends_on:
                if dep not in completed_stages:
                    errors.append(
                        f"Stage '{stage.name}' depends on '{dep}' "
                        f"which has not run yet (or doesn't exist)"
                    )
            completed_stages.add(stage.name)

        return errors

    def run(
        self,
        summary: StandupSummary,
        entries: Sequence[StandupEntry],
        digest_type: DigestType | str = DigestType.TEAM_DETAILED,
        *,
        total_members: int | None = None,
        options: DigestOptions | None = None,
        action_limit: int = config.ACTION_LIMIT,
        sprint_name: str | None = None,
        sprint_date_range: str | None = None,
        generated_at: str | None = None,
    ) -> PipelineResult:
        """
        Execute the pipeline.

        Args:
            summary: Structured summary for the project-day
            entries: The day's standup entries
            digest_type: Template to render
            total_members: Project member count (defaults to distinct entry authors)
            options: Digest rendering options

        Returns:
            PipelineResult with context and stage metrics

        Raises:
            PipelineValidationError: If stage dependencies are invalid
            ValueError: If digest_type is not a known template
        """
        validation_errors = self.validate_dependencies()
        if validation_errors:
            raise PipelineValidationError(
                "Pipeline validation failed:\n" + "\n".join(validation_errors)
            )

        if total_members is None:
            total_members = len({entry.user_id for entry in entries})

        context = StandupContext(
            summary=summary,
            entries=list(entries),
            digest_type=DigestType(digest_type),
            total_members=total_members,
            options=options or DigestOptions(),
            action_limit=action_limit,
            sprint_name=sprint_name,
            sprint_date_range=sprint_date_range,
            generated_at=generated_at,
        )

        stage_results = []
        for stage in self.stages:
            try:
                logger.debug("Running stage: %s", stage.name)
                result = stage.process(context)
                stage_results.append(result)

                if not result.success:
                    logger.error("Stage '%s' failed: %s", stage.name, result.errors)
                    break

                logger.debug(
                    "Stage '%s' complete: %d processed, %d output",
                    stage.name,
                    result.items_processed,
                    result.items_output,
                )

            except Exception as e:
                logger.exception("Stage '%s' raised exception", stage.name)
                context.events.stage_error(stage.name, str(e))
                stage_results.append(
                    StageResult(
                        success=False,
                        stage_name=stage.name,
                        items_processed=0,
                        items_output=0,
                        errors=[str(e)],
                    )
                )
                break

        return PipelineResult(
            context=context,
            stage_results=stage_results,
            success=all(r.success for r in stage_results),
        )


@dataclass
class PipelineResult:
    """Final pipeline output with metrics"""

    context: StandupContext
    stage_results: list[StageResult]
    success: bool

    @property
    def digest(self) -> str:
        return self.context.digest_text

    @property
    def actions(self) -> list[ActionItem]:
        return self.context.actions

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe response"""
        context = self.context
        return {
            "summary_id": context.summary.summary_id,
            "digest_type": context.digest_type.value,
            "digest": context.digest_text,
            "actions": to_json_value(context.actions, context.summary.summary_id),
            "quality": to_json_value(context.signals, context.summary.summary_id),
            "success": self.success,
            "stage_metrics": [
                {
                    "stage": r.stage_name,
                    "processed": r.items_processed,
                    "output": r.items_output,
                    "metadata": r.metadata,
                    "errors": r.errors,
                }
                for r in self.stage_results
            ],
        }


def build_standup_digest(
    project_id: str,
    date: str,
    entries: Sequence[StandupEntry],
    digest_type: DigestType | str = DigestType.TEAM_DETAILED,
    *,
    summary: StandupSummary | None = None,
    **run_options: Any,
) -> PipelineResult:
    """
    Run the default pipeline for one project-day.

    Without a summary, a fallback summary is built from the entries.
    """
    if summary is None:
        summary = build_fallback_summary(project_id, date, entries)
    return StandupPipeline().run(summary, entries, digest_type, **run_options)
