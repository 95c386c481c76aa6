"""
Standup domain models.

Inputs (entries, bullets) arrive from the capture and summarization layers and
are frozen: no stage in this package mutates a caller's snapshot. Derived
records (action items, quality signals, summaries) are rebuilt rather than
edited, via ``model_copy(update=...)``.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DUE_TODAY = "today"
DUE_TOMORROW = "tomorrow"


class ActionType(str, Enum):
    """Closed set of follow-up kinds the derivation engine may emit."""

    UNBLOCK_DECISION = "UNBLOCK_DECISION"
    REQUEST_HELP = "REQUEST_HELP"
    FOLLOW_UP_STATUS = "FOLLOW_UP_STATUS"
    ASSIGN_OWNER = "ASSIGN_OWNER"
    ESCALATE_BLOCKER = "ESCALATE_BLOCKER"
    CLARIFY_SCOPE = "CLARIFY_SCOPE"


class Role(str, Enum):
    """Project roles. Authors may carry other strings; only ADMIN and PO lead."""

    ADMIN = "ADMIN"
    PO = "PO"
    DEV = "DEV"
    QA = "QA"
    VIEWER = "VIEWER"


class Severity(str, Enum):
    LOW = "low"
    MED = "med"
    HIGH = "high"


SEVERITY_WEIGHT: dict[str, int] = {
    Severity.HIGH.value: 3,
    Severity.MED.value: 2,
    Severity.LOW.value: 1,
}


class DigestType(str, Enum):
    """Audience templates supported by the digest renderer."""

    STAKEHOLDER = "stakeholder"
    TEAM_DETAILED = "team-detailed"
    SPRINT_SNAPSHOT = "sprint-snapshot"


def _blank_if_none(value: str | None) -> str:
    return value if value is not None else ""


# =============================================================================
# Inputs: entries and linked work
# =============================================================================


class EntryAuthor(BaseModel):
    """The person who filed a standup entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str | None = None
    email: str | None = None
    role: str = Role.DEV.value

    def display_name(self) -> str:
        return (self.name or "").strip() or (self.email or "").strip() or self.id


class LinkedWorkItem(BaseModel):
    """An issue or research item linked from a standup entry."""

    model_config = ConfigDict(frozen=True)

    id: str
    key: str | None = None
    assignee_id: str | None = None
    kind: Literal["issue", "research"] = "issue"

    def matches(self, work_ids: set[str]) -> bool:
        return self.id in work_ids or (bool(self.key) and self.key in work_ids)


class StandupEntry(BaseModel):
    """One person's status for one project-day."""

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    user: EntryAuthor
    progress_since_yesterday: str = ""
    summary_today: str = ""
    blockers: str = ""
    dependencies: str = ""
    is_complete: bool = False
    issues: list[LinkedWorkItem] = Field(default_factory=list)
    research: list[LinkedWorkItem] = Field(default_factory=list)

    @field_validator(
        "progress_since_yesterday", "summary_today", "blockers", "dependencies", mode="before"
    )
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        return _blank_if_none(v)

    def linked_work_items(self) -> list[LinkedWorkItem]:
        return [*self.issues, *self.research]

    def linked_work_ids(self) -> list[str]:
        return [item.id for item in self.linked_work_items()]

    def linked_work_count(self) -> int:
        return len(self.issues) + len(self.research)

    def is_missing_update(self) -> bool:
        return not self.summary_today.strip() and not self.progress_since_yesterday.strip()


# =============================================================================
# Summary contents
# =============================================================================


class SummaryBullet(BaseModel):
    """One achievement, blocker, dependency or assignment gap with its evidence."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    source_entry_ids: list[str] = Field(default_factory=list)
    linked_work_ids: list[str] = Field(default_factory=list)

    @field_validator("text", mode="before")
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        return _blank_if_none(v)


class ActionItem(BaseModel):
    """A derived, ranked, stably identified follow-up."""

    model_config = ConfigDict(frozen=True, use_enum_values=True, validate_default=True)

    id: str
    title: str
    owner_user_id: str
    target_user_id: str | None = None
    action_type: ActionType
    reason: str = ""
    due: str = DUE_TODAY
    severity: Severity = Severity.MED
    source_entry_ids: list[str] = Field(default_factory=list)
    linked_work_ids: list[str] = Field(default_factory=list)

    def evidence_strength(self) -> int:
        return len(self.source_entry_ids) + len(self.linked_work_ids)

    def is_decision(self) -> bool:
        return self.action_type in (
            ActionType.UNBLOCK_DECISION.value,
            ActionType.CLARIFY_SCOPE.value,
        )


class OpenQuestion(BaseModel):
    """Passthrough question; sorted and rendered, never derived here."""

    model_config = ConfigDict(frozen=True, use_enum_values=True, validate_default=True)

    id: str
    question_text: str
    source_entry_ids: list[str] = Field(default_factory=list)
    priority: Severity | None = None


class QualityMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    completion_rate: int = Field(..., ge=0, le=100)
    missing_linked_work_rate: int = Field(..., ge=0, le=100)
    missing_blockers_rate: int = Field(..., ge=0, le=100)
    vague_update_rate: int = Field(..., ge=0, le=100)


class QualitySignal(BaseModel):
    """Data-quality score for one batch of entries."""

    model_config = ConfigDict(frozen=True)

    quality_score: int = Field(..., ge=0, le=100)
    metrics: QualityMetrics


class StandupSummary(BaseModel):
    """Structured summary for one project-day.

    ``summary_id`` is conventionally ``"{project_id}:{YYYY-MM-DD}"`` and seeds
    every action id derived from this summary.
    """

    model_config = ConfigDict(frozen=True)

    summary_id: str
    project_id: str = ""
    date: str
    overall_progress: str = ""
    actions_required: list[ActionItem] = Field(default_factory=list)
    open_questions: list[OpenQuestion] = Field(default_factory=list)
    achievements: list[SummaryBullet] = Field(default_factory=list)
    blockers: list[SummaryBullet] = Field(default_factory=list)
    dependencies: list[SummaryBullet] = Field(default_factory=list)
    assignment_gaps: list[SummaryBullet] = Field(default_factory=list)

    def all_bullets(self) -> list[SummaryBullet]:
        return [*self.achievements, *self.blockers, *self.dependencies, *self.assignment_gaps]


BULLET_SECTIONS: tuple[str, ...] = ("achievements", "blockers", "dependencies", "assignment_gaps")


# =============================================================================
# Digest inputs
# =============================================================================


class DigestSource(BaseModel):
    """Everything a digest template may read."""

    model_config = ConfigDict(frozen=True)

    date: str
    generated_at: str | None = None
    sprint_name: str | None = None
    sprint_date_range: str | None = None
    summary: StandupSummary | None = None
    rendered_progress: str | None = None
    visible_actions: list[ActionItem] | None = None
    visible_open_questions: list[OpenQuestion] | None = None
    signals: QualitySignal | None = None


class DigestOptions(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    include_references: bool = Field(default=False, alias="includeReferences")
