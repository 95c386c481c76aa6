"""
Structured Event Logging for Huddle

Provides one-line JSON event logging for the standup pipeline with:
- Correlation via summary_id (one project-day)
- Event taxonomy covering derivation, merge, scoring and rendering
- Sampling for non-error events (100% for errors)
- Long string truncation so free-text standup fields never flood the log

Usage:
    from huddle.observability.structured import StructuredLogger, EventType

    events = StructuredLogger(summary_id="project-1:2026-02-16")
    events.log_event(EventType.ACTIONS_DERIVED, candidates=7)

Output:
    {"ts":"2026-02-16T09:12:00+00:00","level":"INFO","summary":"project-1:2026-02-16","event":"actions_derived","candidates":7}
"""

from __future__ import annotations

import json
import logging
import random
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

from huddle import config

# Configure base logger
logger = logging.getLogger("huddle.structured")

_MAX_FIELD_CHARS = 200


class EventType(str, Enum):
    """Event taxonomy for the standup pipeline"""

    # 1. Action generation
    ACTIONS_DERIVED = "actions_derived"
    ACTIONS_MERGED = "actions_merged"
    ACTIONS_CAPPED = "actions_capped"

    # 2. Quality
    QUALITY_SCORED = "quality_scored"

    # 3. Rendering
    DIGEST_RENDERED = "digest_rendered"

    # 4. Failures
    STAGE_ERROR = "stage_error"
    SERIALIZE_ERROR = "serialize_error"


EVENT_SEVERITY = {
    EventType.ACTIONS_DERIVED: logging.DEBUG,
    EventType.ACTIONS_MERGED: logging.DEBUG,
    EventType.ACTIONS_CAPPED: logging.INFO,
    EventType.QUALITY_SCORED: logging.INFO,
    EventType.DIGEST_RENDERED: logging.INFO,
    EventType.STAGE_ERROR: logging.ERROR,
    EventType.SERIALIZE_ERROR: logging.WARNING,
}


class SafeJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles common non-serializable types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (set, frozenset)):
            return sorted(obj, key=str)
        if hasattr(obj, "model_dump"):
            return obj.model_dump(mode="json")
        return super().default(obj)


class StructuredLogger:
    """
    Structured event logger for one pipeline run.

    Features:
    - Correlation via summary_id
    - Sampling: configurable for INFO/DEBUG, 100% for WARNING and above
    - One-line JSON output for easy parsing
    """

    def __init__(self, summary_id: str | None = None, sample_rate: float | None = None):
        """
        Args:
            summary_id: Project-day identifier (e.g., "project-1:2026-02-16")
            sample_rate: Fraction of non-error events to emit (0.0-1.0)
        """
        self.summary_id = summary_id or "unknown"
        self.sample_rate = config.EVENT_SAMPLE_RATE if sample_rate is None else sample_rate

    def _should_log(self, severity: int) -> bool:
        if severity >= logging.WARNING:
            return True
        if self.sample_rate >= 1.0:
            return True
        return random.random() < self.sample_rate

    def log_event(self, event_type: EventType, **kwargs: Any) -> None:
        """
        Log a structured event.

        Side Effects:
            - Writes one JSON line to the ``huddle.structured`` logger
        """
        severity = EVENT_SEVERITY.get(event_type, logging.INFO)
        if not logger.isEnabledFor(severity) or not self._should_log(severity):
            return

        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": logging.getLevelName(severity),
            "summary": self.summary_id,
            "event": event_type.value,
        }
        for key, value in kwargs.items():
            if isinstance(value, str) and len(value) > _MAX_FIELD_CHARS:
                event[key] = value[:_MAX_FIELD_CHARS] + "..."
            else:
                event[key] = value

        try:
            json_line = json.dumps(event, separators=(",", ":"), cls=SafeJSONEncoder)
            logger.log(severity, json_line)
        except (TypeError, ValueError) as e:
            logger.error(
                f"structured_log_error: failed to serialize event type={event_type} error={e}"
            )

    # Convenience methods for common events

    def actions_capped(self, before: int, after: int) -> None:
        """Log when ranking truncated the action list"""
        self.log_event(EventType.ACTIONS_CAPPED, before=before, after=after)

    def stage_error(self, stage: str, error: str) -> None:
        """Log a pipeline stage failure"""
        self.log_event(EventType.STAGE_ERROR, stage=stage, error=error)
