"""Centralized configuration for the Huddle standup pipeline.

Typed constants for action generation, digest guardrails, quality scoring and
logging. Environment variable overrides use safe defaults so the pipeline runs
without extra env configuration.
"""

from __future__ import annotations

import os

# --- App ---
APP_VERSION: str = "0.3.0"

# --- Logging ---
LOG_LEVEL: str = os.getenv("HUDDLE_LOG_LEVEL", "INFO")
EVENT_SAMPLE_RATE: float = float(os.getenv("HUDDLE_EVENT_SAMPLE_RATE", "1.0"))

# --- Action generation ---
ACTION_LIMIT: int = int(os.getenv("HUDDLE_ACTION_LIMIT", "15"))
LEAD_ROLES: tuple[str, ...] = ("ADMIN", "PO")  # Role values

# --- Digest guardrails ---
NONE_REPORTED: str = "None reported"
STAKEHOLDER_MAX_ITEMS: int = 3
STAKEHOLDER_ITEM_LENGTH: int = 48
STAKEHOLDER_LINE_LENGTH: int = 160
STAKEHOLDER_PROGRESS_LENGTH: int = 150
NO_SUMMARY_TEXT: str = "No summary available."

# --- Quality scoring ---
VAGUE_MIN_LENGTH: int = 25
QUALITY_WEIGHT_COMPLETION: float = 0.40
QUALITY_WEIGHT_LINKED_WORK: float = 0.25
QUALITY_WEIGHT_BLOCKERS: float = 0.15
QUALITY_WEIGHT_SPECIFICITY: float = 0.20

# --- Summary confidence ---
CONFIDENCE_FLAG_PENALTY: float = 0.2
CONFIDENCE_MAX_PENALTY: float = 0.6
CONFIDENCE_FLOOR: float = 0.2
