"""
Render a standup digest from a JSON export.

Usage:
    huddle-digest day.json --type stakeholder
    huddle-digest day.json --type team-detailed --include-references --total-members 6

Input JSON:
    {
      "project_id": "project-1",
      "date": "2026-02-16",
      "entries": [...],
      "summary": {...},          (optional; built from entries when absent)
      "sprint_name": "Sprint 12", (optional)
      "generated_at": "2026-02-16T09:00:00Z" (optional)
    }

Exit codes: 0 on success, 1 on unreadable input or a failed pipeline run.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# Config reads the environment at import time
load_dotenv()

from huddle import config  # noqa: E402
from huddle.observability.logging import get_logger  # noqa: E402
from huddle.standup.models import (  # noqa: E402
    DigestOptions,
    DigestType,
    StandupEntry,
    StandupSummary,
)
from huddle.standup.pipeline import build_standup_digest  # noqa: E402

logger = get_logger(__name__)


class DigestRequest(BaseModel):
    """One project-day export as read from disk."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    date: str
    entries: list[StandupEntry] = Field(default_factory=list)
    summary: StandupSummary | None = None
    sprint_name: str | None = None
    sprint_date_range: str | None = None
    generated_at: str | None = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="huddle-digest", description="Render a standup digest from a JSON export"
    )
    parser.add_argument("input", type=Path, help="Path to the project-day JSON file")
    parser.add_argument(
        "--type",
        dest="digest_type",
        choices=[kind.value for kind in DigestType],
        default=DigestType.TEAM_DETAILED.value,
        help="Digest template (default: team-detailed)",
    )
    parser.add_argument(
        "--include-references",
        action="store_true",
        help='Append "(refs: ...)" suffixes to rendered items',
    )
    parser.add_argument(
        "--total-members",
        type=int,
        help="Project member count for quality scoring (default: distinct entry authors)",
    )
    parser.add_argument("--output", type=Path, help="Write the digest here instead of stdout")
    parser.add_argument("--version", action="version", version=f"%(prog)s {config.APP_VERSION}")
    return parser


def load_request(path: Path) -> DigestRequest:
    """
    Read and validate an export file.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is not valid JSON (json.JSONDecodeError)
        ValidationError: If the JSON does not match the export shape
    """
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)
    return DigestRequest.model_validate(payload)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        request = load_request(args.input)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        print(f"Error: could not load {args.input}: {e}", file=sys.stderr)
        return 1

    result = build_standup_digest(
        request.project_id,
        request.date,
        request.entries,
        args.digest_type,
        summary=request.summary,
        total_members=args.total_members,
        options=DigestOptions(include_references=args.include_references),
        sprint_name=request.sprint_name,
        sprint_date_range=request.sprint_date_range,
        generated_at=request.generated_at,
    )
    if not result.success:
        failed = [r for r in result.stage_results if not r.success]
        for stage in failed:
            print(f"Error: stage '{stage.stage_name}' failed: {stage.errors}", file=sys.stderr)
        return 1

    if args.output:
        args.output.write_text(result.digest + "\n", encoding="utf-8")
        logger.info("Wrote %s digest to %s", args.digest_type, args.output)
    else:
        print(result.digest)
    return 0


if __name__ == "__main__":
    sys.exit(main())
