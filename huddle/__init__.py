"""Huddle - standup intelligence for daily team updates"""

from __future__ import annotations

__version__ = "0.3.0"


# Lazy imports so importing config or logging does not pull in pydantic models
def __getattr__(name: str):
    if name in ("StandupEntry", "StandupSummary", "ActionItem", "DigestType"):
        from huddle.standup import models

        return getattr(models, name)

    if name in ("StandupPipeline", "build_standup_digest"):
        from huddle.standup import pipeline

        return getattr(pipeline, name)

    if name == "render_digest":
        from huddle.standup.digest import render_digest

        return render_digest

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "StandupEntry",
    "StandupSummary",
    "ActionItem",
    "DigestType",
    "StandupPipeline",
    "build_standup_digest",
    "render_digest",
]
