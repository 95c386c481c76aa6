"""
JSON-safe payloads for anything the pipeline hands to a persistence layer.

Pipeline outputs (summaries, action lists, quality signals) are stored as JSON
columns by the caller. A payload that cannot be serialized must not abort the
request; it is replaced by a sentinel describing the failure.
"""

from __future__ import annotations

import json
from typing import Any

from huddle.observability.logging import get_logger
from huddle.observability.structured import EventType, SafeJSONEncoder, StructuredLogger

logger = get_logger(__name__)

NON_SERIALIZABLE_JSON = "NON_SERIALIZABLE_JSON"


def to_json_value(value: Any, summary_id: str | None = None) -> Any:
    """
    Return a plain JSON value (dict/list/str/int/float/bool/None) for ``value``.

    Pydantic models, enums and dates are converted via SafeJSONEncoder. If the
    value still cannot be serialized (cyclic structures, arbitrary objects) the
    result is ``{"error": "NON_SERIALIZABLE_JSON", "message": "..."}``.

    Side Effects:
        - Logs a serialize_error event when the sentinel is returned
    """
    try:
        return json.loads(json.dumps(value, cls=SafeJSONEncoder))
    except (TypeError, ValueError, RecursionError) as exc:
        StructuredLogger(summary_id).log_event(EventType.SERIALIZE_ERROR, error=str(exc))
        logger.warning("Replacing non-serializable payload with sentinel: %s", exc)
        return {"error": NON_SERIALIZABLE_JSON, "message": str(exc)}
