"""Lightweight structured logging for Bedrock invocation events."""

from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict

DISABLED_VALUES = {"0", "false", "no", "n", "off"}


def events_enabled() -> bool:
    """False when ``BEDROCK_LOG_EVENTS`` is set to a falsy value."""
    return os.environ.get("BEDROCK_LOG_EVENTS", "1").strip().lower() not in DISABLED_VALUES


def log_event(event: str, payload: Dict[str, Any] | None = None) -> None:
    """Emit a structured JSON log line to stderr.

    Args:
        event (str): Event name, e.g. ``bedrock_invoke_error``.
        payload (Dict[str, Any] | None): Extra fields merged into the record.
    """
    if not events_enabled():
        return
    data = {
        "event": event,
        "ts": datetime.now(timezone.utc).isoformat(),
    }
    if payload:
        data.update(payload)
    print(json.dumps(data, ensure_ascii=False, default=str), file=sys.stderr)
