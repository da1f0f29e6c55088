"""JSONL log formatter with ISO 8601 timestamps."""

from __future__ import annotations

__all__ = ["ISO8601Formatter", "format_timestamp"]

import json
import logging
from datetime import datetime, timezone


def format_timestamp(created: float) -> str:
    """Format a LogRecord creation time as ISO 8601 UTC with milliseconds.

    Example: 2025-12-04T10:48:37.123Z
    """
    return (
        datetime.fromtimestamp(created, tz=timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    )


class ISO8601Formatter(logging.Formatter):
    """Formats each record as one JSON object per line, "time" first.

    Dict messages are treated as structured events and written as-is.
    Any other message becomes {"message": "..."}, with "level" and
    "logger" added so plain diagnostics remain attributable.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSONL with ISO 8601 timestamp.

        Args:
            record: The log record to format.

        Returns:
            JSON-formatted log entry.
        """
        timestamp = format_timestamp(record.created)

        if isinstance(record.msg, dict):
            log_data = record.msg
        else:
            log_data = {
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }

        # Non-JSON values (datetimes, enums) fall back to str()
        return json.dumps({"time": timestamp, **log_data}, default=str)
