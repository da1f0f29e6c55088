"""Logging helper utilities.

- Event serialization (audit event model_dump with consistent options)
- Sanitization (log injection prevention for caller-supplied strings)
"""

from __future__ import annotations

__all__ = [
    "sanitize_for_logging",
    "serialize_audit_event",
]

from typing import Any

from pydantic import BaseModel


def serialize_audit_event(event: BaseModel) -> dict[str, Any]:
    """Serialize a Pydantic event model for audit logging.

    - Excludes the 'time' field (added by ISO8601Formatter at log time)
    - Excludes None values for cleaner logs
    - JSON mode, so enums and tuples become plain JSON values

    Args:
        event: Pydantic model instance (e.g., DecisionEvent).

    Returns:
        Serialized event data ready for logging.

    Example:
        >>> event = DecisionEvent(decision="DENY", reason="DEFAULT_DENY", ...)
        >>> serialize_audit_event(event)
        {"decision": "DENY", "reason": "DEFAULT_DENY", ...}
    """
    return event.model_dump(mode="json", exclude={"time"}, exclude_none=True)


def sanitize_for_logging(value: Any) -> str:
    """Escape newlines and tabs so caller-supplied strings cannot forge log lines.

    Example:
        >>> sanitize_for_logging("invoice/1\\nfake")
        'invoice/1\\\\nfake'
    """
    if not isinstance(value, str):
        return str(value)
    return value.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
