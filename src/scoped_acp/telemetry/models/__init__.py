"""Pydantic models for telemetry events."""

from scoped_acp.telemetry.models.decision import DecisionEvent

__all__ = [
    "DecisionEvent",
]
