"""Pydantic model for decision audit events (audit/decisions.jsonl).

The 'time' field is None on construction; ISO8601Formatter adds the
timestamp during serialization, so there is a single source of truth
for timestamps.
"""

from __future__ import annotations

__all__ = [
    "DecisionEvent",
]

from typing import Literal

from pydantic import BaseModel, ConfigDict


class DecisionEvent(BaseModel):
    """One authorization decision.

    Attributes:
        time: Set by the formatter, never by callers.
        decision: "ALLOW" or "DENY".
        reason: EXPLICIT_ALLOW, EXPLICIT_DENY or DEFAULT_DENY.
        matched_statements: Statement ids that determined the outcome.
        action: Requested action.
        resource: Requested resource name.
        principal_id: Requesting principal id.
        scope: Scope the request was evaluated in ("TENANT:t1").
        role_ids: Role ids used during resolution.
        group_ids: Group ids used during resolution.
        policy_ids: Ids of the resolved policies, in evaluation order.
        policy_eval_ms: Resolution + evaluation time in milliseconds.
    """

    time: str | None = None

    decision: Literal["ALLOW", "DENY"]
    reason: str
    matched_statements: list[str] | None = None

    action: str
    resource: str
    principal_id: str
    scope: str | None = None
    role_ids: list[str] | None = None
    group_ids: list[str] | None = None
    policy_ids: list[str] | None = None

    policy_eval_ms: float | None = None

    model_config = ConfigDict(extra="forbid")
