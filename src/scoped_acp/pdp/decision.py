"""Decision model for policy evaluation outcomes.

These values define the possible outcomes of policy evaluation,
used by the engine to communicate decisions to enforcement points.
"""

from __future__ import annotations

__all__ = [
    "Decision",
    "DecisionReason",
]

from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DecisionReason(str, Enum):
    """Why a decision came out the way it did.

    Inherits from str for easy serialization and comparison.

    Attributes:
        EXPLICIT_DENY: At least one matching statement had effect Deny.
        EXPLICIT_ALLOW: At least one matching statement had effect Allow, none Deny.
        DEFAULT_DENY: No statement matched (zero trust default).
    """

    EXPLICIT_DENY = "EXPLICIT_DENY"
    EXPLICIT_ALLOW = "EXPLICIT_ALLOW"
    DEFAULT_DENY = "DEFAULT_DENY"


class Decision(BaseModel):
    """Result of evaluating one or more policy documents.

    Produced fresh for every evaluation call and never cached by the engine.
    `allowed` is True if and only if `reason` is EXPLICIT_ALLOW.

    Attributes:
        allowed: Whether the request is permitted.
        reason: Which combining outcome produced the decision.
        matched_statements: Ids of the statements that determined the outcome,
            in evaluation order (Sid, or "stmt#<index>" when absent).
    """

    allowed: bool
    reason: DecisionReason
    matched_statements: tuple[str, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def allowed_matches_reason(self) -> Self:
        """Reject decisions whose allowed flag contradicts the reason."""
        if self.allowed != (self.reason == DecisionReason.EXPLICIT_ALLOW):
            raise ValueError(
                f"allowed={self.allowed} is inconsistent with reason={self.reason.value}"
            )
        return self

    @classmethod
    def explicit_allow(cls, matched: list[str] | tuple[str, ...]) -> "Decision":
        return cls(allowed=True, reason=DecisionReason.EXPLICIT_ALLOW, matched_statements=tuple(matched))

    @classmethod
    def explicit_deny(cls, matched: list[str] | tuple[str, ...]) -> "Decision":
        return cls(allowed=False, reason=DecisionReason.EXPLICIT_DENY, matched_statements=tuple(matched))

    @classmethod
    def default_deny(cls, matched: list[str] | tuple[str, ...] = ()) -> "Decision":
        return cls(allowed=False, reason=DecisionReason.DEFAULT_DENY, matched_statements=tuple(matched))
