"""Custom exceptions for scoped-acp.

This module contains all custom exceptions used throughout the package.
Exceptions are organized into three categories:

Definition Errors (fatal to a single evaluation call, caller denies):
    - PolicyValidationError: Policy document is structurally malformed
    - UnknownConditionOperatorError: Condition uses an unregistered operator

Authorization Outcome (raised only by imperative call sites):
    - ForbiddenError: A decision was not ALLOW

Setup Errors:
    - ConfigurationError: Config file is missing or invalid

DENY and DEFAULT_DENY are ordinary Decision values. They only become
exceptions when a caller asks for it via assert_allowed() or
PolicyEnforcer.enforce().

Usage:
    from scoped_acp.exceptions import ForbiddenError, PolicyValidationError
"""

from __future__ import annotations

__all__ = [
    "ConfigurationError",
    "DEFAULT_FORBIDDEN_MESSAGE",
    "ForbiddenError",
    "PolicyDefinitionError",
    "PolicyValidationError",
    "UnknownConditionOperatorError",
]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from scoped_acp.pdp.decision import Decision


DEFAULT_FORBIDDEN_MESSAGE = "Forbidden by policy"


# =============================================================================
# Definition Errors (policy author made a mistake - fail closed)
# =============================================================================


class PolicyDefinitionError(Exception):
    """Base exception for policies that cannot be evaluated as written.

    These errors abort the evaluation call they occur in. They are never
    converted into a non-matching statement, because silently skipping a
    broken Deny statement could turn into an unintended Allow.
    """


class PolicyValidationError(PolicyDefinitionError):
    """Raised when a policy document fails the structural schema check.

    Attributes:
        errors: List of structural problems, one "<location>: <message>"
            string per problem (e.g., "Statement.0.Effect: must be 'Allow' or 'Deny'").
    """

    def __init__(self, message: str, errors: list[str]) -> None:
        """Initialize PolicyValidationError.

        Args:
            message: Short summary (e.g., "Invalid policy document").
            errors: Structural problems found in the document.
        """
        super().__init__(message)
        self.message = message
        self.errors = list(errors)

    def __str__(self) -> str:
        """Return the summary followed by one problem per line."""
        if not self.errors:
            return self.message
        return self.message + ":\n" + "\n".join(f"  - {e}" for e in self.errors)


class UnknownConditionOperatorError(PolicyDefinitionError):
    """Raised when a condition block references an unregistered operator.

    Validation rejects unknown operators up front. This error covers
    documents that skipped validation (pre-trusted) but were wrong anyway.

    Attributes:
        operator: The offending operator name as written in the policy.
        statement_id: Statement that contained it, when known.
    """

    def __init__(self, operator: str, statement_id: str | None = None) -> None:
        self.operator = operator
        self.statement_id = statement_id
        where = f" in statement '{statement_id}'" if statement_id else ""
        super().__init__(
            f"Unknown condition operator '{operator}'{where}. "
            "Check the policy definition against the supported operators."
        )


# =============================================================================
# Authorization Outcome
# =============================================================================


class ForbiddenError(Exception):
    """Raised when a decision does not allow the requested action.

    Carries the full Decision so HTTP/RPC adapters can map it to their own
    error responses (e.g., HTTP 403 with the reason in the body).

    Attributes:
        message: Human-readable denial message, including the reason.
        decision: The Decision that caused the denial.
    """

    def __init__(self, message: str, decision: "Decision") -> None:
        super().__init__(message)
        self.message = message
        self.decision = decision

    @property
    def error_data(self) -> dict[str, Any]:
        """Structured data for adapter error responses."""
        data: dict[str, Any] = {"reason": self.decision.reason.value}
        if self.decision.matched_statements:
            data["matched_statements"] = list(self.decision.matched_statements)
        return data

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"ForbiddenError({self.message!r}, reason={self.decision.reason.value!r}, "
            f"matched_statements={list(self.decision.matched_statements)!r})"
        )

    def __str__(self) -> str:
        """Return human-readable string representation."""
        return self.message


# =============================================================================
# Setup Errors
# =============================================================================


class ConfigurationError(Exception):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config file exists but contains invalid JSON
    - Config file fails Pydantic validation
    - A configured policy bundle cannot be loaded
    """
