"""Statement evaluator and multi-policy combinator.

Evaluation flow for one document (evaluate):
1. Skip a statement unless both its Action and Resource patterns match
2. Skip it unless its Condition block holds (expected values resolved first)
3. Bucket surviving statements by effect, recording their ids
4. Any Deny -> EXPLICIT_DENY (deny ids only); else any Allow -> EXPLICIT_ALLOW
   (allow ids); else DEFAULT_DENY with no ids

Evaluation flow for several documents (evaluate_all):
1. None entries are skipped, so "maybe missing" lookups can be passed directly
2. Matched ids accumulate across documents, in order
3. The first document that denies ends evaluation (short-circuit)
4. No deny anywhere + at least one allow -> allow; otherwise default deny

Design principles:
1. Deny in any statement of any document wins over allow, regardless of order
2. Default to DENY if nothing matches (zero trust)
3. Pure functions: no I/O, no caching, no shared state. Safe for concurrent use.
"""

from __future__ import annotations

__all__ = [
    "PolicyInput",
    "assert_allowed",
    "evaluate",
    "evaluate_all",
]

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from scoped_acp.context import EvaluationContext
from scoped_acp.exceptions import DEFAULT_FORBIDDEN_MESSAGE, ForbiddenError
from scoped_acp.pdp.conditions import evaluate_conditions
from scoped_acp.pdp.decision import Decision, DecisionReason
from scoped_acp.pdp.matcher import match_action, match_resource
from scoped_acp.pdp.policy import PolicyDocument, statement_id

logger = logging.getLogger(__name__)

# A typed document, or its wire-format mapping (e.g. parsed JSON)
PolicyInput = PolicyDocument | Mapping[str, Any]

ContextInput = EvaluationContext | Mapping[str, Any]


def _coerce_document(policy: PolicyInput, validate: bool) -> PolicyDocument:
    """Return a PolicyDocument, validating wire mappings unless told not to.

    Raises:
        PolicyValidationError: If validate is True and the mapping is malformed.
    """
    if isinstance(policy, PolicyDocument):
        return policy
    if validate:
        return PolicyDocument.from_wire(policy)
    return PolicyDocument.from_trusted(policy)


def _evaluate_document(
    action: str,
    resource: str,
    document: PolicyDocument,
    lookup: Mapping[str, Any],
) -> Decision:
    """Single-pass deny bucket / allow bucket evaluation of one document."""
    deny_ids: list[str] = []
    allow_ids: list[str] = []

    for index, stmt in enumerate(document.statements):
        if not match_action(action, stmt.actions):
            continue
        if not match_resource(resource, stmt.resources):
            continue

        sid = statement_id(stmt, index)
        if not evaluate_conditions(stmt.condition, lookup, statement_id=sid):
            continue

        if stmt.effect == "Deny":
            deny_ids.append(sid)
        elif stmt.effect == "Allow":
            allow_ids.append(sid)

    if deny_ids:
        return Decision.explicit_deny(deny_ids)
    if allow_ids:
        return Decision.explicit_allow(allow_ids)
    return Decision.default_deny()


def evaluate(
    action: str,
    resource: str,
    policy: PolicyInput | None,
    ctx: ContextInput,
    *,
    validate: bool = True,
) -> Decision:
    """Evaluate one policy document against one request.

    Args:
        action: Requested action (e.g., "erp:invoice:create").
        resource: Requested resource name (e.g., "invoice/123").
        policy: Policy document, or None (yields DEFAULT_DENY).
        ctx: EvaluationContext, or a mapping accepted by EvaluationContext.
        validate: Validate wire-format mappings before evaluating. Pass False
            for documents that were already validated.

    Returns:
        Decision with the ids of the statements that determined the outcome.

    Raises:
        PolicyValidationError: If validate is True and the document is malformed.
        UnknownConditionOperatorError: If a reached condition names an
            unregistered operator.
        pydantic.ValidationError: If ctx is a mapping that is not a valid context.
    """
    if policy is None:
        return Decision.default_deny()

    document = _coerce_document(policy, validate)
    context = EvaluationContext.coerce(ctx)
    return _evaluate_document(action, resource, document, context.lookup_view())


def evaluate_all(
    action: str,
    resource: str,
    policies: Iterable[PolicyInput | None],
    ctx: ContextInput,
    *,
    validate: bool = True,
) -> Decision:
    """Evaluate several policy documents and combine them (deny overrides allow).

    Documents are evaluated in order. The first explicit deny ends evaluation,
    carrying every id matched up to and including the denying document.

    Args:
        action: Requested action.
        resource: Requested resource name.
        policies: Documents in evaluation order; None entries are skipped.
        ctx: EvaluationContext, or a mapping accepted by EvaluationContext.
        validate: Validate wire-format mappings before evaluating.

    Returns:
        Combined Decision.

    Raises:
        PolicyValidationError: If validate is True and a document is malformed.
        UnknownConditionOperatorError: If a reached condition names an
            unregistered operator. Aborts the whole call.
    """
    context = EvaluationContext.coerce(ctx)
    lookup = context.lookup_view()

    matched: list[str] = []
    any_allow = False

    for policy in policies:
        if policy is None:
            continue

        document = _coerce_document(policy, validate)
        decision = _evaluate_document(action, resource, document, lookup)
        matched.extend(decision.matched_statements)

        if decision.reason == DecisionReason.EXPLICIT_DENY:
            logger.debug(
                "Explicit deny for action=%s resource=%s by %s", action, resource, decision.matched_statements
            )
            return Decision.explicit_deny(matched)
        if decision.reason == DecisionReason.EXPLICIT_ALLOW:
            any_allow = True

    if any_allow:
        return Decision.explicit_allow(matched)
    return Decision.default_deny(matched)


def assert_allowed(decision: Decision, message: str | None = None) -> Decision:
    """Raise ForbiddenError unless the decision allows the request.

    Args:
        decision: Decision to check.
        message: Denial message; defaults to "Forbidden by policy". The reason
            is appended, e.g. "Forbidden by policy (EXPLICIT_DENY)".

    Returns:
        The same decision, when allowed.

    Raises:
        ForbiddenError: If decision.allowed is False.
    """
    if not decision.allowed:
        text = message or DEFAULT_FORBIDDEN_MESSAGE
        raise ForbiddenError(f"{text} ({decision.reason.value})", decision)
    return decision
