"""scoped-acp: scoped, IAM-style authorization decisions.

Quick use:

    from scoped_acp import evaluate

    decision = evaluate(
        "erp:invoice:create",
        "invoice/123",
        {"Statement": [{"Effect": "Allow", "Action": "erp:invoice:*", "Resource": "invoice/*"}]},
        {"principal": {"id": "u1"}},
    )
    assert decision.allowed
"""

__version__ = "0.1.0"

from scoped_acp.context import EvaluationContext, Scope, ScopeType
from scoped_acp.exceptions import (
    ForbiddenError,
    PolicyValidationError,
    UnknownConditionOperatorError,
)
from scoped_acp.pdp import (
    Decision,
    DecisionReason,
    PolicyDocument,
    assert_allowed,
    evaluate,
    evaluate_all,
    validate_policy_document,
)
from scoped_acp.pep import PolicyEnforcer
from scoped_acp.prp import MemoryPolicyProvider, PolicyProvider, PrincipalRef

__all__ = [
    "__version__",
    # Context
    "EvaluationContext",
    "Scope",
    "ScopeType",
    # Decision
    "Decision",
    "DecisionReason",
    "assert_allowed",
    "evaluate",
    "evaluate_all",
    # Policies
    "PolicyDocument",
    "validate_policy_document",
    # Resolution / enforcement
    "MemoryPolicyProvider",
    "PolicyEnforcer",
    "PolicyProvider",
    "PrincipalRef",
    # Errors
    "ForbiddenError",
    "PolicyValidationError",
    "UnknownConditionOperatorError",
]
