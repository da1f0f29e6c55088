"""Policy Decision Point (PDP) - Policy evaluation engine.

This module evaluates policy documents against an EvaluationContext to
produce decisions:

- context/: Describes the request
- prp/: Resolves which policy documents apply
- pdp/ (this module): Evaluates documents against the request
- pep/: Enforces decisions

The PDP is intentionally stateless and side-effect free.
All I/O (policy storage, audit logging) happens in the PRP and PEP.

Structure:
    decision.py       - Decision model (EXPLICIT_ALLOW/EXPLICIT_DENY/DEFAULT_DENY)
    policy.py         - PolicyDocument/Statement models and validation
    matcher.py        - Action/Resource wildcard matching
    variables.py      - "${path}" resolution for condition values
    conditions.py     - Condition operator registry
    engine.py         - evaluate / evaluate_all / assert_allowed

Policy file I/O is in utils/policy/policy_helpers.py.
"""

from scoped_acp.pdp.conditions import ConditionOperator, evaluate_conditions
from scoped_acp.pdp.decision import Decision, DecisionReason
from scoped_acp.pdp.engine import assert_allowed, evaluate, evaluate_all
from scoped_acp.pdp.matcher import match_action, match_resource, wildcard_match
from scoped_acp.pdp.policy import (
    PolicyDocument,
    Statement,
    assert_valid_policy_document,
    statement_id,
    validate_policy_document,
)
from scoped_acp.pdp.variables import get_path, resolve_value

__all__ = [
    # Decision
    "Decision",
    "DecisionReason",
    # Engine
    "assert_allowed",
    "evaluate",
    "evaluate_all",
    # Policy models
    "PolicyDocument",
    "Statement",
    "assert_valid_policy_document",
    "statement_id",
    "validate_policy_document",
    # Building blocks
    "ConditionOperator",
    "evaluate_conditions",
    "get_path",
    "match_action",
    "match_resource",
    "resolve_value",
    "wildcard_match",
]
