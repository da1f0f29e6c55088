"""Context models for ABAC policy evaluation.

Following the XACML / NIST SP 800-162 split:

- context/ (this module): Describes the request (who, on what, where)
- pdp/: Policy Decision Point - evaluates policies against the context
- prp/: Policy Retrieval Point - resolves which policies apply
- pep/: Policy Enforcement Point - turns decisions into allow/raise

Structure:
    scope.py      - Scope model (isolation boundary)
    context.py    - EvaluationContext + Principal/Resource/Request sections
"""

from scoped_acp.context.context import (
    EvaluationContext,
    Principal,
    RequestInfo,
    ResourceAttributes,
)
from scoped_acp.context.scope import Scope, ScopeKey, ScopeType, same_scope

__all__ = [
    # Scope (WHERE)
    "Scope",
    "ScopeKey",
    "ScopeType",
    "same_scope",
    # Context
    "EvaluationContext",
    "Principal",
    "RequestInfo",
    "ResourceAttributes",
]
