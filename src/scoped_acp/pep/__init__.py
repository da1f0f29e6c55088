"""Policy Enforcement Point (PEP) - turn decisions into allow/raise.

Following the XACML / NIST SP 800-162 split:

- PRP (Policy Retrieval Point): ../prp/ - resolves applicable policies
- PDP (Policy Decision Point): ../pdp/ - evaluates policies
- PEP (Policy Enforcement Point): This module - enforces decisions

Structure:
    enforcer.py - PolicyEnforcer (decide / can / enforce)

Note: ForbiddenError is defined in scoped_acp.exceptions
"""

from scoped_acp.exceptions import ForbiddenError
from scoped_acp.pep.enforcer import PolicyEnforcer

__all__ = [
    # Errors
    "ForbiddenError",
    # Enforcement
    "PolicyEnforcer",
]
