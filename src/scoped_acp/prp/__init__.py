"""Policy Retrieval Point (PRP) - which policies apply to a request.

Structure:
    models.py    - PolicyRecord, Attachment, PrincipalRef, PolicySource, PolicyBundle
    protocol.py  - PolicyProvider (read) / PolicyStore (write) protocols
    memory.py    - MemoryPolicyProvider reference implementation
"""

from scoped_acp.prp.memory import MemoryPolicyProvider
from scoped_acp.prp.models import (
    Attachment,
    PolicyBundle,
    PolicyRecord,
    PolicySource,
    PrincipalRef,
    PrincipalType,
)
from scoped_acp.prp.protocol import PolicyProvider, PolicyStore

__all__ = [
    # Models
    "Attachment",
    "PolicyBundle",
    "PolicyRecord",
    "PolicySource",
    "PrincipalRef",
    "PrincipalType",
    # Protocols
    "PolicyProvider",
    "PolicyStore",
    # Implementations
    "MemoryPolicyProvider",
]
