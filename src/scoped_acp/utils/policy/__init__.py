"""Policy utilities for scoped-acp.

Provides helper functions for policy and bundle file management.
"""

from scoped_acp.utils.policy.policy_helpers import (
    compute_policy_checksum,
    load_policy_bundle,
    load_policy_document,
    save_policy_document,
)

__all__ = [
    "compute_policy_checksum",
    "load_policy_bundle",
    "load_policy_document",
    "save_policy_document",
]
