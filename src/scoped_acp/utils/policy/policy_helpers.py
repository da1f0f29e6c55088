"""Policy and bundle file helpers.

Policy files hold a single document in wire format:

    {"Version": "2025-01-01", "Statement": [{"Effect": "Allow", ...}]}

Bundle files hold policy records plus attachments (see PolicyBundle) and
are used to seed a MemoryPolicyProvider.
"""

from __future__ import annotations

__all__ = [
    "compute_policy_checksum",
    "load_policy_bundle",
    "load_policy_document",
    "save_policy_document",
]

import hashlib
import json
from pathlib import Path

from scoped_acp.pdp.policy import PolicyDocument
from scoped_acp.prp.models import PolicyBundle
from scoped_acp.utils.file_helpers import (
    atomic_write_json,
    load_validated_json,
    read_json_file,
    require_file_exists,
)


def compute_policy_checksum(document: PolicyDocument) -> str:
    """Compute a content checksum of a policy document.

    Hashes the canonical wire form (sorted keys, no whitespace), so
    formatting changes in the file do not change the checksum.

    Args:
        document: Policy document.

    Returns:
        Checksum in format "sha256:<hex_digest>".
    """
    canonical = json.dumps(document.to_wire(), sort_keys=True, separators=(",", ":"))
    return f"sha256:{hashlib.sha256(canonical.encode('utf-8')).hexdigest()}"


def load_policy_document(path: Path) -> PolicyDocument:
    """Load and validate a policy document from a JSON file.

    Args:
        path: Path to the policy file.

    Returns:
        Validated PolicyDocument.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON.
        PolicyValidationError: If the document is structurally malformed.
    """
    require_file_exists(path, file_type="policy")
    data = read_json_file(path, file_type="policy")
    return PolicyDocument.from_wire(data)


def save_policy_document(document: PolicyDocument, path: Path) -> None:
    """Save a policy document in wire format, atomically.

    Creates parent directories if they don't exist and sets owner-only
    permissions (0o700 on directory, 0o600 on file).

    Args:
        document: Document to save.
        path: Destination path.
    """
    atomic_write_json(document.to_wire(), path, prefix=".policy_")


def load_policy_bundle(path: Path) -> PolicyBundle:
    """Load and validate a policy bundle from a JSON file.

    Args:
        path: Path to the bundle file.

    Returns:
        Validated PolicyBundle.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or fails validation.
    """
    require_file_exists(path, file_type="bundle")
    return load_validated_json(
        path,
        PolicyBundle,
        file_type="bundle",
        recovery_hint="Edit the bundle file to fix the errors.",
    )
