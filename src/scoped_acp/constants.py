"""Application-wide constants for scoped-acp.

Constants that define engine and tooling behavior.
For user-configurable settings per deployment, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    "LOGGER_PREFIX",
    # Policy documents
    "POLICY_VERSION",
    "STATEMENT_ID_PREFIX",
    # File layout
    "CONFIG_FILE_NAME",
    "AUDIT_DIR_NAME",
    "DECISIONS_LOG_FILE_NAME",
    # CLI exit codes
    "EXIT_ALLOWED",
    "EXIT_ERROR",
    "EXIT_DENIED",
]

# =============================================================================
# Application identity
# =============================================================================

APP_NAME = "scoped-acp"

# Prefix for named loggers (e.g., "scoped-acp.audit.decisions")
LOGGER_PREFIX = APP_NAME

# =============================================================================
# Policy documents
# =============================================================================

# Version string written into documents created by the tooling.
# Mirrors the IAM-style "Version" field; evaluation never depends on it.
POLICY_VERSION = "2025-01-01"

# Positional statement ids for statements without a Sid: "stmt#0", "stmt#1", ...
STATEMENT_ID_PREFIX = "stmt#"

# =============================================================================
# File layout
# =============================================================================

CONFIG_FILE_NAME = "config.json"

# Decision audit trail: <log_dir>/scoped-acp/audit/decisions.jsonl
AUDIT_DIR_NAME = "audit"
DECISIONS_LOG_FILE_NAME = "decisions.jsonl"

# =============================================================================
# CLI exit codes
# =============================================================================

EXIT_ALLOWED = 0
EXIT_ERROR = 1
EXIT_DENIED = 2
