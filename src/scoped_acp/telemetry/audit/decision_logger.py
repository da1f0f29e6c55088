"""Decision logging for policy enforcement.

Writes one JSONL line per decision to <log_dir>/scoped-acp/audit/decisions.jsonl.
Decision logs are independent of log_level: when enabled, every decision
is recorded.
"""

from __future__ import annotations

__all__ = [
    "DecisionEventLogger",
    "create_decision_logger",
    "get_decisions_log_path",
]

import logging
from collections.abc import Sequence
from pathlib import Path

from scoped_acp.constants import APP_NAME, AUDIT_DIR_NAME, DECISIONS_LOG_FILE_NAME, LOGGER_PREFIX
from scoped_acp.context.scope import Scope
from scoped_acp.pdp.decision import Decision
from scoped_acp.telemetry.models.decision import DecisionEvent
from scoped_acp.utils.logging.logger_setup import setup_jsonl_logger
from scoped_acp.utils.logging.logging_helpers import sanitize_for_logging, serialize_audit_event


def get_decisions_log_path(log_dir: Path) -> Path:
    """Return <log_dir>/scoped-acp/audit/decisions.jsonl."""
    return log_dir / APP_NAME / AUDIT_DIR_NAME / DECISIONS_LOG_FILE_NAME


def create_decision_logger(log_path: Path) -> logging.Logger:
    """Create the JSONL logger backing the decision audit log.

    Args:
        log_path: Path to decisions.jsonl.

    Returns:
        Configured logger instance.
    """
    return setup_jsonl_logger(f"{LOGGER_PREFIX}.audit.decisions", log_path, log_level=logging.INFO)


class DecisionEventLogger:
    """Turns decisions into DecisionEvent records and writes them.

    Logging failures propagate. An enforcement point that cannot record
    its decision should fail rather than allow silently.
    """

    def __init__(self, logger: logging.Logger) -> None:
        """Initialize decision event logger.

        Args:
            logger: Logger for decision events (usually from create_decision_logger).
        """
        self._logger = logger

    @classmethod
    def for_log_dir(cls, log_dir: Path) -> "DecisionEventLogger":
        """Create a logger writing to the standard location under log_dir."""
        return cls(create_decision_logger(get_decisions_log_path(log_dir)))

    def log(
        self,
        decision: Decision,
        *,
        action: str,
        resource: str,
        principal_id: str,
        scope: Scope | None = None,
        role_ids: Sequence[str] | None = None,
        group_ids: Sequence[str] | None = None,
        policy_ids: Sequence[str] | None = None,
        policy_eval_ms: float | None = None,
    ) -> DecisionEvent:
        """Log a policy decision to decisions.jsonl.

        Args:
            decision: The decision.
            action: Requested action.
            resource: Requested resource name.
            principal_id: Requesting principal id.
            scope: Scope the request was evaluated in.
            role_ids: Role ids used during resolution.
            group_ids: Group ids used during resolution.
            policy_ids: Resolved policy ids.
            policy_eval_ms: Resolution + evaluation time.

        Returns:
            The event that was written.
        """
        event = DecisionEvent(
            decision="ALLOW" if decision.allowed else "DENY",
            reason=decision.reason.value,
            matched_statements=list(decision.matched_statements) or None,
            action=sanitize_for_logging(action),
            resource=sanitize_for_logging(resource),
            principal_id=sanitize_for_logging(principal_id),
            scope=str(scope) if scope is not None else None,
            role_ids=list(role_ids) if role_ids else None,
            group_ids=list(group_ids) if group_ids else None,
            policy_ids=list(policy_ids) if policy_ids is not None else None,
            policy_eval_ms=round(policy_eval_ms, 2) if policy_eval_ms is not None else None,
        )

        self._logger.info(serialize_audit_event(event))
        return event
