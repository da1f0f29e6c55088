"""Unit tests for the decision audit log (JSONL).

Tests the formatter, the logger factory, and DecisionEventLogger output.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from scoped_acp.context import Scope
from scoped_acp.pdp.decision import Decision
from scoped_acp.telemetry.audit.decision_logger import (
    DecisionEventLogger,
    get_decisions_log_path,
)
from scoped_acp.telemetry.models.decision import DecisionEvent
from scoped_acp.utils.logging.iso_formatter import ISO8601Formatter, format_timestamp
from scoped_acp.utils.logging.logger_setup import setup_jsonl_logger
from scoped_acp.utils.logging.logging_helpers import sanitize_for_logging, serialize_audit_event


def read_jsonl(path: Path) -> list[dict[str, Any]]:
    return [json.loads(line) for line in path.read_text().splitlines() if line]


class TestFormatter:
    """Tests for ISO8601Formatter."""

    def test_timestamp_format(self) -> None:
        assert format_timestamp(0) == "1970-01-01T00:00:00.000Z"

    def test_dict_message_is_written_as_is(self) -> None:
        record = logging.LogRecord("x", logging.INFO, __file__, 1, {"decision": "DENY"}, None, None)

        data = json.loads(ISO8601Formatter().format(record))

        assert list(data) == ["time", "decision"]
        assert data["decision"] == "DENY"

    def test_plain_message_gets_level_and_logger(self) -> None:
        record = logging.LogRecord("scoped-acp.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None)

        data = json.loads(ISO8601Formatter().format(record))

        assert data["level"] == "WARNING"
        assert data["logger"] == "scoped-acp.test"
        assert data["message"] == "hello world"


class TestLoggerSetup:
    """Tests for setup_jsonl_logger."""

    def test_creates_directory_and_writes(self, tmp_path: Path) -> None:
        log_file = tmp_path / "a" / "b" / "events.jsonl"

        logger = setup_jsonl_logger("scoped-acp.test.setup", log_file)
        logger.info({"event": "x"})

        assert read_jsonl(log_file)[0]["event"] == "x"
        assert logger.propagate is False

    def test_reconfiguring_replaces_handler(self, tmp_path: Path) -> None:
        first = tmp_path / "first.jsonl"
        second = tmp_path / "second.jsonl"

        setup_jsonl_logger("scoped-acp.test.reconfigure", first)
        logger = setup_jsonl_logger("scoped-acp.test.reconfigure", second)
        logger.info({"event": "y"})

        assert len(logger.handlers) == 1
        assert first.read_text() == ""
        assert read_jsonl(second)[0]["event"] == "y"


class TestHelpers:
    """Tests for logging helpers."""

    def test_sanitize_escapes_control_characters(self) -> None:
        assert sanitize_for_logging("invoice/1\nforged\tline\r") == "invoice/1\\nforged\\tline\\r"

    def test_sanitize_stringifies_non_strings(self) -> None:
        assert sanitize_for_logging(42) == "42"

    def test_serialize_drops_time_and_none(self) -> None:
        event = DecisionEvent(
            time="ignored", decision="ALLOW", reason="EXPLICIT_ALLOW", action="a", resource="r", principal_id="u1"
        )

        data = serialize_audit_event(event)

        assert "time" not in data
        assert "scope" not in data
        assert data["decision"] == "ALLOW"

    def test_event_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            DecisionEvent(
                decision="ALLOW", reason="EXPLICIT_ALLOW", action="a", resource="r", principal_id="u1", extra="x"
            )


class TestDecisionEventLogger:
    """Tests for DecisionEventLogger."""

    def test_log_path(self, tmp_path: Path) -> None:
        assert get_decisions_log_path(tmp_path) == tmp_path / "scoped-acp" / "audit" / "decisions.jsonl"

    def test_writes_one_line_per_decision(self, tmp_path: Path) -> None:
        """Given two decisions, two JSONL lines are written with all request facts."""
        # Arrange
        decision_logger = DecisionEventLogger.for_log_dir(tmp_path)

        # Act
        decision_logger.log(
            Decision.explicit_deny(["DenyLargeInvoices"]),
            action="erp:invoice:approve",
            resource="invoice/123",
            principal_id="u1",
            scope=Scope(type="TENANT", id="t1"),
            role_ids=["finance"],
            group_ids=[],
            policy_ids=["finance-policy"],
            policy_eval_ms=1.23456,
        )
        decision_logger.log(Decision.default_deny(), action="a", resource="r", principal_id="u2")

        # Assert
        lines = read_jsonl(get_decisions_log_path(tmp_path))
        assert len(lines) == 2

        first = lines[0]
        assert first["time"].endswith("Z")
        assert first["decision"] == "DENY"
        assert first["reason"] == "EXPLICIT_DENY"
        assert first["matched_statements"] == ["DenyLargeInvoices"]
        assert first["scope"] == "TENANT:t1"
        assert first["role_ids"] == ["finance"]
        assert "group_ids" not in first
        assert first["policy_ids"] == ["finance-policy"]
        assert first["policy_eval_ms"] == 1.23

        second = lines[1]
        assert second["reason"] == "DEFAULT_DENY"
        assert "matched_statements" not in second
        assert "scope" not in second

    def test_returns_event(self, tmp_path: Path) -> None:
        decision_logger = DecisionEventLogger.for_log_dir(tmp_path)

        event = decision_logger.log(Decision.explicit_allow(["A"]), action="a", resource="r", principal_id="u1")

        assert event.decision == "ALLOW"
        assert event.time is None

    def test_caller_strings_are_sanitized(self, tmp_path: Path) -> None:
        decision_logger = DecisionEventLogger.for_log_dir(tmp_path)

        decision_logger.log(Decision.default_deny(), action="a\nb", resource="r", principal_id="u1")

        lines = read_jsonl(get_decisions_log_path(tmp_path))
        assert len(lines) == 1
        assert lines[0]["action"] == "a\\nb"
