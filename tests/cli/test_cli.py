"""Unit tests for CLI commands.

Tests CLI behavior using Click's CliRunner for isolated, fast testing.
Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from scoped_acp import __version__
from scoped_acp.cli import cli
from scoped_acp.telemetry.audit.decision_logger import get_decisions_log_path


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def invoice_policy() -> dict[str, Any]:
    return {
        "Version": "2025-01-01",
        "Statement": [
            {
                "Sid": "AllowSameTenantInvoices",
                "Effect": "Allow",
                "Action": "erp:invoice:*",
                "Resource": "invoice/*",
                "Condition": {"StringEquals": {"resource.tenantId": "${principal.tenantId}"}},
            },
            {
                "Sid": "DenyDelete",
                "Effect": "Deny",
                "Action": "erp:invoice:delete",
                "Resource": "*",
            },
        ],
    }


@pytest.fixture
def policy_file(tmp_path: Path, invoice_policy: dict[str, Any]) -> Path:
    path = tmp_path / "policy.json"
    path.write_text(json.dumps(invoice_policy))
    return path


@pytest.fixture
def context_file(tmp_path: Path) -> Path:
    path = tmp_path / "context.json"
    path.write_text(
        json.dumps(
            {
                "principal": {"id": "u1", "tenantId": "t1", "roles": ["finance"]},
                "resource": {"tenantId": "t1"},
            }
        )
    )
    return path


@pytest.fixture
def bundle_file(tmp_path: Path, invoice_policy: dict[str, Any]) -> Path:
    path = tmp_path / "bundle.json"
    path.write_text(
        json.dumps(
            {
                "policies": [{"id": "finance", "scope": {"type": "TENANT", "id": "t1"}, "document": invoice_policy}],
                "attachments": [
                    {
                        "policy_id": "finance",
                        "scope": {"type": "TENANT", "id": "t1"},
                        "principal": {"type": "ROLE", "id": "finance"},
                    }
                ],
            }
        )
    )
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """A config that keeps decision logs inside tmp_path."""
    path = tmp_path / "config" / "config.json"
    path.parent.mkdir()
    path.write_text(json.dumps({"logging": {"log_dir": str(tmp_path / "logs")}}))
    return path


# ============================================================================
# Root group
# ============================================================================


class TestRoot:
    """Tests for the root command group."""

    def test_version_flag(self, runner: CliRunner) -> None:
        """Given --version flag, returns version string."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert f"scoped-acp {__version__}" in result.output

    def test_short_version_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["-v"])

        assert result.exit_code == 0
        assert "scoped-acp" in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("check", "config", "evaluate", "policy"):
            assert command in result.output
        assert "Exit codes" in result.output

    def test_no_command_shows_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "Quick Start" in result.output


# ============================================================================
# policy
# ============================================================================


class TestPolicyValidate:
    """Tests for `policy validate`."""

    def test_valid_policy(self, runner: CliRunner, policy_file: Path) -> None:
        result = runner.invoke(cli, ["policy", "validate", str(policy_file)])

        assert result.exit_code == 0
        assert "Policy valid" in result.output
        assert "2 statements defined" in result.output

    def test_invalid_policy_lists_errors(self, runner: CliRunner, tmp_path: Path) -> None:
        """Given an invalid policy, exits 1 and lists every problem."""
        # Arrange
        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps(
                {
                    "Statement": [
                        {"Effect": "allow", "Action": "a", "Resource": "r"},
                        {"Effect": "Deny", "Action": [], "Resource": "r", "Condition": {"Nope": {"x": 1}}},
                    ]
                }
            )
        )

        # Act
        result = runner.invoke(cli, ["policy", "validate", str(path)])

        # Assert
        assert result.exit_code == 1
        assert "Statement.0.Effect" in result.output
        assert "Statement.1.Action: must not be an empty list" in result.output
        assert "unknown condition operator(s): Nope" in result.output

    def test_invalid_json(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        result = runner.invoke(cli, ["policy", "validate", str(path)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["policy", "validate", str(tmp_path / "missing.json")])

        assert result.exit_code != 0


class TestPolicyShow:
    """Tests for `policy show`."""

    def test_text_output(self, runner: CliRunner, policy_file: Path) -> None:
        result = runner.invoke(cli, ["policy", "show", str(policy_file)])

        assert result.exit_code == 0
        assert "[AllowSameTenantInvoices] ALLOW" in result.output
        assert "[DenyDelete] DENY" in result.output
        assert "Condition: StringEquals" in result.output
        assert "Checksum: sha256:" in result.output

    def test_json_output(self, runner: CliRunner, policy_file: Path, invoice_policy: dict[str, Any]) -> None:
        result = runner.invoke(cli, ["policy", "show", str(policy_file), "--json"])

        assert result.exit_code == 0
        output = json.loads(result.output)
        metadata = output.pop("_metadata")
        assert output == invoice_policy
        assert metadata["statement_ids"] == ["AllowSameTenantInvoices", "DenyDelete"]
        assert metadata["checksum"].startswith("sha256:")
        assert metadata["file_checksum"].startswith("sha256:")

    def test_invalid_policy(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"Statement": "nope"}))

        result = runner.invoke(cli, ["policy", "show", str(path)])

        assert result.exit_code == 1


# ============================================================================
# evaluate
# ============================================================================


class TestEvaluate:
    """Tests for `evaluate` exit codes and output."""

    def test_allowed_exits_0(self, runner: CliRunner, policy_file: Path, context_file: Path) -> None:
        result = runner.invoke(
            cli,
            ["evaluate", "-p", str(policy_file), "-a", "erp:invoice:create", "-r", "invoice/1", "-c", str(context_file)],
        )

        assert result.exit_code == 0
        assert "ALLOW (EXPLICIT_ALLOW)" in result.output
        assert "AllowSameTenantInvoices" in result.output

    def test_explicit_deny_exits_2(self, runner: CliRunner, policy_file: Path, context_file: Path) -> None:
        result = runner.invoke(
            cli,
            ["evaluate", "-p", str(policy_file), "-a", "erp:invoice:delete", "-r", "invoice/1", "-c", str(context_file)],
        )

        assert result.exit_code == 2
        assert "DENY (EXPLICIT_DENY)" in result.output

    def test_default_deny_without_context(self, runner: CliRunner, policy_file: Path) -> None:
        """Given only --principal, the tenant condition cannot hold."""
        result = runner.invoke(
            cli,
            ["evaluate", "-p", str(policy_file), "-a", "erp:invoice:create", "-r", "invoice/1", "--principal", "u1"],
        )

        assert result.exit_code == 2
        assert "DEFAULT_DENY" in result.output

    def test_json_output(self, runner: CliRunner, policy_file: Path, context_file: Path) -> None:
        result = runner.invoke(
            cli,
            [
                "evaluate",
                "-p",
                str(policy_file),
                "-a",
                "erp:invoice:read",
                "-r",
                "invoice/1",
                "-c",
                str(context_file),
                "--json",
            ],
        )

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "allowed": True,
            "reason": "EXPLICIT_ALLOW",
            "matched_statements": ["AllowSameTenantInvoices"],
        }

    def test_several_policies_deny_overrides(
        self, runner: CliRunner, tmp_path: Path, policy_file: Path, context_file: Path
    ) -> None:
        deny_path = tmp_path / "deny.json"
        deny_path.write_text(json.dumps({"Statement": [{"Sid": "Freeze", "Effect": "Deny", "Action": "*", "Resource": "*"}]}))

        result = runner.invoke(
            cli,
            [
                "evaluate",
                "-p",
                str(policy_file),
                "-p",
                str(deny_path),
                "-a",
                "erp:invoice:read",
                "-r",
                "invoice/1",
                "-c",
                str(context_file),
                "--json",
            ],
        )

        assert result.exit_code == 2
        assert json.loads(result.output)["matched_statements"] == ["AllowSameTenantInvoices", "Freeze"]

    def test_missing_principal_exits_1(self, runner: CliRunner, policy_file: Path) -> None:
        result = runner.invoke(cli, ["evaluate", "-p", str(policy_file), "-a", "a", "-r", "r"])

        assert result.exit_code == 1
        assert "--principal" in result.output

    def test_invalid_policy_exits_1(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"Statement": [{"Effect": "Permit", "Action": "*", "Resource": "*"}]}))

        result = runner.invoke(cli, ["evaluate", "-p", str(path), "-a", "a", "-r", "r", "--principal", "u1"])

        assert result.exit_code == 1
        assert "Invalid policy document" in result.output


# ============================================================================
# check
# ============================================================================


class TestCheck:
    """Tests for `check` (bundle resolution + evaluation)."""

    def test_allowed_through_role(
        self, runner: CliRunner, config_file: Path, bundle_file: Path, context_file: Path, tmp_path: Path
    ) -> None:
        """Given the finance role in t1, the bundle policy allows and the decision is logged."""
        # Act
        result = runner.invoke(
            cli,
            [
                "--config",
                str(config_file),
                "check",
                "-b",
                str(bundle_file),
                "--scope-type",
                "TENANT",
                "--scope-id",
                "t1",
                "--principal",
                "u1",
                "-a",
                "erp:invoice:create",
                "-r",
                "invoice/1",
                "-c",
                str(context_file),
                "--json",
            ],
        )

        # Assert
        assert result.exit_code == 0
        output = json.loads(result.output)
        assert output["allowed"] is True
        assert output["scope"] == "TENANT:t1"
        assert output["policies"] == ["finance"]

        log_lines = get_decisions_log_path(tmp_path / "logs").read_text().splitlines()
        assert json.loads(log_lines[-1])["decision"] == "ALLOW"

    def test_other_scope_denies(
        self, runner: CliRunner, config_file: Path, bundle_file: Path, context_file: Path
    ) -> None:
        result = runner.invoke(
            cli,
            [
                "--config",
                str(config_file),
                "check",
                "-b",
                str(bundle_file),
                "--scope-type",
                "TENANT",
                "--scope-id",
                "t2",
                "--principal",
                "u1",
                "-a",
                "erp:invoice:create",
                "-r",
                "invoice/1",
                "-c",
                str(context_file),
            ],
        )

        assert result.exit_code == 2
        assert "DEFAULT_DENY" in result.output
        assert "(none)" in result.output

    def test_conditions_read_the_checked_scope(
        self, runner: CliRunner, config_file: Path, context_file: Path, tmp_path: Path
    ) -> None:
        """Given a condition on ${scope.id}, it compares against --scope-id."""
        bundle_path = tmp_path / "scope-bundle.json"
        bundle_path.write_text(
            json.dumps(
                {
                    "policies": [
                        {
                            "id": "own-tenant",
                            "scope": {"type": "TENANT", "id": "t1"},
                            "document": {
                                "Statement": [
                                    {
                                        "Sid": "SameTenantAsScope",
                                        "Effect": "Allow",
                                        "Action": "*",
                                        "Resource": "*",
                                        "Condition": {"StringEquals": {"resource.tenantId": "${scope.id}"}},
                                    }
                                ]
                            },
                        }
                    ],
                    "attachments": [
                        {
                            "policy_id": "own-tenant",
                            "scope": {"type": "TENANT", "id": "t1"},
                            "principal": {"type": "USER", "id": "u1"},
                        }
                    ],
                }
            )
        )

        result = runner.invoke(
            cli,
            [
                "--config",
                str(config_file),
                "check",
                "-b",
                str(bundle_path),
                "--scope-type",
                "TENANT",
                "--scope-id",
                "t1",
                "--principal",
                "u1",
                "-a",
                "doc:read",
                "-r",
                "doc/1",
                "-c",
                str(context_file),
                "--json",
            ],
        )

        assert result.exit_code == 0
        assert json.loads(result.output)["matched_statements"] == ["SameTenantAsScope"]

    def test_role_option_overrides_context_roles(
        self, runner: CliRunner, config_file: Path, bundle_file: Path, context_file: Path
    ) -> None:
        result = runner.invoke(
            cli,
            [
                "--config",
                str(config_file),
                "check",
                "-b",
                str(bundle_file),
                "--scope-type",
                "TENANT",
                "--scope-id",
                "t1",
                "--principal",
                "u1",
                "--role",
                "auditor",
                "-a",
                "erp:invoice:create",
                "-r",
                "invoice/1",
                "-c",
                str(context_file),
            ],
        )

        assert result.exit_code == 2

    def test_bundle_from_config(
        self, runner: CliRunner, tmp_path: Path, bundle_file: Path, context_file: Path
    ) -> None:
        """Given bundle_path in the config (via SCOPED_ACP_CONFIG), --bundle may be omitted."""
        config_path = tmp_path / "config.json"
        config_path.write_text(
            json.dumps({"logging": {"log_dir": str(tmp_path / "logs")}, "bundle_path": str(bundle_file)})
        )

        result = runner.invoke(
            cli,
            [
                "check",
                "--scope-type",
                "TENANT",
                "--scope-id",
                "t1",
                "--principal",
                "u1",
                "-a",
                "erp:invoice:read",
                "-r",
                "invoice/1",
                "-c",
                str(context_file),
            ],
            env={"SCOPED_ACP_CONFIG": str(config_path)},
        )

        assert result.exit_code == 0
        assert "ALLOW" in result.output

    def test_no_bundle_exits_1(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(
            cli,
            ["--config", str(config_file), "check", "--scope-type", "TENANT", "--principal", "u1", "-a", "a", "-r", "r"],
        )

        assert result.exit_code == 1
        assert "No bundle given" in result.output

    def test_invalid_bundle_exits_1(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        bundle_path = tmp_path / "bad-bundle.json"
        bundle_path.write_text(
            json.dumps(
                {
                    "policies": [],
                    "attachments": [
                        {"policy_id": "ghost", "scope": {"type": "TENANT", "id": "t1"}, "principal": {"type": "USER", "id": "u1"}}
                    ],
                }
            )
        )

        result = runner.invoke(
            cli,
            [
                "--config",
                str(config_file),
                "check",
                "-b",
                str(bundle_path),
                "--scope-type",
                "TENANT",
                "--principal",
                "u1",
                "-a",
                "a",
                "-r",
                "r",
            ],
        )

        assert result.exit_code == 1
        assert "ghost" in result.output


# ============================================================================
# config
# ============================================================================


class TestConfigCommands:
    """Tests for `config path|show|init`."""

    def test_path(self, runner: CliRunner, tmp_path: Path) -> None:
        config_path = tmp_path / "config.json"

        result = runner.invoke(cli, ["--config", str(config_path), "config", "path"])

        assert result.exit_code == 0
        assert str(config_path) in result.output
        assert "does not exist" in result.output

    def test_init_then_show(self, runner: CliRunner, tmp_path: Path) -> None:
        """Given config init, config show reflects the written values."""
        # Arrange
        config_path = tmp_path / "cfg" / "config.json"
        log_dir = tmp_path / "logs"

        # Act
        init = runner.invoke(
            cli,
            ["--config", str(config_path), "config", "init", "--log-dir", str(log_dir), "--log-level", "DEBUG", "--no-decision-log"],
        )
        show = runner.invoke(cli, ["--config", str(config_path), "config", "show", "--json"])

        # Assert
        assert init.exit_code == 0
        assert "Config written" in init.output
        assert show.exit_code == 0
        data = json.loads(show.output)
        assert data["logging"] == {"log_dir": str(log_dir), "log_level": "DEBUG", "decision_log": False}
        assert data["_computed"]["config_file_exists"] is True

    def test_init_refuses_to_overwrite(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli, ["--config", str(config_file), "config", "init"])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_init_force(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        result = runner.invoke(
            cli, ["--config", str(config_file), "config", "init", "--force", "--bundle", str(tmp_path / "b.json")]
        )

        assert result.exit_code == 0
        assert json.loads(config_file.read_text())["bundle_path"] == str(tmp_path / "b.json")

    def test_show_defaults_without_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--config", str(tmp_path / "missing.json"), "config", "show"])

        assert result.exit_code == 0
        assert "showing defaults" in result.output
        assert "validate_policies: True" in result.output

    def test_show_invalid_config(self, runner: CliRunner, tmp_path: Path) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"logging": {"log_level": "TRACE"}}))

        result = runner.invoke(cli, ["--config", str(config_path), "config", "show"])

        assert result.exit_code == 1
        assert "log_level" in result.output
