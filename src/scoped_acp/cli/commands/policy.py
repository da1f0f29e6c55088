"""Policy command group for scoped-acp CLI.

Provides policy file inspection subcommands.
"""

from __future__ import annotations

__all__ = ["policy"]

import json
import sys
from pathlib import Path

import click

from scoped_acp.constants import EXIT_ERROR
from scoped_acp.exceptions import PolicyValidationError
from scoped_acp.pdp.policy import PolicyDocument, statement_id, validate_policy_document
from scoped_acp.utils.file_helpers import compute_file_checksum, read_json_file
from scoped_acp.utils.policy import compute_policy_checksum

from ..styling import style_dim, style_effect, style_error, style_label, style_success


def _patterns(value: str | list[str]) -> str:
    return value if isinstance(value, str) else ", ".join(value)


@click.group()
def policy() -> None:
    """Policy document commands."""
    pass


@policy.command("validate")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def policy_validate(path: Path) -> None:
    """Validate a policy document file.

    Checks the file for:
    - Valid JSON syntax
    - A Statement list with Effect "Allow" or "Deny"
    - Non-empty Action and Resource patterns
    - Known condition operators

    Exit codes:
        0: Policy is valid
        1: Policy is invalid or unreadable
    """
    try:
        data = read_json_file(path, file_type="policy")
    except ValueError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(EXIT_ERROR)

    errors = validate_policy_document(data)
    if errors:
        click.echo(style_error(f"Invalid policy document: {path}"), err=True)
        for error in errors:
            click.echo(f"  - {error}", err=True)
        sys.exit(EXIT_ERROR)

    document = PolicyDocument.from_wire(data)
    count = len(document.statements)
    click.echo(style_success(f"Policy valid: {path}"))
    click.echo(f"  {count} statement{'s' if count != 1 else ''} defined")


@policy.command("show")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def policy_show(path: Path, as_json: bool) -> None:
    """Display a policy document.

    Shows each statement's id, effect, actions, resources and condition
    operators.
    """
    try:
        document = PolicyDocument.from_wire(read_json_file(path, file_type="policy"))
    except (ValueError, PolicyValidationError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(EXIT_ERROR)

    checksum = compute_policy_checksum(document)

    if as_json:
        output = document.to_wire()
        output["_metadata"] = {
            "file": str(path),
            "checksum": checksum,
            "file_checksum": compute_file_checksum(path),
            "statement_ids": list(document.statement_ids()),
        }
        click.echo(json.dumps(output, indent=2))
        return

    click.echo("\n" + style_label("Policy") + f" {path}")
    click.echo(f"Version: {document.version or '(none)'}")
    click.echo(f"Checksum: {checksum}")
    click.echo(f"Statements: {len(document.statements)}")
    click.echo()

    if not document.statements:
        click.echo(style_dim("  (no statements defined)"))
        return

    for index, stmt in enumerate(document.statements):
        click.echo(f"  [{statement_id(stmt, index)}] {style_effect(stmt.effect)}")
        click.echo(f"    Action:   {_patterns(stmt.actions)}")
        click.echo(f"    Resource: {_patterns(stmt.resources)}")
        if stmt.condition:
            click.echo(f"    Condition: {', '.join(stmt.condition)}")
