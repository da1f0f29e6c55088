"""Evaluate command for scoped-acp CLI.

Evaluates one or more policy files against a single request, without any
policy store. Useful for testing policies in CI before deploying them.
"""

from __future__ import annotations

__all__ = ["evaluate"]

import sys
from pathlib import Path

import click

from scoped_acp.constants import EXIT_ERROR
from scoped_acp.exceptions import PolicyDefinitionError
from scoped_acp.pdp.engine import evaluate_all
from scoped_acp.utils.policy import load_policy_document

from ..decision_output import echo_decision, exit_code_for, load_context
from ..styling import style_error

_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


@click.command("evaluate")
@click.option("--policy", "-p", "policy_paths", type=_FILE, multiple=True, required=True, help="Policy file (repeatable, evaluated in order)")
@click.option("--action", "-a", required=True, help="Requested action (e.g., erp:invoice:create)")
@click.option("--resource", "-r", required=True, help="Requested resource (e.g., invoice/123)")
@click.option("--context", "-c", "context_path", type=_FILE, help="JSON file with the evaluation context")
@click.option("--principal", help="Principal id (overrides principal.id from --context)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def evaluate(
    policy_paths: tuple[Path, ...],
    action: str,
    resource: str,
    context_path: Path | None,
    principal: str | None,
    as_json: bool,
) -> None:
    """Evaluate policy files against a request.

    Documents are combined with deny-overrides-allow: an explicit Deny in any
    file wins over an Allow in any other.

    \b
    Exit codes:
        0: Allowed
        1: Error (unreadable or invalid policy/context)
        2: Denied
    """
    try:
        documents = [load_policy_document(path) for path in policy_paths]
        ctx = load_context(context_path, principal)
        decision = evaluate_all(action, resource, documents, ctx)
    except (FileNotFoundError, ValueError, PolicyDefinitionError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(EXIT_ERROR)

    echo_decision(decision, as_json=as_json)
    sys.exit(exit_code_for(decision))
