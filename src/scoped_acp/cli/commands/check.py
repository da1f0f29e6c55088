"""Check command for scoped-acp CLI.

Resolves policies from a bundle (policies + attachments) for a principal in
a scope, then evaluates the request, exactly as a service using
MemoryPolicyProvider and PolicyEnforcer would.
"""

from __future__ import annotations

__all__ = ["check"]

import asyncio
import sys
from pathlib import Path

import click

from scoped_acp.constants import EXIT_ERROR
from scoped_acp.context import Scope
from scoped_acp.exceptions import ConfigurationError, PolicyDefinitionError
from scoped_acp.pep.enforcer import PolicyEnforcer
from scoped_acp.prp.memory import MemoryPolicyProvider
from scoped_acp.utils.policy import load_policy_bundle

from ..decision_output import echo_decision, exit_code_for, load_context
from ..state import CliState
from ..styling import style_error

_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


@click.command("check")
@click.option("--bundle", "-b", "bundle_path", type=_FILE, help="Policy bundle file (default: bundle_path from config)")
@click.option("--scope-type", required=True, help="Scope type (PLATFORM, TENANT, WORKSPACE, APP, ...)")
@click.option("--scope-id", help="Scope id (omit for singleton scopes)")
@click.option("--principal", required=True, help="Principal (user) id")
@click.option("--role", "roles", multiple=True, help="Role id (repeatable)")
@click.option("--group", "groups", multiple=True, help="Group id (repeatable)")
@click.option("--action", "-a", required=True, help="Requested action")
@click.option("--resource", "-r", required=True, help="Requested resource")
@click.option("--context", "-c", "context_path", type=_FILE, help="JSON file with extra context")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def check(
    state: CliState,
    bundle_path: Path | None,
    scope_type: str,
    scope_id: str | None,
    principal: str,
    roles: tuple[str, ...],
    groups: tuple[str, ...],
    action: str,
    resource: str,
    context_path: Path | None,
    as_json: bool,
) -> None:
    """Resolve policies from a bundle and evaluate a request.

    Roles and groups default to principal.roles / principal.groups from
    --context when not given on the command line. Decisions are written to
    the decision log when it is enabled in the config.

    \b
    Exit codes:
        0: Allowed
        1: Error (missing/invalid bundle or context)
        2: Denied
    """
    try:
        app_config = state.app_config()
    except ConfigurationError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(EXIT_ERROR)

    path = bundle_path or (Path(app_config.bundle_path).expanduser() if app_config.bundle_path else None)
    if path is None:
        click.echo(style_error("No bundle given: pass --bundle or set bundle_path in the config"), err=True)
        sys.exit(EXIT_ERROR)

    try:
        bundle = load_policy_bundle(path)
        ctx = load_context(context_path, principal)
        scope = Scope(type=scope_type, id=scope_id)
        enforcer = PolicyEnforcer.from_config(MemoryPolicyProvider.from_bundle(bundle), app_config)
        decision, sources = asyncio.run(
            enforcer.decide_with_sources(
                action,
                resource,
                ctx,
                scope=scope,
                role_ids=list(roles) if roles else None,
                group_ids=list(groups) if groups else None,
            )
        )
    except (FileNotFoundError, ValueError, OSError, PolicyDefinitionError) as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(EXIT_ERROR)

    extra = {"scope": str(scope), "policies": [source.id for source in sources]}
    echo_decision(decision, as_json=as_json, extra=extra)
    sys.exit(exit_code_for(decision))
