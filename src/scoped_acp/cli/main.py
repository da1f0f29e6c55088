"""Main CLI entry point for scoped-acp.

Defines the CLI group and registers all subcommands.

Commands:
    check     - Resolve policies from a bundle and evaluate a request
    config    - Configuration management (path, show, init)
    evaluate  - Evaluate policy files against a request
    policy    - Policy document commands (validate, show)

Subcommand help:
    scoped-acp COMMAND -h         Show help for a specific command
"""

from __future__ import annotations

__all__ = ["cli", "main"]

import logging
import sys
from pathlib import Path

import click

from scoped_acp import __version__
from scoped_acp.config import get_config_path

from .commands.check import check
from .commands.config import config
from .commands.evaluate import evaluate
from .commands.policy import policy
from .state import CliState


class ReorderedGroup(click.Group):
    """Custom group that shows commands before custom help text."""

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Add extra help after commands section."""
        formatter.write(
            """
Quick Start:
  scoped-acp policy validate policy.json
  scoped-acp evaluate -p policy.json -a erp:invoice:create -r invoice/123 --principal u1

Resolve through attachments (policies + roles/groups in a scope):
  scoped-acp check --bundle bundle.json \\
    --scope-type TENANT --scope-id t1 \\
    --principal u1 --role finance \\
    -a erp:invoice:approve -r invoice/123 -c context.json

Exit codes (evaluate, check):
  0  allowed    1  error    2  denied
"""
        )


@click.group(
    cls=ReorderedGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="SCOPED_ACP_CONFIG",
    help="Config file (default: OS config dir)",
)
@click.option("--debug", is_flag=True, help="Print diagnostic logs to stderr")
@click.pass_context
def cli(ctx: click.Context, version: bool, config_path: Path | None, debug: bool) -> None:
    """scoped-acp: scoped, IAM-style authorization decisions."""
    if version:
        click.echo(f"scoped-acp {__version__}")
        sys.exit(0)

    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    ctx.obj = CliState(config_path=config_path or get_config_path())

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Register commands
cli.add_command(check)
cli.add_command(config)
cli.add_command(evaluate)
cli.add_command(policy)


def main() -> None:
    """CLI entry point."""
    cli()
