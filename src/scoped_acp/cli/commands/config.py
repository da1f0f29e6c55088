"""Config command group for scoped-acp CLI.

Provides configuration management subcommands.
"""

from __future__ import annotations

__all__ = ["config"]

import json
import sys
from pathlib import Path

import click

from scoped_acp.config import AppConfig, EvaluationConfig, LoggingConfig
from scoped_acp.constants import EXIT_ERROR
from scoped_acp.exceptions import ConfigurationError
from scoped_acp.telemetry.audit.decision_logger import get_decisions_log_path

from ..state import CliState
from ..styling import style_dim, style_error, style_header, style_success


@click.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command("path")
@click.pass_obj
def config_path_cmd(state: CliState) -> None:
    """Show config file path.

    Defaults to the OS-appropriate location, overridable with --config or
    SCOPED_ACP_CONFIG:
    - macOS: ~/Library/Application Support/scoped-acp/
    - Linux: ~/.config/scoped-acp/
    - Windows: C:\\Users\\<user>\\AppData\\Roaming\\scoped-acp/
    """
    click.echo(str(state.config_path))

    if not state.config_path.exists():
        click.echo("(file does not exist - run 'scoped-acp config init' to create)", err=True)


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def config_show(state: CliState, as_json: bool) -> None:
    """Display current configuration.

    Built-in defaults are shown when no config file exists.
    """
    try:
        app_config = state.app_config()
    except ConfigurationError as e:
        click.echo(style_error(str(e)), err=True)
        sys.exit(EXIT_ERROR)

    decisions_log = get_decisions_log_path(app_config.logging.log_dir_path)

    if as_json:
        config_dict = app_config.model_dump(mode="json")
        config_dict["_computed"] = {
            "config_file": str(state.config_path),
            "config_file_exists": state.config_path.exists(),
            "decisions_log": str(decisions_log),
        }
        click.echo(json.dumps(config_dict, indent=2))
        return

    click.echo("\nscoped-acp configuration:\n")
    if not state.config_path.exists():
        click.echo(style_dim(f"(no file at {state.config_path} - showing defaults)\n"))

    click.echo(style_header("Logging"))
    click.echo(f"  log_dir: {app_config.logging.log_dir}")
    click.echo(f"  log_level: {app_config.logging.log_level}")
    click.echo(f"  decision_log: {app_config.logging.decision_log}")
    click.echo(f"    decisions: {decisions_log}")
    click.echo()

    click.echo(style_header("Evaluation"))
    click.echo(f"  validate_policies: {app_config.evaluation.validate_policies}")
    click.echo()

    click.echo(style_header("Policies"))
    click.echo(f"  bundle_path: {app_config.bundle_path or '(not set)'}")


@config.command("init")
@click.option("--log-dir", help="Base log directory (default: platform log dir)")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO"]), default="INFO", show_default=True)
@click.option("--decision-log/--no-decision-log", default=True, show_default=True, help="Write decisions.jsonl")
@click.option("--bundle", "bundle_path", type=click.Path(dir_okay=False, path_type=Path), help="Default policy bundle")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.pass_obj
def config_init(
    state: CliState,
    log_dir: str | None,
    log_level: str,
    decision_log: bool,
    bundle_path: Path | None,
    force: bool,
) -> None:
    """Create a config file.

    Exit codes:
        0: Config written
        1: Config exists (without --force) or could not be written
    """
    if state.config_path.exists() and not force:
        click.echo(style_error(f"Config already exists at {state.config_path}"), err=True)
        click.echo("Use --force to overwrite.", err=True)
        sys.exit(EXIT_ERROR)

    logging_kwargs: dict[str, object] = {"log_level": log_level, "decision_log": decision_log}
    if log_dir:
        logging_kwargs["log_dir"] = log_dir

    app_config = AppConfig(
        logging=LoggingConfig.model_validate(logging_kwargs),
        evaluation=EvaluationConfig(),
        bundle_path=str(bundle_path) if bundle_path else None,
    )

    try:
        app_config.save_to_file(state.config_path)
    except OSError as e:
        click.echo(style_error(f"Could not write config: {e}"), err=True)
        sys.exit(EXIT_ERROR)

    click.echo(style_success(f"Config written: {state.config_path}"))
