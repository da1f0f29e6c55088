"""Shared helpers for the decision commands (evaluate, check)."""

from __future__ import annotations

__all__ = [
    "echo_decision",
    "exit_code_for",
    "load_context",
]

import json
from pathlib import Path
from typing import Any

import click

from scoped_acp.constants import EXIT_ALLOWED, EXIT_DENIED
from scoped_acp.context import EvaluationContext
from scoped_acp.pdp.decision import Decision
from scoped_acp.utils.file_helpers import read_json_file

from .styling import style_error, style_label, style_success


def load_context(context_path: Path | None, principal_id: str | None) -> EvaluationContext:
    """Build the evaluation context from a JSON file and/or a principal id.

    The --principal option overrides principal.id from the file.

    Raises:
        ValueError: If no principal is given, or the file is unreadable or
            not a valid context.
    """
    data: dict[str, Any] = {}
    if context_path is not None:
        raw = read_json_file(context_path, file_type="context")
        if not isinstance(raw, dict):
            raise ValueError(f"Context file {context_path} must contain a JSON object")
        data = raw

    if principal_id is not None:
        principal = dict(data.get("principal") or {})
        principal["id"] = principal_id
        data["principal"] = principal

    if "principal" not in data:
        raise ValueError("Provide --context with a principal, or --principal")

    return EvaluationContext.model_validate(data)


def exit_code_for(decision: Decision) -> int:
    return EXIT_ALLOWED if decision.allowed else EXIT_DENIED


def echo_decision(decision: Decision, *, as_json: bool, extra: dict[str, Any] | None = None) -> None:
    """Print a decision as JSON or as a short human-readable summary."""
    if as_json:
        payload = decision.model_dump(mode="json")
        if extra:
            payload.update(extra)
        click.echo(json.dumps(payload, indent=2))
        return

    verdict = f"ALLOW ({decision.reason.value})" if decision.allowed else f"DENY ({decision.reason.value})"
    click.echo(style_success(verdict) if decision.allowed else style_error(verdict))
    if decision.matched_statements:
        click.echo(style_label("Matched statements") + " " + ", ".join(decision.matched_statements))
    for key, value in (extra or {}).items():
        if isinstance(value, list):
            value = ", ".join(value) if value else "(none)"
        click.echo(style_label(key.replace("_", " ").capitalize()) + f" {value}")
