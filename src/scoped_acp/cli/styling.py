"""CLI output styling utilities.

Provides consistent styling helpers for CLI output:
- Cyan bold for section headers and labels
- Green for success messages and Allow effects
- Red for error messages and Deny effects
- Dim for neutral/empty state messages
"""

from __future__ import annotations

__all__ = [
    "style_dim",
    "style_effect",
    "style_error",
    "style_header",
    "style_label",
    "style_success",
]

import click


def style_header(title: str) -> str:
    """Style a section header as "--- Title ---" in cyan bold.

    Example:
        >>> click.echo(style_header("Logging"))
        --- Logging ---
    """
    return click.style(f"--- {title} ---", fg="cyan", bold=True)


def style_label(label: str) -> str:
    """Style a label (a colon is appended).

    Example:
        >>> click.echo(style_label("Statements") + " 3")
        Statements: 3
    """
    return click.style(f"{label}:", fg="cyan", bold=True)


def style_success(message: str) -> str:
    """Style a success message with checkmark.

    Example:
        >>> click.echo(style_success("Policy valid"))
        ✓ Policy valid
    """
    return click.style(f"✓ {message}", fg="green")


def style_error(message: str) -> str:
    """Style an error message with cross mark.

    Example:
        >>> click.echo(style_error("File not found"), err=True)
        ✗ File not found
    """
    return click.style(f"✗ {message}", fg="red")


def style_dim(message: str) -> str:
    return click.style(message, dim=True)


def style_effect(effect: str) -> str:
    """Style a statement effect: Allow green, Deny red."""
    return click.style(effect.upper(), fg="green" if effect == "Allow" else "red", bold=True)
