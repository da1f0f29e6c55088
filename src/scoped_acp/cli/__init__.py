"""Command-line interface for scoped-acp.

Provides commands for validating policy files, evaluating requests against
them, resolving policies from bundles and managing configuration.
"""

from .main import cli, main

__all__ = ["cli", "main"]
