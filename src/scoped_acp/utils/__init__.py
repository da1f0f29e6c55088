"""Shared utilities (file helpers, logging, policy files)."""
