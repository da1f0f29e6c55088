"""Logging utilities and helpers.

- iso_formatter: ISO 8601 timestamp formatting for JSONL logs
- logger_setup: Factory for file-backed JSONL loggers
- logging_helpers: Event serialization and sanitization

Import directly from submodules:
    from scoped_acp.utils.logging.logger_setup import setup_jsonl_logger
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
