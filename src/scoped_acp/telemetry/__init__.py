"""Telemetry: audit event models and loggers.

Structure:
    models/    - Pydantic event models (DecisionEvent)
    audit/     - Decision audit logger (decisions.jsonl)
"""

__all__: list[str] = []  # Import from submodules
