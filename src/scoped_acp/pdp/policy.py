"""Policy document models and structural validation.

Wire format (field names and Effect values are case-sensitive):

    PolicyDocument
    ├── Version: Optional schema/version tag
    └── Statement: list[Statement]
        └── Statement
            ├── Sid: Optional identifier (tracing only)
            ├── Effect: "Allow" | "Deny"
            ├── Action: str | list[str]   (wildcard "*")
            ├── Resource: str | list[str] (wildcard "*")
            └── Condition: {operator: {context path: expected}}

Design principles:
1. Deny-overrides-allow across all matching statements
2. Default to DENY if no statement matches (zero trust)
3. Validation happens before evaluation; callers may skip it for
   documents that were already validated (PolicyDocument.from_trusted)
"""

from __future__ import annotations

__all__ = [
    "ConditionBlock",
    "Effect",
    "PatternValue",
    "PolicyDocument",
    "Statement",
    "assert_valid_policy_document",
    "statement_id",
    "validate_policy_document",
]

from collections.abc import Iterator, Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from scoped_acp.constants import STATEMENT_ID_PREFIX
from scoped_acp.exceptions import PolicyValidationError
from scoped_acp.pdp.conditions import unknown_operators

Effect = Literal["Allow", "Deny"]

# Single pattern or list of patterns (OR logic)
PatternValue = str | list[str]

ConditionBlock = dict[str, dict[str, Any]]

_WIRE_CONFIG = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Statement(BaseModel):
    """A single policy statement.

    Attributes:
        sid: Optional identifier, used only for decision tracing.
        effect: "Allow" or "Deny".
        actions: Action pattern(s); the statement applies if ANY matches.
        resources: Resource pattern(s); the statement applies if ANY matches.
        condition: Optional condition block (AND across operators and entries).
    """

    sid: str | None = Field(default=None, alias="Sid")
    effect: Effect = Field(alias="Effect")
    actions: PatternValue = Field(alias="Action")
    resources: PatternValue = Field(alias="Resource")
    condition: ConditionBlock | None = Field(default=None, alias="Condition")

    model_config = _WIRE_CONFIG

    @field_validator("actions", "resources", mode="before")
    @classmethod
    def require_patterns(cls, v: Any) -> Any:
        """Reject empty patterns.

        An empty Action/Resource would never match, which almost always means
        the author made a typo. Better to fail fast with a clear error.
        """
        if isinstance(v, str):
            if not v.strip():
                raise ValueError("must be a non-empty string")
            return v

        if isinstance(v, (list, tuple)):
            if not v:
                raise ValueError("must not be an empty list")
            if not all(isinstance(item, str) and item.strip() for item in v):
                raise ValueError("list items must be non-empty strings")
            return list(v)

        raise ValueError("must be a string or a list of strings")

    @field_validator("condition", mode="after")
    @classmethod
    def reject_unknown_operators(cls, v: ConditionBlock | None) -> ConditionBlock | None:
        """Reject operator names that are not registered."""
        if v is None:
            return v
        unknown = unknown_operators(v)
        if unknown:
            raise ValueError(f"unknown condition operator(s): {', '.join(unknown)}")
        return v

    @classmethod
    def from_trusted(cls, data: Mapping[str, Any]) -> "Statement":
        """Build a statement from wire or field names without validation."""
        return cls.model_construct(
            sid=_pick(data, "Sid", "sid"),
            effect=_pick(data, "Effect", "effect"),
            actions=_pick(data, "Action", "actions"),
            resources=_pick(data, "Resource", "resources"),
            condition=_pick(data, "Condition", "condition"),
        )


class PolicyDocument(BaseModel):
    """A complete policy document.

    Immutable once loaded. Many concurrent evaluations may share one instance.

    Attributes:
        version: Optional version tag, carried through unchanged.
        statements: Statements in document order.
    """

    version: str | None = Field(default=None, alias="Version")
    statements: tuple[Statement, ...] = Field(alias="Statement")

    model_config = _WIRE_CONFIG

    @classmethod
    def from_wire(cls, data: Any) -> "PolicyDocument":
        """Validate a wire-format mapping into a PolicyDocument.

        Raises:
            PolicyValidationError: If the document is structurally malformed.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise PolicyValidationError("Invalid policy document", _format_errors(e)) from e

    @classmethod
    def from_trusted(cls, data: Mapping[str, Any]) -> "PolicyDocument":
        """Build a document without validation, for pre-trusted sources.

        Used when evaluating with validate=False. Structural problems in a
        trusted document surface as non-matching statements or as errors
        during evaluation, never as PolicyValidationError.
        """
        raw = _pick(data, "Statement", "statements") or ()
        statements = tuple(
            s if isinstance(s, Statement) else Statement.from_trusted(s) for s in raw
        )
        return cls.model_construct(
            version=_pick(data, "Version", "version"),
            statements=statements,
        )

    def statement_ids(self) -> Iterator[str]:
        """Yield the effective id of every statement, in document order."""
        for index, stmt in enumerate(self.statements):
            yield statement_id(stmt, index)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the wire format (Version/Statement/Sid/Effect/...)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _pick(data: Mapping[str, Any], alias: str, name: str) -> Any:
    """Read a value by wire alias, falling back to the Python field name."""
    if alias in data:
        return data[alias]
    return data.get(name)


def statement_id(stmt: Statement, index: int) -> str:
    """Effective statement id: Sid when present, otherwise "stmt#<index>".

    Args:
        stmt: Statement to identify.
        index: Position of the statement in its document.

    Returns:
        Identifier used in Decision.matched_statements.
    """
    if stmt.sid is not None:
        return stmt.sid
    return f"{STATEMENT_ID_PREFIX}{index}"


def _format_errors(exc: ValidationError) -> list[str]:
    """Turn a pydantic ValidationError into "<location>: <message>" strings."""
    problems = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"]) or "document"
        msg = error["msg"].removeprefix("Value error, ")
        problems.append(f"{loc}: {msg}")
    return problems


def validate_policy_document(data: Any) -> list[str]:
    """Check a wire-format document for structural problems.

    Args:
        data: Parsed JSON (usually a dict) or an existing PolicyDocument.

    Returns:
        List of "<location>: <message>" strings. Empty if the document is valid.
    """
    if isinstance(data, PolicyDocument):
        data = data.to_wire()
    try:
        PolicyDocument.model_validate(data)
    except ValidationError as e:
        return _format_errors(e)
    return []


def assert_valid_policy_document(data: Any) -> PolicyDocument:
    """Validate a document and return the typed model.

    Args:
        data: Parsed JSON (usually a dict).

    Returns:
        Validated PolicyDocument.

    Raises:
        PolicyValidationError: With the full list of structural problems.
    """
    return PolicyDocument.from_wire(data)
