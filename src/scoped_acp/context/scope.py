"""Scope model - WHERE policies and attachments live.

A scope is the isolation key under which policies and attachments are
namespaced (platform, tenant, workspace, app, ...). Resolution only ever
returns policies stored under the exact scope that was asked for; there is
no implicit WORKSPACE -> TENANT -> PLATFORM walk.
"""

from __future__ import annotations

__all__ = [
    "Scope",
    "ScopeKey",
    "ScopeType",
    "same_scope",
]

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ScopeType(str, Enum):
    """Well-known scope types.

    Scope types are open-ended: any non-empty string is accepted by Scope,
    these are the ones the tooling knows by name.
    """

    PLATFORM = "PLATFORM"
    TENANT = "TENANT"
    WORKSPACE = "WORKSPACE"
    APP = "APP"


# Hashable scope identity used for indexing: (type value, id or None)
ScopeKey = tuple[str, str | None]


class Scope(BaseModel):
    """Isolation boundary for policies and attachments.

    Attributes:
        type: Scope type (ScopeType member or any other non-empty string).
        id: Scope instance id (tenant id, workspace id, ...). None for
            singleton scopes such as PLATFORM.
    """

    type: ScopeType | str = Field(union_mode="left_to_right")
    id: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("type", mode="after")
    @classmethod
    def reject_empty_type(cls, v: ScopeType | str) -> ScopeType | str:
        """Reject empty or whitespace-only scope types."""
        if not str(v.value if isinstance(v, ScopeType) else v).strip():
            raise ValueError("Scope type cannot be empty or whitespace-only")
        return v

    @property
    def type_value(self) -> str:
        """Scope type as a plain string."""
        return self.type.value if isinstance(self.type, ScopeType) else self.type

    @property
    def key(self) -> ScopeKey:
        """Hashable identity: two scopes are equal iff their keys are equal."""
        return (self.type_value, self.id)

    def __str__(self) -> str:
        return self.type_value if self.id is None else f"{self.type_value}:{self.id}"


def same_scope(a: Scope, b: Scope) -> bool:
    """Check two scopes for equality on type and id.

    Both ids being None counts as equal.

    Args:
        a: First scope.
        b: Second scope.

    Returns:
        True if type and id are both equal.
    """
    return a.key == b.key
