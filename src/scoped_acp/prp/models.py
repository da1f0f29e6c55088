"""Models for policy storage and resolution.

Policies and attachments are stored independently and joined at
resolution time:

    PolicyRecord  (id, scope, document)           - WHAT the policy says
    Attachment    (policy_id, scope, principal)   - WHO it applies to, WHERE

A policy may be attached to many principals; a principal may have many
policies attached directly, through roles, or through groups.
"""

from __future__ import annotations

__all__ = [
    "Attachment",
    "PolicyBundle",
    "PolicyRecord",
    "PolicySource",
    "PrincipalRef",
    "PrincipalType",
]

from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from scoped_acp.context.scope import Scope
from scoped_acp.pdp.policy import PolicyDocument


class PrincipalType(str, Enum):
    """Kinds of principals a policy can be attached to."""

    USER = "USER"
    ROLE = "ROLE"
    GROUP = "GROUP"


class PrincipalRef(BaseModel):
    """Reference to a principal: (type, id).

    Attributes:
        type: USER, ROLE or GROUP.
        id: Principal id within its type.
    """

    type: PrincipalType
    id: str = Field(min_length=1)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def user(cls, principal_id: str) -> Self:
        return cls(type=PrincipalType.USER, id=principal_id)

    @classmethod
    def role(cls, role_id: str) -> Self:
        return cls(type=PrincipalType.ROLE, id=role_id)

    @classmethod
    def group(cls, group_id: str) -> Self:
        return cls(type=PrincipalType.GROUP, id=group_id)

    @property
    def key(self) -> tuple[str, str]:
        """Hashable identity used when matching attachment rows."""
        return (self.type.value, self.id)

    def __str__(self) -> str:
        return f"{self.type.value}:{self.id}"


class Attachment(BaseModel):
    """Binding of a policy to a principal within a scope.

    Attributes:
        policy_id: Id of the attached PolicyRecord.
        scope: Scope the binding lives in.
        principal: Principal the policy applies to.
    """

    policy_id: str = Field(min_length=1)
    scope: Scope
    principal: PrincipalRef

    model_config = ConfigDict(frozen=True)


class PolicyRecord(BaseModel):
    """A stored policy document.

    Attributes:
        id: Unique policy id.
        scope: Scope the policy belongs to.
        document: The policy document.
    """

    id: str = Field(min_length=1)
    scope: Scope
    document: PolicyDocument

    model_config = ConfigDict(frozen=True)


class PolicySource(BaseModel):
    """A resolved policy: the unit returned by PolicyProvider.get_policies()."""

    id: str
    document: PolicyDocument

    model_config = ConfigDict(frozen=True)


class PolicyBundle(BaseModel):
    """Policies plus attachments, as loaded from a bundle file.

    Bundle file format (JSON):

        {
          "policies": [{"id": "...", "scope": {"type": "TENANT", "id": "t1"},
                        "document": {"Version": "...", "Statement": [...]}}],
          "attachments": [{"policy_id": "...", "scope": {...},
                           "principal": {"type": "ROLE", "id": "finance"}}]
        }

    Attributes:
        policies: Policy records.
        attachments: Attachment rows referencing those records.
    """

    policies: list[PolicyRecord] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_references(self) -> Self:
        """Validate policy ids are unique and every attachment points at a policy.

        An attachment whose scope differs from its policy's scope could never
        resolve, so it is rejected here rather than silently ignored later.
        """
        ids = [p.id for p in self.policies]
        if len(ids) != len(set(ids)):
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            raise ValueError(f"Duplicate policy ids: {duplicates}")

        by_id = {p.id: p for p in self.policies}
        for attachment in self.attachments:
            record = by_id.get(attachment.policy_id)
            if record is None:
                raise ValueError(f"Attachment references unknown policy '{attachment.policy_id}'")
            if record.scope.key != attachment.scope.key:
                raise ValueError(
                    f"Attachment of '{attachment.policy_id}' is in scope {attachment.scope}, "
                    f"but the policy belongs to scope {record.scope}"
                )
        return self
