"""EvaluationContext - everything a condition may look at.

The context is supplied by the caller (an HTTP middleware, an RPC guard,
a batch job) and is read-only during evaluation. Each section accepts
arbitrary extra attributes, since policies reference caller-specific data:

    principal.department, resource.attributes.classification, request.headers.x-tier

Declared fields use camelCase aliases so condition paths match the JSON
that external policy authoring tools produce ("principal.tenantId",
"resource.ownerId"). Python callers may pass either snake_case or camelCase.
"""

from __future__ import annotations

__all__ = [
    "EvaluationContext",
    "Principal",
    "RequestInfo",
    "ResourceAttributes",
]

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from scoped_acp.context.scope import Scope

_SECTION_CONFIG = ConfigDict(
    frozen=True,
    extra="allow",
    alias_generator=to_camel,
    populate_by_name=True,
)


class Principal(BaseModel):
    """WHO is making the request.

    Attributes:
        id: Principal id (user id, service account id).
        tenant_id: Tenant the principal belongs to, if any.
        roles: Role ids; used as default role memberships during resolution.
        groups: Group ids; used as default group memberships during resolution.
        attributes: Free-form attribute map.
    """

    id: str = Field(min_length=1)
    tenant_id: str | None = None
    roles: tuple[str, ...] | None = None
    groups: tuple[str, ...] | None = None
    attributes: dict[str, Any] | None = None

    model_config = _SECTION_CONFIG


class ResourceAttributes(BaseModel):
    """ON WHAT the action is performed (the resource object, not its name).

    The resource *name* that statements match against ("invoice/123") is passed
    to the evaluator separately; this model carries the object's attributes.
    """

    type: str | None = None
    id: str | None = None
    tenant_id: str | None = None
    owner_id: str | None = None
    attributes: dict[str, Any] | None = None

    model_config = _SECTION_CONFIG


class RequestInfo(BaseModel):
    """Transport-level facts about the request."""

    method: str | None = None
    path: str | None = None
    ip: str | None = None
    headers: dict[str, str | list[str] | None] | None = None

    model_config = _SECTION_CONFIG


class EvaluationContext(BaseModel):
    """Complete input for condition evaluation.

    Attributes:
        principal: Requesting identity (required).
        resource: Attributes of the target object.
        request: Transport-level request facts.
        scope: Isolation scope the request is evaluated in.
        context: Anything else (e.g., "now", feature flags). "context.scope"
            falls back to the top-level scope when not set explicitly.
    """

    principal: Principal
    resource: ResourceAttributes | None = None
    request: RequestInfo | None = None
    scope: Scope | None = None
    context: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def coerce(cls, ctx: "EvaluationContext | Mapping[str, Any]") -> "EvaluationContext":
        """Accept either a built context or a plain mapping from an adapter.

        Raises:
            pydantic.ValidationError: If the mapping is not a valid context.
        """
        if isinstance(ctx, EvaluationContext):
            return ctx
        return cls.model_validate(ctx)

    def lookup_view(self) -> dict[str, Any]:
        """Build the dict that condition paths and "${...}" references resolve against.

        Returns:
            {"principal", "resource", "request", "scope", "context"}; absent
            sections are None. Declared fields appear under their camelCase
            alias, extra attributes under the name they were given.
        """
        scope = self.scope.model_dump() if self.scope is not None else None
        context = dict(self.context)
        if context.get("scope") is None:
            context["scope"] = scope

        return {
            "principal": self.principal.model_dump(by_alias=True),
            "resource": self.resource.model_dump(by_alias=True) if self.resource else None,
            "request": self.request.model_dump(by_alias=True) if self.request else None,
            "scope": scope,
            "context": context,
        }
