"""Protocol definitions for pluggable policy storage backends.

Defines the interfaces that policy providers must implement, enabling
backends other than the in-memory reference (a SQL table, a key-value
store, a remote policy service). Backends implement these protocols
without inheriting from our code (structural subtyping).

Example backend:

    class SqlPolicyProvider:
        async def get_policies(self, scope, principal, role_ids=None, group_ids=None):
            rows = await self._db.fetch(ATTACHED_POLICIES_SQL, ...)
            return [PolicySource(id=r.id, document=PolicyDocument.from_wire(r.doc)) for r in rows]

The contract is async because real backends perform I/O. Backend errors
(connection failures, timeouts) propagate unchanged; callers fail closed.
"""

from __future__ import annotations

__all__ = [
    "PolicyProvider",
    "PolicyStore",
]

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from scoped_acp.context.scope import Scope
    from scoped_acp.prp.models import Attachment, PolicyRecord, PolicySource, PrincipalRef


@runtime_checkable
class PolicyProvider(Protocol):
    """Read side: resolve the policies that apply to a principal in a scope."""

    async def get_policies(
        self,
        scope: "Scope",
        principal: "PrincipalRef",
        role_ids: Sequence[str] | None = None,
        group_ids: Sequence[str] | None = None,
    ) -> list["PolicySource"]:
        """Return policies attached to the principal, its roles and its groups.

        Implementations must:
        - Only return policies stored under exactly `scope` (no hierarchy walk)
        - Deduplicate by policy id (a policy attached twice is returned once)
        - Not modify any state (pure read; caching is allowed)

        Args:
            scope: Scope to resolve in.
            principal: The requesting principal (usually a USER).
            role_ids: Role ids the principal holds.
            group_ids: Group ids the principal belongs to.

        Returns:
            Policy sources, deduplicated, in a stable order.
        """
        ...


@runtime_checkable
class PolicyStore(PolicyProvider, Protocol):
    """Write side: manage policy records and attachments.

    Backends whose storage needs read-modify-write (e.g. a set kept in a
    key-value store) must serialize their own writes.
    """

    async def add_policy(self, record: "PolicyRecord", ttl: float | None = None) -> None:
        """Store (or replace) a policy record, optionally expiring after ttl seconds."""
        ...

    async def delete_policy(self, policy_id: str) -> bool:
        """Delete a policy record and every attachment referencing it.

        Returns:
            True if a record was deleted.
        """
        ...

    async def attach_policy(self, policy_id: str, scope: "Scope", principal: "PrincipalRef") -> None:
        """Attach a policy to a principal within a scope (idempotent)."""
        ...

    async def detach_policy(self, policy_id: str, scope: "Scope", principal: "PrincipalRef") -> bool:
        """Remove an attachment.

        Returns:
            True if an attachment was removed.
        """
        ...

    async def attach_policies(self, attachments: Iterable["Attachment"]) -> None:
        """Attach several policies."""
        ...

    async def detach_policies(self, attachments: Iterable["Attachment"]) -> int:
        """Remove several attachments.

        Returns:
            Number of attachments removed.
        """
        ...
