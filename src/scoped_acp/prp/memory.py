"""In-memory policy provider.

Reference implementation of PolicyProvider and PolicyStore. Suitable for
tests, single-process services and CLI checks against a bundle file.

Resolution algorithm (get_policies):
1. Keep attachment rows whose scope equals the requested scope exactly
2. Build the candidate principal set: the principal itself, ROLE:<id> for
   every role id, GROUP:<id> for every group id
3. Collect policy ids of rows whose principal is a candidate (first seen wins)
4. Look up each record; skip records that are missing, expired, or stored
   under a different scope than the one requested

Concurrency: Methods are async but never await, so every read and write runs
to completion without yielding to the event loop. No locking is required.
Each provider instance owns its state; there is no process-wide singleton.
"""

from __future__ import annotations

__all__ = [
    "MemoryPolicyProvider",
]

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Self

from scoped_acp.context.scope import Scope
from scoped_acp.prp.models import (
    Attachment,
    PolicyBundle,
    PolicyRecord,
    PolicySource,
    PrincipalRef,
    PrincipalType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StoredPolicy:
    """A policy record with its expiry.

    Attributes:
        record: The stored record.
        expires_at: Monotonic deadline, or None if the record never expires.
    """

    record: PolicyRecord
    expires_at: float | None


# Attachment identity: (policy_id, scope key, principal key)
_AttachmentKey = tuple[str, tuple[str, str | None], tuple[str, str]]


def _attachment_key(attachment: Attachment) -> _AttachmentKey:
    return (attachment.policy_id, attachment.scope.key, attachment.principal.key)


class MemoryPolicyProvider:
    """Policy records and attachments held in process memory.

    Attributes:
        policy_count: Number of stored records (including not yet purged expired ones).
        attachment_count: Number of attachment rows.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize an empty provider.

        Args:
            clock: Monotonic time source for TTL checks (injectable for tests).
        """
        self._clock = clock
        self._policies: dict[str, _StoredPolicy] = {}
        # Insertion-ordered; values are the rows themselves
        self._attachments: dict[_AttachmentKey, Attachment] = {}

    @classmethod
    def from_bundle(cls, bundle: PolicyBundle, *, clock: Callable[[], float] = time.monotonic) -> Self:
        """Create a provider seeded with a bundle's policies and attachments."""
        provider = cls(clock=clock)
        for record in bundle.policies:
            provider._put(record, ttl=None)
        for attachment in bundle.attachments:
            provider._attach(attachment)
        logger.debug(
            "Loaded bundle: %d policies, %d attachments",
            len(bundle.policies),
            len(bundle.attachments),
        )
        return provider

    @property
    def policy_count(self) -> int:
        return len(self._policies)

    @property
    def attachment_count(self) -> int:
        return len(self._attachments)

    # =========================================================================
    # Internal (synchronous) helpers
    # =========================================================================

    def _put(self, record: PolicyRecord, ttl: float | None) -> None:
        if ttl is not None and ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        expires_at = self._clock() + ttl if ttl is not None else None
        self._policies[record.id] = _StoredPolicy(record=record, expires_at=expires_at)

    def _attach(self, attachment: Attachment) -> None:
        self._attachments.setdefault(_attachment_key(attachment), attachment)

    def _detach(self, attachment: Attachment) -> bool:
        return self._attachments.pop(_attachment_key(attachment), None) is not None

    def _live_record(self, policy_id: str) -> PolicyRecord | None:
        """Return a record if present and not expired, purging it if expired."""
        stored = self._policies.get(policy_id)
        if stored is None:
            return None
        if stored.expires_at is not None and self._clock() >= stored.expires_at:
            del self._policies[policy_id]
            logger.debug("Policy '%s' expired and was purged", policy_id)
            return None
        return stored.record

    # =========================================================================
    # PolicyStore
    # =========================================================================

    async def add_policy(self, record: PolicyRecord, ttl: float | None = None) -> None:
        """Store (or replace) a policy record.

        Args:
            record: Record to store. An existing record with the same id is replaced.
            ttl: Seconds until the record expires, or None to keep it forever.

        Raises:
            ValueError: If ttl is not positive.
        """
        self._put(record, ttl)

    async def get_policy(self, policy_id: str) -> PolicyRecord | None:
        """Return a stored record by id, or None if missing or expired."""
        return self._live_record(policy_id)

    async def delete_policy(self, policy_id: str) -> bool:
        """Delete a record and cascade to every attachment that references it."""
        removed = self._policies.pop(policy_id, None) is not None
        orphaned = [key for key, a in self._attachments.items() if a.policy_id == policy_id]
        for key in orphaned:
            del self._attachments[key]
        if removed or orphaned:
            logger.debug("Deleted policy '%s' and %d attachment(s)", policy_id, len(orphaned))
        return removed

    async def attach_policy(self, policy_id: str, scope: Scope, principal: PrincipalRef) -> None:
        """Attach a policy to a principal in a scope.

        Attaching the same (policy, scope, principal) twice is a no-op. The
        policy does not need to exist yet; rows without a live record are
        skipped at resolution time.
        """
        self._attach(Attachment(policy_id=policy_id, scope=scope, principal=principal))

    async def detach_policy(self, policy_id: str, scope: Scope, principal: PrincipalRef) -> bool:
        return self._detach(Attachment(policy_id=policy_id, scope=scope, principal=principal))

    async def attach_policies(self, attachments: Iterable[Attachment]) -> None:
        for attachment in attachments:
            self._attach(attachment)

    async def detach_policies(self, attachments: Iterable[Attachment]) -> int:
        return sum(1 for attachment in attachments if self._detach(attachment))

    # =========================================================================
    # PolicyProvider
    # =========================================================================

    async def get_policies(
        self,
        scope: Scope,
        principal: PrincipalRef,
        role_ids: Sequence[str] | None = None,
        group_ids: Sequence[str] | None = None,
    ) -> list[PolicySource]:
        """Resolve policies attached to the principal, its roles and groups in scope.

        Args:
            scope: Exact scope to resolve in.
            principal: Requesting principal.
            role_ids: Role ids held by the principal.
            group_ids: Group ids the principal belongs to.

        Returns:
            PolicySource list, deduplicated by policy id, in attachment order.
        """
        candidates = {principal.key}
        candidates.update((PrincipalType.ROLE.value, r) for r in role_ids or ())
        candidates.update((PrincipalType.GROUP.value, g) for g in group_ids or ())

        # dict preserves first-seen order
        policy_ids: dict[str, None] = {}
        for attachment in self._attachments.values():
            if attachment.scope.key != scope.key:
                continue
            if attachment.principal.key in candidates:
                policy_ids.setdefault(attachment.policy_id, None)

        sources: list[PolicySource] = []
        for policy_id in policy_ids:
            record = self._live_record(policy_id)
            if record is None:
                logger.debug("Skipping attachment to missing policy '%s'", policy_id)
                continue
            if record.scope.key != scope.key:
                logger.debug(
                    "Skipping policy '%s': stored in scope %s, requested %s",
                    policy_id,
                    record.scope,
                    scope,
                )
                continue
            sources.append(PolicySource(id=record.id, document=record.document))

        return sources
