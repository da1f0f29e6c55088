"""Tests for the PolicyProvider / PolicyStore protocols.

Verifies that the in-memory provider satisfies both protocols and that a
read-only backend only needs get_policies.
"""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from scoped_acp.context import Scope
from scoped_acp.prp import (
    MemoryPolicyProvider,
    PolicyProvider,
    PolicySource,
    PolicyStore,
    PrincipalRef,
    PrincipalType,
)


class ReadOnlyProvider:
    """Minimal backend: resolves nothing, supports no writes."""

    async def get_policies(
        self,
        scope: Scope,
        principal: PrincipalRef,
        role_ids: Sequence[str] | None = None,
        group_ids: Sequence[str] | None = None,
    ) -> list[PolicySource]:
        return []


class TestProtocolCompliance:
    """Verify structural subtyping against the protocols."""

    def test_memory_provider_is_a_provider(self) -> None:
        assert isinstance(MemoryPolicyProvider(), PolicyProvider)

    def test_memory_provider_is_a_store(self) -> None:
        assert isinstance(MemoryPolicyProvider(), PolicyStore)

    def test_read_only_backend_is_a_provider_only(self) -> None:
        backend = ReadOnlyProvider()
        assert isinstance(backend, PolicyProvider)
        assert not isinstance(backend, PolicyStore)

    def test_unrelated_object_is_not_a_provider(self) -> None:
        assert not isinstance(object(), PolicyProvider)


class TestPrincipalRef:
    """Tests for PrincipalRef helpers."""

    @pytest.mark.parametrize(
        "factory,expected_type",
        [
            (PrincipalRef.user, PrincipalType.USER),
            (PrincipalRef.role, PrincipalType.ROLE),
            (PrincipalRef.group, PrincipalType.GROUP),
        ],
    )
    def test_factories(self, factory, expected_type: PrincipalType) -> None:
        ref = factory("x")
        assert ref.type == expected_type
        assert ref.key == (expected_type.value, "x")

    def test_str(self) -> None:
        assert str(PrincipalRef.role("finance")) == "ROLE:finance"

    def test_empty_id_rejected(self) -> None:
        with pytest.raises(ValueError):
            PrincipalRef.user("")
