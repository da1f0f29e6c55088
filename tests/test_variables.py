"""Unit tests for dotted-path lookup and "${...}" reference resolution."""

from __future__ import annotations

from typing import Any

import pytest

from scoped_acp.pdp.variables import get_path, resolve_value


@pytest.fixture
def lookup() -> dict[str, Any]:
    """A lookup view shaped like EvaluationContext.lookup_view()."""
    return {
        "principal": {"id": "u1", "tenantId": "t1", "roles": ["finance", "auditor"]},
        "resource": {"ownerId": "u1", "attributes": {"amount": 500}},
        "request": None,
        "scope": {"type": "TENANT", "id": "t1"},
        "context": {"flags": {"beta": True}},
    }


class TestGetPath:
    """Tests for get_path."""

    def test_nested_mapping(self, lookup: dict[str, Any]) -> None:
        assert get_path(lookup, "resource.attributes.amount") == 500

    def test_sequence_index(self, lookup: dict[str, Any]) -> None:
        """Given a numeric segment on a list, indexes into it."""
        assert get_path(lookup, "principal.roles.1") == "auditor"

    @pytest.mark.parametrize(
        "path",
        [
            "principal.missing",
            "resource.attributes.amount.deeper",
            "request.ip",
            "principal.roles.7",
            "principal.roles.first",
            "nope",
        ],
    )
    def test_missing_paths_return_none(self, lookup: dict[str, Any], path: str) -> None:
        """Given a path that does not exist, returns None instead of raising."""
        assert get_path(lookup, path) is None

    def test_string_is_not_indexed(self, lookup: dict[str, Any]) -> None:
        """Given a string value, does not index into its characters."""
        assert get_path(lookup, "principal.id.0") is None


class TestResolveValue:
    """Tests for resolve_value."""

    def test_whole_string_reference_is_resolved(self, lookup: dict[str, Any]) -> None:
        assert resolve_value("${principal.tenantId}", lookup) == "t1"

    def test_reference_can_resolve_to_non_string(self, lookup: dict[str, Any]) -> None:
        assert resolve_value("${context.flags.beta}", lookup) is True

    def test_embedded_reference_is_literal(self, lookup: dict[str, Any]) -> None:
        """Given a reference inside a longer string, the string is left as written."""
        assert resolve_value("user-${principal.id}", lookup) == "user-${principal.id}"

    def test_missing_reference_resolves_to_none(self, lookup: dict[str, Any]) -> None:
        assert resolve_value("${principal.department}", lookup) is None

    def test_list_elements_are_resolved(self, lookup: dict[str, Any]) -> None:
        assert resolve_value(["${principal.id}", "public"], lookup) == ["u1", "public"]

    def test_non_string_scalars_pass_through(self, lookup: dict[str, Any]) -> None:
        assert resolve_value(10, lookup) == 10
        assert resolve_value(None, lookup) is None
