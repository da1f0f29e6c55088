"""Unit tests for wildcard pattern matching.

Tests the "*"-only glob engine shared by Action, Resource and StringLike.
"""

from __future__ import annotations

import pytest

from scoped_acp.pdp.matcher import (
    match_action,
    match_one_or_many,
    match_resource,
    wildcard_match,
)


class TestWildcardMatch:
    """Tests for wildcard_match."""

    @pytest.mark.parametrize(
        "pattern,value",
        [
            ("*", "anything"),
            ("*", ""),
            ("document:*", "document:read"),
            ("document:*", "document:"),
            ("*:read", "document:read"),
            ("invoice/*/lines", "invoice/123/lines"),
            ("invoice/*/lines", "invoice/a/b/lines"),
            ("a*b*c", "aXXbYYc"),
            ("exact", "exact"),
        ],
    )
    def test_matches(self, pattern: str, value: str) -> None:
        """Given a pattern covering the value, returns True."""
        assert wildcard_match(pattern, value) is True

    @pytest.mark.parametrize(
        "pattern,value",
        [
            ("document:*", "invoice:read"),
            ("document:read", "document:reads"),
            ("document:read", "Document:read"),
            ("*:read", "document:write"),
            ("invoice/*/lines", "invoice/123/line"),
            ("exact", "prefix-exact"),
        ],
    )
    def test_does_not_match(self, pattern: str, value: str) -> None:
        """Given a pattern not covering the value, returns False."""
        assert wildcard_match(pattern, value) is False

    def test_question_mark_is_literal(self) -> None:
        """Given "?" in a pattern, it matches only a literal "?"."""
        assert wildcard_match("doc?", "doc?") is True
        assert wildcard_match("doc?", "docs") is False

    def test_brackets_are_literal(self) -> None:
        """Given "[...]" in a pattern, it is not treated as a character class."""
        assert wildcard_match("file[0-9]", "file[0-9]") is True
        assert wildcard_match("file[0-9]", "file5") is False

    def test_regex_metacharacters_are_literal(self) -> None:
        """Given regex metacharacters, they are escaped."""
        assert wildcard_match("a.b*", "a.bc") is True
        assert wildcard_match("a.b*", "axbc") is False

    def test_star_spans_newlines(self) -> None:
        """Given "*", it matches across newlines."""
        assert wildcard_match("a*b", "a\nb") is True


class TestMatchOneOrMany:
    """Tests for list patterns (OR logic)."""

    def test_any_pattern_in_list_matches(self) -> None:
        assert match_one_or_many("invoice:read", ["document:*", "invoice:*"]) is True

    def test_no_pattern_in_list_matches(self) -> None:
        assert match_one_or_many("user:read", ["document:*", "invoice:*"]) is False

    def test_empty_list_never_matches(self) -> None:
        assert match_one_or_many("anything", []) is False

    def test_single_string_pattern(self) -> None:
        assert match_one_or_many("invoice:read", "invoice:*") is True


class TestActionAndResource:
    """Tests for the Action/Resource entry points."""

    def test_match_action(self) -> None:
        """Given a namespaced action, matches a namespace wildcard."""
        assert match_action("erp:invoice:create", "erp:invoice:*") is True
        assert match_action("erp:payment:create", "erp:invoice:*") is False

    def test_match_resource(self) -> None:
        """Given a resource path, matches a path wildcard."""
        assert match_resource("invoice/123", ["invoice/*", "order/*"]) is True
        assert match_resource("user/1", ["invoice/*", "order/*"]) is False
