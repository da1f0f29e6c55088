"""Pattern matching for statement actions and resources.

This module provides the wildcard engine shared by:
- Statement Action patterns (e.g., "erp:invoice:*")
- Statement Resource patterns (e.g., "invoice/*")
- The StringLike condition operator

Pattern syntax:
- "*" alone matches everything
- "*" inside a pattern matches any sequence of characters (including empty)
- Every other character is literal ("?", "[", "]" and "**" have no special meaning)
- Matching is anchored at both ends and case-sensitive

Design note: fnmatch is deliberately not used here. It treats "?" and "[...]"
as wildcards, which would widen what an externally-authored policy grants.
"""

from __future__ import annotations

__all__ = [
    "WILDCARD",
    "match_action",
    "match_one_or_many",
    "match_resource",
    "wildcard_match",
]

import re
from collections.abc import Sequence

WILDCARD = "*"


def _wildcard_to_regex(pattern: str) -> str:
    """Convert a "*"-only glob into an anchored regex source.

    Args:
        pattern: Pattern with zero or more "*" wildcards.

    Returns:
        Regex source where literal text is escaped and each "*" becomes ".*".
    """
    return ".*".join(re.escape(part) for part in pattern.split(WILDCARD))


def wildcard_match(pattern: str, value: str) -> bool:
    """Match a value against a single wildcard pattern.

    Args:
        pattern: Pattern (e.g., "document:*", "invoice/*/lines", "*").
        value: Literal request value (e.g., "document:read").

    Returns:
        True if the whole value matches the pattern, False otherwise.
    """
    if pattern == WILDCARD:
        return True

    if WILDCARD not in pattern:
        return pattern == value

    # DOTALL so "*" also spans newlines: "any sequence of characters"
    return re.fullmatch(_wildcard_to_regex(pattern), value, flags=re.DOTALL) is not None


def match_one_or_many(value: str, patterns: str | Sequence[str]) -> bool:
    """Match a value against a single pattern or any pattern in a list.

    Provides OR logic for list patterns: matches if ANY pattern matches.

    Args:
        value: Literal request value.
        patterns: Single pattern or list of patterns.

    Returns:
        True if any pattern matches. An empty list never matches.
    """
    if isinstance(patterns, str):
        return wildcard_match(patterns, value)

    return any(wildcard_match(p, value) for p in patterns)


def match_action(requested: str, pattern: str | Sequence[str]) -> bool:
    """Match a requested action against a statement's Action.

    Args:
        requested: Action being performed (e.g., "erp:invoice:create").
        pattern: Statement Action, single pattern or list.

    Returns:
        True if the action is covered by the statement.
    """
    return match_one_or_many(requested, pattern)


def match_resource(requested: str, pattern: str | Sequence[str]) -> bool:
    """Match a requested resource against a statement's Resource.

    Args:
        requested: Resource being accessed (e.g., "invoice/123").
        pattern: Statement Resource, single pattern or list.

    Returns:
        True if the resource is covered by the statement.
    """
    return match_one_or_many(requested, pattern)
