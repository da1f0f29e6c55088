"""Variable resolution for condition operands.

Condition values may reference request data instead of literals:

    "Condition": {"StringEquals": {"resource.ownerId": "${principal.id}"}}

Rules:
- Only a string that is entirely one reference is resolved ("${principal.id}").
  Longer strings are literals ("user-${principal.id}" stays as written).
- References are dotted paths into the lookup view built from the
  EvaluationContext: principal, resource, request, scope, context.
- Missing paths resolve to None; they never raise. A condition comparing
  against a missing attribute therefore fails closed instead of crashing.
"""

from __future__ import annotations

__all__ = [
    "VARIABLE_PATTERN",
    "get_path",
    "resolve_value",
]

import re
from collections.abc import Mapping, Sequence
from typing import Any

VARIABLE_PATTERN = re.compile(r"^\$\{(.+)\}$", re.DOTALL)


def get_path(obj: Any, path: str) -> Any:
    """Look up a dotted path, returning None on any missing segment.

    Mapping keys are looked up by name. Sequence (non-string) items are
    looked up by integer index ("principal.roles.0").

    Args:
        obj: Root object, usually the lookup view.
        path: Dotted path (e.g., "principal.attributes.department").

    Returns:
        Value at the path, or None if any intermediate key is missing.
    """
    current = obj
    for key in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(key)
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            try:
                current = current[int(key)]
            except (ValueError, IndexError):
                return None
        else:
            return None
    return current


def resolve_value(value: Any, lookup: Mapping[str, Any]) -> Any:
    """Resolve a "${path}" reference against the lookup view.

    Lists are resolved element by element so that, e.g.,
    {"ArrayContainsAny": {"resource.tags": ["${principal.team}", "public"]}}
    works as expected. Non-string scalars are returned unchanged.

    Args:
        value: Expected value as written in the policy.
        lookup: Lookup view built by EvaluationContext.lookup_view().

    Returns:
        Resolved value, or the original value when it is not a reference.
    """
    if isinstance(value, list):
        return [resolve_value(item, lookup) for item in value]

    if not isinstance(value, str):
        return value

    match = VARIABLE_PATTERN.match(value.strip())
    if match is None:
        return value

    return get_path(lookup, match.group(1).strip())
