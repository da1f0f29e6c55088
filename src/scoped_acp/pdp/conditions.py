"""Condition operator registry and condition block evaluation.

A statement's Condition block maps operator names to {context path: expected}:

    "Condition": {
        "StringEquals": {"resource.tenantId": "${principal.tenantId}"},
        "NumericLessThanEquals": {"resource.attributes.amount": 10000},
        "IpMatch": {"request.ip": "10.0.0.0/8"}
    }

Evaluation rules:
1. Operators are a closed set (ConditionOperator). An unknown name is a
   policy definition error and raises UnknownConditionOperatorError.
2. All operators in a block must pass (AND).
3. All entries under one operator must pass (AND).
4. Each expected value is first passed through the variable resolver, so
   it may reference request data ("${principal.id}").
5. Operators never raise on bad operands. Wrong types, unparseable numbers,
   dates, regexes and IP addresses make that single comparison False
   (fail closed).

Operator functions have the signature (expected, actual) -> bool where
`expected` comes from the policy and `actual` from the context.
"""

from __future__ import annotations

__all__ = [
    "ConditionOperator",
    "OPERATORS",
    "OperatorFn",
    "evaluate_conditions",
    "get_operator",
    "unknown_operators",
]

import ipaddress
import math
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date, datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any

from scoped_acp.exceptions import UnknownConditionOperatorError
from scoped_acp.pdp.matcher import wildcard_match
from scoped_acp.pdp.variables import get_path, resolve_value

OperatorFn = Callable[[Any, Any], bool]


class ConditionOperator(str, Enum):
    """Supported condition operators (wire names are case-sensitive)."""

    # String
    STRING_EQUALS = "StringEquals"
    STRING_NOT_EQUALS = "StringNotEquals"
    STRING_LIKE = "StringLike"
    STRING_CONTAINS = "StringContains"
    STRING_STARTS_WITH = "StringStartsWith"
    STRING_ENDS_WITH = "StringEndsWith"
    STRING_INCLUDES_ANY = "StringIncludesAny"
    STRING_INCLUDES_ALL = "StringIncludesAll"
    STRING_REGEX = "StringRegex"

    # Boolean
    BOOL = "Bool"

    # Numeric
    NUMERIC_EQUALS = "NumericEquals"
    NUMERIC_NOT_EQUALS = "NumericNotEquals"
    NUMERIC_LESS_THAN = "NumericLessThan"
    NUMERIC_LESS_THAN_EQUALS = "NumericLessThanEquals"
    NUMERIC_GREATER_THAN = "NumericGreaterThan"
    NUMERIC_GREATER_THAN_EQUALS = "NumericGreaterThanEquals"

    # Array
    ARRAY_CONTAINS = "ArrayContains"
    ARRAY_NOT_CONTAINS = "ArrayNotContains"
    ARRAY_CONTAINS_ANY = "ArrayContainsAny"
    ARRAY_EQUALS = "ArrayEquals"
    ARRAY_LENGTH_EQUALS = "ArrayLengthEquals"
    ARRAY_LENGTH_LESS_THAN = "ArrayLengthLessThan"
    ARRAY_LENGTH_GREATER_THAN = "ArrayLengthGreaterThan"

    # Network
    IP_MATCH = "IpMatch"
    NOT_IP_MATCH = "NotIpMatch"
    IP_EQUALS = "IpEquals"

    # Date
    DATE_EQUALS = "DateEquals"
    DATE_NOT_EQUALS = "DateNotEquals"
    DATE_LESS_THAN = "DateLessThan"
    DATE_LESS_THAN_EQUALS = "DateLessThanEquals"
    DATE_GREATER_THAN = "DateGreaterThan"
    DATE_GREATER_THAN_EQUALS = "DateGreaterThanEquals"
    DATE_IN_RANGE = "DateInRange"

    # Null check
    IS_NULL = "IsNull"


# =============================================================================
# Operand coercion (all return None on failure - callers fail closed)
# =============================================================================

_TRUE_STRINGS = frozenset({"true"})
_FALSE_STRINGS = frozenset({"false", ""})


def _is_array(value: Any) -> bool:
    """True for lists/tuples, False for strings and everything else."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _to_number(value: Any) -> int | float | None:
    """Parse a numeric operand.

    Booleans are not numbers here: "NumericEquals: {x: 1}" must not match True.

    Returns:
        int or float, or None if the value is not numeric (or NaN).
    """
    if isinstance(value, bool) or value is None:
        return None

    if isinstance(value, (int, float)):
        number: int | float = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
    else:
        return None

    if isinstance(number, float) and math.isnan(number):
        return None
    return number


def _to_bool(value: Any) -> bool:
    """Coerce an operand to a boolean.

    "true"/"false" strings (any case) are parsed, since JSON bodies, headers
    and query strings carry booleans as text. Everything else uses truthiness.
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return bool(value)


def _to_datetime(value: Any) -> datetime | None:
    """Parse a date operand into an aware UTC-comparable datetime.

    Accepts datetime, date, ISO 8601 strings ("2025-01-31", "2025-01-31T10:00:00Z")
    and numbers as epoch milliseconds. Naive values are treated as UTC.

    Returns:
        Aware datetime, or None if the value cannot be parsed.
    """
    if isinstance(value, bool) or value is None:
        return None

    parsed: datetime
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_ip(value: Any) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """Parse a bare IP address string."""
    if not isinstance(value, str):
        return None
    try:
        return ipaddress.ip_address(value.strip())
    except ValueError:
        return None


def _to_network(value: Any) -> ipaddress.IPv4Network | ipaddress.IPv6Network | None:
    """Parse a CIDR string ("10.0.0.0/8"). Host bits are ignored."""
    if not isinstance(value, str) or "/" not in value:
        return None
    try:
        return ipaddress.ip_network(value.strip(), strict=False)
    except ValueError:
        return None


def _in_network(
    address: ipaddress.IPv4Address | ipaddress.IPv6Address,
    network: ipaddress.IPv4Network | ipaddress.IPv6Network,
) -> bool:
    # ipaddress does not check versions on membership; an IPv6 address can
    # otherwise collide with an IPv4 prefix on its low 32 bits.
    return address.version == network.version and address in network


# =============================================================================
# String family
# =============================================================================


def _any_of(expected: Any, test: OperatorFn, actual: Any) -> bool:
    """Apply `test` to a scalar expected, or OR it across a list of them."""
    if _is_array(expected):
        return any(test(e, actual) for e in expected)
    return test(expected, actual)


def _str_equals(expected: Any, actual: Any) -> bool:
    return isinstance(expected, str) and isinstance(actual, str) and expected == actual


def _str_like(expected: Any, actual: Any) -> bool:
    return isinstance(expected, str) and isinstance(actual, str) and wildcard_match(expected, actual)


def string_equals(expected: Any, actual: Any) -> bool:
    """Exact match; a list of expected values matches if any is equal."""
    return _any_of(expected, _str_equals, actual)


def string_not_equals(expected: Any, actual: Any) -> bool:
    """Both strings and different; with a list, different from every value."""
    if not isinstance(actual, str):
        return False
    values = list(expected) if _is_array(expected) else [expected]
    if not values or not all(isinstance(v, str) for v in values):
        return False
    return actual not in values


def string_like(expected: Any, actual: Any) -> bool:
    """Wildcard match using the Action/Resource engine ("*" only)."""
    return _any_of(expected, _str_like, actual)


def string_contains(expected: Any, actual: Any) -> bool:
    return isinstance(expected, str) and isinstance(actual, str) and expected in actual


def string_starts_with(expected: Any, actual: Any) -> bool:
    return isinstance(expected, str) and isinstance(actual, str) and actual.startswith(expected)


def string_ends_with(expected: Any, actual: Any) -> bool:
    return isinstance(expected, str) and isinstance(actual, str) and actual.endswith(expected)


def string_includes_any(expected: Any, actual: Any) -> bool:
    """Actual contains at least one of the expected substrings."""
    if not _is_array(expected) or not isinstance(actual, str):
        return False
    return any(isinstance(s, str) and s in actual for s in expected)


def string_includes_all(expected: Any, actual: Any) -> bool:
    """Actual contains every expected substring."""
    if not _is_array(expected) or not isinstance(actual, str):
        return False
    return all(isinstance(s, str) and s in actual for s in expected)


def string_regex(expected: Any, actual: Any) -> bool:
    """Regex search; an invalid pattern is a non-match, never an error."""
    if not isinstance(expected, str) or not isinstance(actual, str):
        return False
    try:
        return re.search(expected, actual) is not None
    except re.error:
        return False


# =============================================================================
# Boolean / null
# =============================================================================


def bool_equals(expected: Any, actual: Any) -> bool:
    return _to_bool(expected) == _to_bool(actual)


def is_null(expected: Any, actual: Any) -> bool:
    """Expected True: actual must be missing/None. Expected False: must be present."""
    return _to_bool(expected) == (actual is None)


# =============================================================================
# Numeric family
# =============================================================================


def _numeric(compare: Callable[[int | float, int | float], bool]) -> OperatorFn:
    """Build a numeric operator: parse both sides, then compare(actual, expected)."""

    def _op(expected: Any, actual: Any) -> bool:
        exp_n = _to_number(expected)
        act_n = _to_number(actual)
        if exp_n is None or act_n is None:
            return False
        return compare(act_n, exp_n)

    return _op


# =============================================================================
# Array family
# =============================================================================


def _same_value(a: Any, b: Any) -> bool:
    """Element equality where booleans never equal numbers (True != 1)."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


def _has_element(items: Sequence[Any], value: Any) -> bool:
    return any(_same_value(value, item) for item in items)


def array_contains(expected: Any, actual: Any) -> bool:
    """Every expected element is present in actual (AND)."""
    if not _is_array(expected) or not _is_array(actual):
        return False
    return all(_has_element(actual, value) for value in expected)


def array_contains_any(expected: Any, actual: Any) -> bool:
    """At least one expected element is present in actual (OR)."""
    if not _is_array(expected) or not _is_array(actual):
        return False
    return any(_has_element(actual, value) for value in expected)


def array_not_contains(expected: Any, actual: Any) -> bool:
    """Not every expected element is present in actual (negation of ArrayContains)."""
    if not _is_array(expected) or not _is_array(actual):
        return False
    return not all(_has_element(actual, value) for value in expected)


def array_equals(expected: Any, actual: Any) -> bool:
    """Same length, same order, elementwise equal."""
    if not _is_array(expected) or not _is_array(actual):
        return False
    return len(expected) == len(actual) and all(_same_value(e, a) for e, a in zip(expected, actual))


def _array_length(compare: Callable[[int, int | float], bool]) -> OperatorFn:
    """Build a length operator: compare(len(actual), expected)."""

    def _op(expected: Any, actual: Any) -> bool:
        if not _is_array(actual):
            return False
        if isinstance(expected, bool) or not isinstance(expected, (int, float)):
            return False
        return compare(len(actual), expected)

    return _op


# =============================================================================
# Date family
# =============================================================================


def _dates(compare: Callable[[datetime, datetime], bool]) -> OperatorFn:
    """Build a date operator: parse both sides, then compare(actual, expected)."""

    def _op(expected: Any, actual: Any) -> bool:
        exp_d = _to_datetime(expected)
        act_d = _to_datetime(actual)
        if exp_d is None or act_d is None:
            return False
        return compare(act_d, exp_d)

    return _op


def date_in_range(expected: Any, actual: Any) -> bool:
    """Actual lies within [start, end], both ends inclusive."""
    if not _is_array(expected) or len(expected) != 2:
        return False
    act_d = _to_datetime(actual)
    start = _to_datetime(expected[0])
    end = _to_datetime(expected[1])
    if act_d is None or start is None or end is None:
        return False
    return start <= act_d <= end


# =============================================================================
# Network family
# =============================================================================


def _ip_match_one(expected: Any, actual: Any) -> bool:
    address = _to_ip(actual)
    if address is None or not isinstance(expected, str):
        return False
    if "/" not in expected:
        return address == _to_ip(expected)
    network = _to_network(expected)
    return network is not None and _in_network(address, network)


def ip_match(expected: Any, actual: Any) -> bool:
    """Bare address: exact match. CIDR: masked-prefix match. Lists: any."""
    return _any_of(expected, _ip_match_one, actual)


def not_ip_match(expected: Any, actual: Any) -> bool:
    """Actual is outside the CIDR range(s). Bare addresses are not accepted."""
    address = _to_ip(actual)
    if address is None:
        return False
    ranges = list(expected) if _is_array(expected) else [expected]
    networks = [_to_network(r) for r in ranges]
    if not networks or any(n is None for n in networks):
        return False
    return not any(_in_network(address, n) for n in networks if n is not None)


def ip_equals(expected: Any, actual: Any) -> bool:
    exp_ip = _to_ip(expected)
    return exp_ip is not None and exp_ip == _to_ip(actual)


# =============================================================================
# Registry
# =============================================================================

OPERATORS: Mapping[ConditionOperator, OperatorFn] = MappingProxyType(
    {
        ConditionOperator.STRING_EQUALS: string_equals,
        ConditionOperator.STRING_NOT_EQUALS: string_not_equals,
        ConditionOperator.STRING_LIKE: string_like,
        ConditionOperator.STRING_CONTAINS: string_contains,
        ConditionOperator.STRING_STARTS_WITH: string_starts_with,
        ConditionOperator.STRING_ENDS_WITH: string_ends_with,
        ConditionOperator.STRING_INCLUDES_ANY: string_includes_any,
        ConditionOperator.STRING_INCLUDES_ALL: string_includes_all,
        ConditionOperator.STRING_REGEX: string_regex,
        ConditionOperator.BOOL: bool_equals,
        ConditionOperator.NUMERIC_EQUALS: _numeric(lambda a, e: a == e),
        ConditionOperator.NUMERIC_NOT_EQUALS: _numeric(lambda a, e: a != e),
        ConditionOperator.NUMERIC_LESS_THAN: _numeric(lambda a, e: a < e),
        ConditionOperator.NUMERIC_LESS_THAN_EQUALS: _numeric(lambda a, e: a <= e),
        ConditionOperator.NUMERIC_GREATER_THAN: _numeric(lambda a, e: a > e),
        ConditionOperator.NUMERIC_GREATER_THAN_EQUALS: _numeric(lambda a, e: a >= e),
        ConditionOperator.ARRAY_CONTAINS: array_contains,
        ConditionOperator.ARRAY_NOT_CONTAINS: array_not_contains,
        ConditionOperator.ARRAY_CONTAINS_ANY: array_contains_any,
        ConditionOperator.ARRAY_EQUALS: array_equals,
        ConditionOperator.ARRAY_LENGTH_EQUALS: _array_length(lambda n, e: n == e),
        ConditionOperator.ARRAY_LENGTH_LESS_THAN: _array_length(lambda n, e: n < e),
        ConditionOperator.ARRAY_LENGTH_GREATER_THAN: _array_length(lambda n, e: n > e),
        ConditionOperator.IP_MATCH: ip_match,
        ConditionOperator.NOT_IP_MATCH: not_ip_match,
        ConditionOperator.IP_EQUALS: ip_equals,
        ConditionOperator.DATE_EQUALS: _dates(lambda a, e: a == e),
        ConditionOperator.DATE_NOT_EQUALS: _dates(lambda a, e: a != e),
        ConditionOperator.DATE_LESS_THAN: _dates(lambda a, e: a < e),
        ConditionOperator.DATE_LESS_THAN_EQUALS: _dates(lambda a, e: a <= e),
        ConditionOperator.DATE_GREATER_THAN: _dates(lambda a, e: a > e),
        ConditionOperator.DATE_GREATER_THAN_EQUALS: _dates(lambda a, e: a >= e),
        ConditionOperator.DATE_IN_RANGE: date_in_range,
        ConditionOperator.IS_NULL: is_null,
    }
)

_BY_NAME: Mapping[str, ConditionOperator] = {op.value: op for op in ConditionOperator}


def get_operator(name: str) -> ConditionOperator | None:
    """Look up an operator by its case-sensitive wire name.

    Args:
        name: Operator name as written in the policy (e.g., "StringEquals").

    Returns:
        The ConditionOperator, or None if the name is not registered.
    """
    return _BY_NAME.get(name)


def unknown_operators(names: Iterable[str]) -> list[str]:
    """Return the names that are not registered operators, in input order."""
    return [n for n in names if get_operator(n) is None]


def evaluate_conditions(
    condition: Mapping[str, Mapping[str, Any]] | None,
    lookup: Mapping[str, Any],
    *,
    statement_id: str | None = None,
) -> bool:
    """Evaluate a statement's condition block against the lookup view.

    Every operator name is checked before any comparison runs, so an unknown
    operator is reported regardless of where it sits in the block.

    Args:
        condition: Condition block, or None/empty (vacuously true).
        lookup: Lookup view from EvaluationContext.lookup_view().
        statement_id: Statement id, used in error messages.

    Returns:
        True if every entry of every operator passes.

    Raises:
        UnknownConditionOperatorError: If the block names an unregistered operator.
    """
    if not condition:
        return True
    # Malformed block in a trusted document: fail closed
    if not isinstance(condition, Mapping):
        return False

    resolved: list[tuple[OperatorFn, Mapping[str, Any] | Any]] = []
    for name, entries in condition.items():
        operator = get_operator(name)
        if operator is None:
            raise UnknownConditionOperatorError(name, statement_id)
        resolved.append((OPERATORS[operator], entries))

    for fn, entries in resolved:
        # Malformed operator body in a trusted document: fail closed
        if not isinstance(entries, Mapping):
            return False

        for path, expected_raw in entries.items():
            actual = get_path(lookup, path)
            expected = resolve_value(expected_raw, lookup)
            if not fn(expected, actual):
                return False

    return True
