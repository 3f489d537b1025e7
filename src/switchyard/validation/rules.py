"""Built-in validation rules for route params and contexts.

Each validator is a callable with the signature::

    def rule(value) -> str | None:
        '''Return error message, or None if valid.'''

Parameterized validators are factory functions that return a validator::

    def gte(n) -> Validator:
        def check(value) -> str | None:
            if value < n:
                return f"Must be at least {n}"
            return None
        return check

Rules run after casting, so comparisons see typed values. Custom
validators follow the same protocol — any callable matching
``(value) -> str | None`` works with ``Route.validator()``.
"""

import re
from collections.abc import Callable, Iterable
from typing import Any

from switchyard._internal.types import Validator
from switchyard.errors import ConfigurationError

# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def required(value: Any) -> str | None:
    """Value must be present and non-empty."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return "This field is required"
    return None


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


def eq(expected: Any) -> Validator:
    """Value must equal *expected*."""

    def check(value: Any) -> str | None:
        if value != expected:
            return f"Must equal {expected!r}"
        return None

    return check


def neq(expected: Any) -> Validator:
    """Value must differ from *expected*."""

    def check(value: Any) -> str | None:
        if value == expected:
            return f"Must not equal {expected!r}"
        return None

    return check


def gt(n: Any) -> Validator:
    def check(value: Any) -> str | None:
        if not value > n:
            return f"Must be greater than {n}"
        return None

    return check


def gte(n: Any) -> Validator:
    def check(value: Any) -> str | None:
        if not value >= n:
            return f"Must be at least {n}"
        return None

    return check


def lt(n: Any) -> Validator:
    def check(value: Any) -> str | None:
        if not value < n:
            return f"Must be less than {n}"
        return None

    return check


def lte(n: Any) -> Validator:
    def check(value: Any) -> str | None:
        if not value <= n:
            return f"Must be at most {n}"
        return None

    return check


# ---------------------------------------------------------------------------
# Length
# ---------------------------------------------------------------------------


def max_length(n: int) -> Validator:
    """Value must have at most *n* items or characters."""

    def check(value: Any) -> str | None:
        if len(value) > n:
            return f"Must be at most {n} characters"
        return None

    return check


def min_length(n: int) -> Validator:
    """Value must have at least *n* items or characters."""

    def check(value: Any) -> str | None:
        if len(value) < n:
            return f"Must be at least {n} characters"
        return None

    return check


# ---------------------------------------------------------------------------
# Choice / format
# ---------------------------------------------------------------------------


def one_of(choices: Iterable[Any]) -> Validator:
    """Value must be one of the given choices."""
    allowed = tuple(choices)

    def check(value: Any) -> str | None:
        if value not in allowed:
            options = ", ".join(str(c) for c in allowed)
            return f"Must be one of: {options}"
        return None

    return check


def none_of(choices: Iterable[Any]) -> Validator:
    """Value must not be any of the given choices."""
    denied = tuple(choices)

    def check(value: Any) -> str | None:
        if value in denied:
            return f"Must not be {value!r}"
        return None

    return check


def matches(pattern: str, message: str | None = None) -> Validator:
    """Value must match the given regex pattern."""
    compiled = re.compile(pattern)

    def check(value: Any) -> str | None:
        if not compiled.match(str(value)):
            return message or f"Must match pattern: {pattern}"
        return None

    return check


# operator name -> rule factory, for ``ParamFocus.validate(operator, expected)``
OPERATORS: dict[str, Callable[[Any], Validator]] = {
    "eq": eq,
    "neq": neq,
    "gt": gt,
    "gte": gte,
    "lt": lt,
    "lte": lte,
    "in": one_of,
    "nin": none_of,
    "match": matches,
    "min": min_length,
    "max": max_length,
}


def rule(operator: str, expected: Any = None) -> Validator:
    """Build a validator from an operator name.

    ``"required"`` takes no *expected* value. Unknown operators raise
    ``ConfigurationError``.
    """
    if operator == "required":
        return required
    try:
        factory = OPERATORS[operator]
    except KeyError:
        available = ", ".join(sorted([*OPERATORS, "required"]))
        msg = f"unknown validation operator {operator!r} (available: {available})"
        raise ConfigurationError(msg) from None
    return factory(expected)
