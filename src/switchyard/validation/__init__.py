"""Validation rules — small callables that return an error message or None.

Usage::

    from switchyard.validation import gte, required

    route.param("likes", "integer").validator(gte(0))
    route.param("slug").validate("match", r"^[a-z-]+$")

Failures are recorded on ``context.errors`` as ``ValidationError``
entries; the pipeline then stops before its first step.
"""

from switchyard.validation.rules import (
    OPERATORS,
    eq,
    gt,
    gte,
    lt,
    lte,
    matches,
    max_length,
    min_length,
    neq,
    none_of,
    one_of,
    required,
    rule,
)

__all__ = [
    "OPERATORS",
    "eq",
    "gt",
    "gte",
    "lt",
    "lte",
    "matches",
    "max_length",
    "min_length",
    "neq",
    "none_of",
    "one_of",
    "required",
    "rule",
]
