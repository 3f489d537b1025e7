"""Shared type aliases used across switchyard modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Pipeline step: ``fn(context)`` or ``fn(context, next)``
Handler: TypeAlias = Callable[..., Any]

# What ``done`` receives: nothing, a step error, the context's errors, or Cancelled
Outcome: TypeAlias = BaseException | list[Any] | Any | None

# The continuation handed to a two-argument step
Next: TypeAlias = Callable[..., None]

# Completion callback, called exactly once per dispatch
Done: TypeAlias = Callable[..., Any]

# Parameter/route validator: returns an error message, or None if valid
Validator: TypeAlias = Callable[[Any], str | None]
