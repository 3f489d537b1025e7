"""Invoke helpers — classify and call pipeline steps uniformly.

A step is any callable. Four shapes are supported:

- ``def step(context)`` — synchronous; the pipeline advances as soon as
  it returns.
- ``def step(context, next)`` — continuation-passing; the pipeline waits
  until ``next()`` (or ``next(error)``) is called.
- ``async def step(context)`` — awaited by the async pipeline only.
- ``async def step(context, next)`` — awaited, then the async pipeline
  waits for ``next()`` like any continuation step.

The shape of a plain callable is read from its signature: parameters with
defaults are not counted, so ``def step(context, extra=None)`` is
synchronous. Callables whose signature can't be inspected, or that
should be treated differently, can be wrapped explicitly with
``sync_step`` or ``continuation_step`` so the check lives in exactly one
place.

Usage::

    from switchyard._internal.invoke import classify

    kind = classify(step)
"""

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any

from switchyard._internal.types import Handler


class StepKind(Enum):
    SYNC = "sync"
    CONTINUATION = "continuation"
    COROUTINE = "coroutine"
    ASYNC_CONTINUATION = "async_continuation"


@dataclass(frozen=True, slots=True)
class Step:
    """A callable with an explicit, declared shape."""

    fn: Handler
    kind: StepKind

    def __call__(self, *args: Any) -> Any:
        return self.fn(*args)


def sync_step(fn: Handler) -> Step:
    """Mark *fn* as synchronous: called with the context only."""
    return Step(fn, StepKind.SYNC)


def continuation_step(fn: Handler) -> Step:
    """Mark *fn* as continuation-passing: called with ``(context, next)``."""
    return Step(fn, StepKind.CONTINUATION)


def classify(fn: Handler) -> StepKind:
    """Return the shape of *fn*.

    Explicit ``Step`` wrappers win. Otherwise a callable with two or more
    required positional parameters takes a continuation, and an
    ``async def`` is awaited; an ``async def step(context, next)`` is both.
    Anything else is synchronous.
    """
    if isinstance(fn, Step):
        return fn.kind
    is_coroutine = inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(
        getattr(fn, "__call__", None)
    )
    takes_next = _positional_arity(fn) >= 2
    if is_coroutine:
        return StepKind.ASYNC_CONTINUATION if takes_next else StepKind.COROUTINE
    if takes_next:
        return StepKind.CONTINUATION
    return StepKind.SYNC


def _positional_arity(fn: Handler) -> int:
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        # Builtins without metadata take the context only
        return 1
    positional = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    )
    return sum(
        1
        for p in signature.parameters.values()
        if p.kind in positional and p.default is inspect.Parameter.empty
    )
