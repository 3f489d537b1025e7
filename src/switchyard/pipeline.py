"""Step sequencer — run an ordered list of steps against a context.

Steps run strictly one at a time. Before each step (and once more after
the last) the sequencer checks three stop signals, in order:

1. an error passed to ``next(error)`` by the previous step
2. a non-empty ``context.errors``
3. ``context.is_cancelled``

The first one found ends the run: ``done`` receives the error, the
errors list, or a ``Cancelled`` instance. A run that exhausts its steps
calls ``done()`` with no arguments. Either way ``done`` is called
exactly once.

Exceptions raised by a step are not caught; they propagate to whoever
called ``run_series`` (or resumed it through ``next``).

There is no timeout. A continuation step that never calls ``next``
leaves the run suspended forever.
"""

import inspect
import logging
from collections.abc import Sequence
from typing import Any

import anyio

from switchyard._internal.invoke import StepKind, classify
from switchyard._internal.types import Done, Handler, Next, Outcome
from switchyard.errors import Cancelled, ConfigurationError, ContinuationError

logger = logging.getLogger("switchyard.pipeline")


def stop_reason(context: Any, error: Any = None) -> Outcome:
    """Return why the run must stop, or ``None`` to keep going."""
    if error:
        return error
    errors = getattr(context, "errors", None)
    if errors:
        return errors
    if getattr(context, "is_cancelled", False):
        return Cancelled()
    return None


class _Series:
    """One run of the sequencer.

    Driven by a loop rather than recursion: a step that continues
    synchronously only flags the loop to go round again, so long chains
    of synchronous steps don't grow the stack.
    """

    __slots__ = (
        "_context",
        "_done",
        "_error",
        "_finished",
        "_index",
        "_pending",
        "_running",
        "_steps",
    )

    def __init__(self, steps: Sequence[Handler], context: Any, done: Done) -> None:
        self._steps = steps
        self._context = context
        self._done = done
        self._index = 0
        self._error: Any = None
        self._pending = False
        self._running = False
        self._finished = False

    def resume(self, error: Any = None) -> None:
        self._error = error
        self._pending = True
        if self._running:
            return

        self._running = True
        try:
            while self._pending and not self._finished:
                self._pending = False
                self._advance()
        finally:
            self._running = False

    def _advance(self) -> None:
        reason = stop_reason(self._context, self._error)
        if reason is not None:
            logger.debug("Pipeline stopped after %d step(s): %r", self._index, reason)
            self._finish(reason)
            return

        if self._index >= len(self._steps):
            self._finish(None)
            return

        fn = self._steps[self._index]
        self._index += 1
        kind = classify(fn)

        if kind is StepKind.CONTINUATION:
            fn(self._context, self._continuation())
        elif kind in (StepKind.COROUTINE, StepKind.ASYNC_CONTINUATION):
            msg = (
                f"Step {fn!r} is a coroutine function. "
                "Dispatch with Route.handle_async() to run async steps."
            )
            raise ConfigurationError(msg)
        else:
            fn(self._context)
            self._error = None
            self._pending = True

    def _continuation(self) -> Next:
        called = False

        def next_(error: Any = None) -> None:
            nonlocal called
            if called:
                msg = "next() was called more than once by the same step"
                raise ContinuationError(msg)
            called = True
            self.resume(error)

        return next_

    def _finish(self, outcome: Outcome) -> None:
        self._finished = True
        if outcome is None:
            self._done()
        else:
            self._done(outcome)


def run_series(steps: Sequence[Handler], context: Any, done: Done) -> None:
    """Run *steps* against *context*, then call *done*.

    Returns as soon as the run finishes or suspends on a continuation
    step; in the latter case *done* is called later, from whichever
    ``next`` call completes the run.
    """
    _Series(steps, context, done).resume()


async def arun_series(steps: Sequence[Handler], context: Any) -> Outcome:
    """Run *steps* against *context* and return the outcome.

    Same stop rules as ``run_series``. ``async def`` steps are awaited;
    continuation steps may call ``next`` from a later callback on the
    running event loop. An ``async def step(context, next)`` is awaited
    first, then the run waits for its ``next`` call.
    """
    error: Any = None
    for index, fn in enumerate(steps):
        reason = stop_reason(context, error)
        if reason is not None:
            logger.debug("Pipeline stopped after %d step(s): %r", index, reason)
            return reason

        kind = classify(fn)
        if kind in (StepKind.CONTINUATION, StepKind.ASYNC_CONTINUATION):
            error = await _wait_for_next(fn, context)
        elif kind is StepKind.COROUTINE:
            await fn(context)
            error = None
        else:
            fn(context)
            error = None

    return stop_reason(context, error)


async def _wait_for_next(fn: Handler, context: Any) -> Any:
    resumed = anyio.Event()
    received: list[Any] = []

    def next_(error: Any = None) -> None:
        if received:
            msg = "next() was called more than once by the same step"
            raise ContinuationError(msg)
        received.append(error)
        resumed.set()

    result = fn(context, next_)
    if inspect.isawaitable(result):
        await result
    await resumed.wait()
    return received[0]
