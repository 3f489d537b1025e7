"""Test helpers for switchyard routes.

Provides a spy step and a synchronous dispatch helper that captures what
``done`` received::

    from switchyard.testing import Recorder, run

    calls = Recorder()
    route.enter(calls.step("enter")).on("request", calls.step("request"))

    result = run(route, Context(path="/"))
    assert result.handled
    assert calls.names == ["enter", "request"]
"""

from dataclasses import dataclass, field
from typing import Any

from switchyard._internal.types import Handler, Outcome
from switchyard.context import Context
from switchyard.routing.route import Route


@dataclass(slots=True)
class DispatchResult:
    """What a synchronous ``Route.handle()`` call produced."""

    handled: bool
    outcome: Outcome = None
    done_calls: int = 0
    context: Context | None = None

    @property
    def completed(self) -> bool:
        """``done`` has been called (the run didn't suspend)."""
        return self.done_calls > 0

    @property
    def ok(self) -> bool:
        return self.completed and self.outcome is None


@dataclass(slots=True)
class Recorder:
    """Collects the order in which spy steps run."""

    names: list[str] = field(default_factory=list)

    def step(self, name: str, effect: Handler | None = None) -> Handler:
        """Return a synchronous step that records *name*, then runs *effect*."""

        def spy(context: Any) -> None:
            self.names.append(name)
            if effect is not None:
                effect(context)

        spy.__name__ = f"spy_{name}"
        return spy

    def continuation(self, name: str, error: Any = None) -> Handler:
        """Return a continuation step that records *name* and calls ``next(error)``."""

        def spy(context: Any, next_: Any) -> None:
            self.names.append(name)
            next_(error)

        spy.__name__ = f"spy_{name}"
        return spy

    def __contains__(self, name: object) -> bool:
        return name in self.names


def run(route: Route, context: Context) -> DispatchResult:
    """Dispatch *context* through *route* and capture the ``done`` call.

    Exceptions raised by steps propagate, as they do from ``handle()``.
    """
    result = DispatchResult(handled=False, context=context)

    def done(outcome: Outcome = None) -> None:
        result.done_calls += 1
        result.outcome = outcome

    result.handled = route.handle(context, done)
    return result
