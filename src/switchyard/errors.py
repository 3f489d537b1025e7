"""Switchyard exception hierarchy.

Shared across the matcher, parameter model, route, registry, and
pipeline so every module raises and catches the same types.

Only two kinds of failure leave ``Route.handle()`` as exceptions:
``CastingError`` and whatever a step raises synchronously. Everything
else (cancellation, step errors, validation failures) is delivered to
the ``done`` callback.
"""

from dataclasses import dataclass
from typing import Any


class SwitchyardError(Exception):
    """Base for all switchyard-specific errors."""


class ConfigurationError(SwitchyardError):
    """Raised when a route or registry is configured incorrectly.

    Typically raised while the route is being built, before any dispatch.
    """


class UnknownParamTypeError(ConfigurationError, KeyError):
    """A parameter was declared with a type no converter is registered for."""

    def __init__(self, type_name: str, available: list[str]) -> None:
        self.type_name = type_name
        self.available = sorted(available)
        registered = ", ".join(self.available)
        super().__init__(f"unknown param type {type_name!r} (registered: {registered})")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class CastingError(SwitchyardError, ValueError):
    """A declared parameter's raw value could not be cast to its type.

    Propagates out of ``Route.handle()``; it is never caught internally.
    """

    def __init__(self, name: str, value: Any, type_name: str) -> None:
        self.name = name
        self.value = value
        self.type_name = type_name
        super().__init__(f"cannot cast param {name!r} value {value!r} to {type_name}")


@dataclass(frozen=True, slots=True)
class ValidationError(SwitchyardError):
    """A validator rejected a parameter or the route context.

    Recorded into ``context.errors``, not raised.
    """

    field: str
    message: str

    def __str__(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class ContinuationError(SwitchyardError):
    """A continuation step called ``next`` more than once."""


class Cancelled(SwitchyardError):  # noqa: N818
    """Passed to ``done`` when a step sets ``context.is_cancelled``."""

    def __init__(self, detail: str = "pipeline cancelled") -> None:
        super().__init__(detail)
