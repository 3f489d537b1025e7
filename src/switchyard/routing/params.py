"""Route parameter declarations and type casting.

Built-in converters for declared parameters like
``route.param("likes", "integer")``. Extra types can be registered
with ``register_converter``.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any, TypeAlias

from switchyard._internal.types import Validator
from switchyard.errors import CastingError, UnknownParamTypeError, ValidationError

if TYPE_CHECKING:
    from switchyard.context import Context
    from switchyard.routing.route import Route

logger = logging.getLogger("switchyard.routing")

Converter: TypeAlias = Callable[[Any], Any]

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off", ""})

# Unset sentinel for Param.default
MISSING: Any = object()


def to_string(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def to_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("booleans are not integers")
    if isinstance(value, int):
        return value
    return int(str(value).strip(), 10)


def to_number(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("booleans are not numbers")
    if isinstance(value, float):
        return value
    return float(value)


def to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def to_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def to_array(value: Any) -> list[str]:
    if isinstance(value, list):
        return value
    text = str(value)
    return [part.strip() for part in text.split(",")] if text else []


# type name -> converter. Aliases share a converter.
CONVERTERS: dict[str, Converter] = {
    "string": to_string,
    "str": to_string,
    "integer": to_integer,
    "int": to_integer,
    "number": to_number,
    "float": to_number,
    "boolean": to_boolean,
    "bool": to_boolean,
    "date": to_date,
    "array": to_array,
}


def register_converter(type_name: str, converter: Converter) -> None:
    """Register (or replace) the converter for *type_name*."""
    CONVERTERS[type_name] = converter


def resolve_converter(type_name: str) -> Converter:
    """Return the converter for *type_name*.

    Raises ``UnknownParamTypeError`` if nothing is registered under it.
    """
    try:
        return CONVERTERS[type_name]
    except KeyError:
        raise UnknownParamTypeError(type_name, list(CONVERTERS)) from None


@dataclass(slots=True)
class Param:
    """A declared route parameter."""

    name: str
    type: str = "string"
    cast_fn: Converter = to_string
    default: Any = MISSING
    options: dict[str, Any] = field(default_factory=dict)
    validators: list[Validator] = field(default_factory=list)

    @classmethod
    def declare(
        cls, name: str, type_name: str = "string", *, default: Any = MISSING, **options: Any
    ) -> "Param":
        return cls(name, type_name, resolve_converter(type_name), default, options)

    def cast(self, value: Any) -> Any:
        """Cast a raw value. Raises ``CastingError`` on failure."""
        try:
            return self.cast_fn(value)
        except (TypeError, ValueError) as exc:
            raise CastingError(self.name, value, self.type) from exc

    def validate(self, value: Any) -> list[ValidationError]:
        failures: list[ValidationError] = []
        for validator in self.validators:
            message = validator(value)
            if message is not None:
                failures.append(ValidationError(self.name, message))
        return failures


def apply_params(route: "Route", context: "Context") -> None:
    """Default and cast the route's declared params in place.

    Only declared names are touched; everything else in
    ``context.params`` passes through. Casting errors propagate.
    """
    values = context.params
    for name, param in route.params.items():
        if name not in values:
            if param.default is MISSING:
                continue
            values[name] = param.default
        values[name] = param.cast(values[name])


def run_validators(route: "Route", context: "Context") -> None:
    """Run param validators on their cast values, then route validators.

    Failures are appended to ``context.errors`` as ``ValidationError``;
    route-level failures carry an empty field.
    """
    values = context.params
    for name, param in route.params.items():
        if name not in values:
            continue
        failures = param.validate(values[name])
        if failures:
            logger.debug("Route %r param %r failed validation", route.name, name)
            context.errors.extend(failures)

    for validator in route.validators:
        message = validator(context)
        if message is not None:
            context.errors.append(ValidationError("", message))
