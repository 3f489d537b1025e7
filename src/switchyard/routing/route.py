"""Route — a named binding of a method and path template to lifecycle steps.

Routes are configured with chained builder calls, then dispatched::

    route = registry.define("/posts/:id", "posts.show")
    (route
        .param("id", "integer").validate("gte", 1)
        .route
        .use(load_session)
        .enter(load_post)
        .on("request", show_post)
        .format(lambda context: serialize(context)))

    route.handle(Context(path="/posts/7"), done)

``param()`` moves the configuration focus to the declared parameter:
``validator()`` and ``validate()`` then attach to it until the next
``param()`` call or until ``.route`` hands the focus back.
"""

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from switchyard._internal.types import Done, Handler, Outcome, Validator
from switchyard.config import RouteConfig
from switchyard.errors import ConfigurationError
from switchyard.pipeline import arun_series, run_series
from switchyard.routing.matcher import Key, PathMatcher
from switchyard.routing.params import MISSING, Param, apply_params, run_validators
from switchyard.validation.rules import rule

if TYPE_CHECKING:
    import re

    from switchyard.context import Context

logger = logging.getLogger("switchyard.routing")

WILDCARD = "*"


class Route:
    """A named, addressable route definition.

    Usually created through ``Registry.define()``, which guarantees the
    name is unique. Builder methods return the route (or the current
    ``ParamFocus``) so calls chain.
    """

    __slots__ = (
        "_name",
        "accepts",
        "actions",
        "config",
        "formats",
        "matcher",
        "method",
        "middlewares",
        "params",
        "path",
        "validators",
        "view",
    )

    def __init__(
        self,
        name: str,
        path: str,
        *,
        method: str | None = None,
        sensitive: bool | None = None,
        strict: bool | None = None,
        config: RouteConfig | None = None,
    ) -> None:
        config = config or RouteConfig()
        self.config = config
        self._name = name
        self.path = path
        self.method = method or config.default_method
        self.matcher = PathMatcher.compile(
            path,
            sensitive=config.sensitive if sensitive is None else sensitive,
            strict=config.strict if strict is None else strict,
            decode=config.decode_params,
        )
        self.params: dict[str, Param] = {}
        self.accepts: list[str] = []
        self.formats: dict[str, Handler] = {}
        self.middlewares: list[Handler] = []
        self.validators: list[Validator] = []
        self.actions: dict[str, list[Handler]] = {
            event: [] for event in config.lifecycle_events
        }
        self.view: str | None = None

    def __repr__(self) -> str:
        return f"Route({self._name!r}, {self.path!r}, method={self.method!r})"

    # -- Identity --

    @property
    def name(self) -> str:
        return self._name

    @property
    def id(self) -> str:
        return self._name

    @property
    def keys(self) -> tuple[Key, ...]:
        return self.matcher.keys

    @property
    def regexp(self) -> "re.Pattern[str]":
        return self.matcher.pattern

    # -- Builder --

    @property
    def route(self) -> "Route":
        """Focus on the route itself (the end of a ``param()`` chain)."""
        return self

    def param(
        self, name: str, type_name: str = "string", *, default: Any = MISSING, **options: Any
    ) -> "ParamFocus":
        """Declare how to cast the path or query parameter *name*.

        Raises ``UnknownParamTypeError`` for an unregistered *type_name*.
        """
        param = Param.declare(name, type_name, default=default, **options)
        self.params[name] = param
        return ParamFocus(self, param)

    def validator(self, fn: Validator) -> "Route":
        """Append a validator run against the context after casting."""
        self.validators.append(fn)
        return self

    def validate(self, operator: str, expected: Any = None) -> "Route":
        """Operator rules compare a param value, so they need a param focus.

        Raises ``ConfigurationError``; use ``param(name).validate(...)``, or
        ``validator(fn)`` for a check against the whole context.
        """
        msg = (
            f"validate({operator!r}) on route {self._name!r} has no param to check. "
            "Call route.param(name).validate(...) instead."
        )
        raise ConfigurationError(msg)

    def set_method(self, method: str) -> "Route":
        """Set the accepted method. Stored as given; last call wins."""
        self.method = method
        return self

    def use(self, *fns: Handler) -> "Route":
        """Append middleware, run on every dispatch before any action.

        A middleware taking ``(context, next)`` is asynchronous and must
        call ``next()`` (or ``next(error)``) exactly once.
        """
        self.middlewares.extend(fns)
        return self

    def accept(self, *tokens: str) -> "Route":
        """Restrict accepted content types. No tokens means accept any."""
        self.accepts.extend(tokens)
        return self

    def format(
        self, token: str | Handler, fn: Handler | None = None
    ) -> "Route | Callable[[Handler], Handler]":
        """Register a response handler for a content type.

        ``format(fn)`` sets the wildcard handler, which runs last in every
        dispatch. ``format("json", fn)`` registers a specific handler and
        adds ``"json"`` to ``accepts``. ``format("json")`` returns a
        decorator doing the same.
        """
        if callable(token):
            self.formats[WILDCARD] = token
            return self

        if fn is None:

            def decorator(handler: Handler) -> Handler:
                self.format(token, handler)
                return handler

            return decorator

        self.formats[token] = fn
        self.accepts.append(token)
        return self

    def action(self, name: str, *fns: Handler) -> "Route":
        """Append steps to the action list for event *name*."""
        self.actions.setdefault(name, []).extend(fns)
        return self

    on = action

    def enter(self, *fns: Handler) -> "Route":
        return self.action("enter", *fns)

    def exit(self, *fns: Handler) -> "Route":
        return self.action("exit", *fns)

    def render(self, name: str) -> "Route":
        """Render the view *name* for ``request`` events.

        Registers an ``html`` format handler that renders *name*, and a
        ``request`` action that calls ``context.render()``.
        """
        self.view = name

        def render_view(context: "Context") -> None:
            context.render(name)

        def render_request(context: "Context") -> None:
            context.render()

        self.format("html", render_view)
        return self.on("request", render_request)

    def negotiate(self, token: str | None) -> Handler | None:
        """Return the format handler for *token*.

        A specific handler wins over the wildcard. Returns ``None`` when
        *token* isn't accepted or nothing is registered.
        """
        if token is not None and self.accepts and token not in self.accepts:
            return None
        if token is not None and token in self.formats:
            return self.formats[token]
        return self.formats.get(WILDCARD)

    # -- Dispatch --

    def match(self, context: "Context") -> bool:
        """Match the context's path (and method, if set) against this route.

        Captured values are merged into ``context.params`` without
        overwriting existing keys.
        """
        method = getattr(context, "method", None)
        if method is not None and method.upper() != self.method.upper():
            return False
        return self.matcher.match(context.path, context.params, getattr(context, "wildcards", None))

    def steps(self, event: str) -> list[Handler]:
        """Assemble the ordered steps for *event*.

        Middleware, then ``enter`` actions, then the event's actions, then
        the wildcard format handler if one is registered.
        """
        wildcard = self.formats.get(WILDCARD)
        return [
            *self.middlewares,
            *self.actions.get("enter", ()),
            *self.actions.get(event, ()),
            *((wildcard,) if wildcard is not None else ()),
        ]

    def _prepare(self, context: "Context") -> Sequence[Handler] | None:
        if not self.match(context):
            return None
        apply_params(self, context)
        context.event = context.event or self.config.default_event
        context.route = self
        run_validators(self, context)
        logger.debug("Route %r matched %r (event=%s)", self._name, context.path, context.event)
        return self.steps(context.event)

    def handle(self, context: "Context", done: Done) -> bool:
        """Dispatch *context* through this route.

        Returns ``False`` (after calling ``done()``) if the route doesn't
        match, so the caller can try the next route. Otherwise returns
        ``True``; *done* is called exactly once when the steps finish, are
        cancelled, or report an error through ``next``.

        ``CastingError`` and exceptions raised by steps propagate.
        """
        steps = self._prepare(context)
        if steps is None:
            done()
            return False
        run_series(steps, context, done)
        return True

    dispatch = handle

    async def handle_async(self, context: "Context") -> tuple[bool, Outcome]:
        """Awaitable form of ``handle()``.

        Returns ``(handled, outcome)``. ``async def`` steps are awaited;
        continuation steps may call ``next`` from a later loop callback.
        """
        steps = self._prepare(context)
        if steps is None:
            return False, None
        return True, await arun_series(steps, context)


class ParamFocus:
    """Configuration focus on a declared parameter.

    ``validator()`` and ``validate()`` attach to the parameter; every other
    builder call is forwarded to the route and keeps this focus, so
    chains read top to bottom::

        route.param("likes", "integer").validate("gte", 0).use(audit)
    """

    __slots__ = ("_route", "param")

    def __init__(self, route: Route, param: Param) -> None:
        self._route = route
        self.param = param

    def __repr__(self) -> str:
        return f"ParamFocus({self._route.name!r}, {self.param.name!r})"

    @property
    def route(self) -> Route:
        """Hand the focus back to the route."""
        return self._route

    def validator(self, fn: Validator) -> "ParamFocus":
        self.param.validators.append(fn)
        return self

    def validate(self, operator: str, expected: Any = None) -> "ParamFocus":
        return self.validator(rule(operator, expected))

    def param(
        self, name: str, type_name: str = "string", *, default: Any = MISSING, **options: Any
    ) -> "ParamFocus":
        return self._route.param(name, type_name, default=default, **options)

    def set_method(self, method: str) -> "ParamFocus":
        self._route.set_method(method)
        return self

    def use(self, *fns: Handler) -> "ParamFocus":
        self._route.use(*fns)
        return self

    def accept(self, *tokens: str) -> "ParamFocus":
        self._route.accept(*tokens)
        return self

    def format(self, token: str | Handler, fn: Handler | None = None) -> "ParamFocus":
        if not callable(token) and fn is None:
            msg = "format(token) as a decorator is only available on the route"
            raise TypeError(msg)
        self._route.format(token, fn)
        return self

    def action(self, name: str, *fns: Handler) -> "ParamFocus":
        self._route.action(name, *fns)
        return self

    on = action

    def enter(self, *fns: Handler) -> "ParamFocus":
        return self.action("enter", *fns)

    def exit(self, *fns: Handler) -> "ParamFocus":
        return self.action("exit", *fns)

    def render(self, name: str) -> "ParamFocus":
        self._route.render(name)
        return self

    def handle(self, context: "Context", done: Done) -> bool:
        return self._route.handle(context, done)

    dispatch = handle

    async def handle_async(self, context: "Context") -> tuple[bool, Outcome]:
        return await self._route.handle_async(context)
