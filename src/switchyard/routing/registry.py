"""Route registry — ordered, name-addressable collection of routes.

Each registry owns its routes, its mixins, and its observers, so several
registries can coexist without seeing each other's definitions::

    routes = Registry()
    routes.use(lambda route: route.use(log_request))

    routes.define("/", "index")
    routes.define("posts.index", "/posts")
    routes.define("posts.create", "/posts", {"method": "POST"})
    routes.define("posts.update", "/posts/:id", "PUT")

    routes("index")          # lookup by name
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any, TypeAlias

from switchyard.config import RouteConfig
from switchyard.routing.route import Route

logger = logging.getLogger("switchyard.routing")

Mixin: TypeAlias = Callable[[Route], Any]
Listener: TypeAlias = Callable[[str, Route], Any]

DEFINE = "define"


class Registry:
    """Routes in definition order plus a name index over the same objects.

    Usage::

        registry = Registry()
        route = registry.define("/users/:id", "users.show")
        registry.get("users.show") is route   # True
    """

    __slots__ = ("_by_name", "_listeners", "_mixins", "_routes", "config")

    def __init__(self, config: RouteConfig | None = None) -> None:
        self.config = config or RouteConfig()
        self._routes: list[Route] = []
        self._by_name: dict[str, Route] = {}
        self._mixins: list[Mixin] = []
        self._listeners: list[Listener] = [self._apply_mixins]

    def __repr__(self) -> str:
        return f"<Registry routes={len(self._routes)}>"

    # -- Collection protocol --

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(list(self._routes))

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __getitem__(self, key: int | str) -> Route:
        if isinstance(key, int):
            return self._routes[key]
        return self._by_name[key]

    @property
    def routes(self) -> list[Route]:
        """All routes in definition order."""
        return list(self._routes)

    # -- Definition --

    def define(
        self,
        name: Any,
        path: str | None = None,
        options: Mapping[str, Any] | str | None = None,
        **overrides: Any,
    ) -> Route | None:
        """Find or define a route.

        Examples::

            define("/posts", "posts.index")
            define("posts.index", "/posts")
            define("/posts", "posts.create", "POST")
            define("/posts", "posts.create", {"method": "POST"})
            define("posts.index")               # lookup only

        A first argument starting with ``/`` is the path and the second is
        the name. A lone name is a pure lookup and returns ``None`` if
        nothing is registered under it. Defining an existing name returns
        the existing route unchanged. A lone mapping is not supported and
        returns ``None``.

        *options* is either a method string or a mapping with ``method``,
        ``sensitive``, and ``strict``; keyword *overrides* win over it.
        """
        if isinstance(name, Mapping):
            logger.warning("Route definition from a single mapping is not supported: %r", name)
            return None

        if path is None:
            return self._by_name.get(name)

        if name.startswith("/"):
            name, path = path, name

        existing = self._by_name.get(name)
        if existing is not None:
            if existing.path != path:
                logger.debug(
                    "Route %r already defined for %r; ignoring %r", name, existing.path, path
                )
            return existing

        if isinstance(options, str):
            settings: dict[str, Any] = {"method": options}
        else:
            settings = dict(options or {})
        settings.update(overrides)

        route = Route(
            name,
            path,
            method=settings.get("method"),
            sensitive=settings.get("sensitive"),
            strict=settings.get("strict"),
            config=self.config,
        )
        self._routes.append(route)
        self._by_name[route.id] = route
        logger.debug("Defined route %r (%s %s)", route.id, route.method, route.path)
        self._emit(DEFINE, route)
        return route

    __call__ = define

    def get(self, name: str) -> Route | None:
        return self._by_name.get(name)

    def match(self, path: str, method: str | None = None) -> Route | None:
        """Return the first route, in definition order, that matches *path*.

        Probes without touching any context; dispatch still goes through
        ``Route.handle()``.
        """
        for route in self._routes:
            if method is not None and route.method.upper() != method.upper():
                continue
            if route.matcher.match(path, {}):
                return route
        return None

    # -- Mixins and observers --

    def use(self, mixin: Mixin) -> "Registry":
        """Run *mixin* on every route defined from now on."""
        self._mixins.append(mixin)
        return self

    def subscribe(self, listener: Listener) -> Listener:
        """Call ``listener(event, route)`` on every definition.

        Returns *listener*, so this works as a decorator.
        """
        self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _emit(self, event: str, route: Route) -> None:
        for listener in list(self._listeners):
            listener(event, route)

    def _apply_mixins(self, event: str, route: Route) -> None:
        if event != DEFINE:
            return
        for mixin in list(self._mixins):
            mixin(route)
        if self._mixins:
            logger.debug("Applied %d mixin(s) to route %r", len(self._mixins), route.id)

    def clear(self) -> None:
        """Forget every route and mixin. Observers stay subscribed."""
        self._mixins.clear()
        self._routes.clear()
        self._by_name.clear()
