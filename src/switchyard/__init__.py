"""Switchyard — route matching and lifecycle dispatch.

Maps a path (and optionally a method) to a named route, casts its
params, and runs the route's middleware, ``enter`` actions, event
actions, and format handler against a mutable context.

Basic usage::

    from switchyard import Context, Registry

    routes = Registry()

    routes.define("/posts/:id", "posts.show") \\
        .param("id", "integer") \\
        .route \\
        .on("request", lambda context: print(context.params["id"]))

    context = Context(path="/posts/42")
    routes("posts.show").handle(context, lambda outcome=None: None)

Async dispatch::

    handled, outcome = await route.handle_async(context)
"""

__version__ = "0.1.0"
__all__ = [
    "Cancelled",
    "CastingError",
    "ConfigurationError",
    "ContinuationError",
    "Context",
    "ParamFocus",
    "Registry",
    "Route",
    "RouteConfig",
    "SwitchyardError",
    "UnknownParamTypeError",
    "ValidationError",
    "continuation_step",
    "sync_step",
]


# public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "Cancelled": "switchyard.errors",
    "CastingError": "switchyard.errors",
    "ConfigurationError": "switchyard.errors",
    "ContinuationError": "switchyard.errors",
    "Context": "switchyard.context",
    "ParamFocus": "switchyard.routing.route",
    "Registry": "switchyard.routing.registry",
    "Route": "switchyard.routing.route",
    "RouteConfig": "switchyard.config",
    "SwitchyardError": "switchyard.errors",
    "UnknownParamTypeError": "switchyard.errors",
    "ValidationError": "switchyard.errors",
    "continuation_step": "switchyard._internal.invoke",
    "sync_step": "switchyard._internal.invoke",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import switchyard`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    from importlib import import_module

    return getattr(import_module(module_name), name)
