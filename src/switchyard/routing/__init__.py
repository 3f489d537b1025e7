"""Routing — path templates, declared params, routes, and the registry.

Routes are defined and configured during setup, then dispatched with a
mutable ``Context`` per request.
"""

from switchyard.routing.matcher import Key, PathMatcher, compile_path
from switchyard.routing.params import CONVERTERS, Param, register_converter, resolve_converter
from switchyard.routing.registry import Registry
from switchyard.routing.route import ParamFocus, Route

__all__ = [
    "CONVERTERS",
    "Key",
    "Param",
    "ParamFocus",
    "PathMatcher",
    "Registry",
    "Route",
    "compile_path",
    "register_converter",
    "resolve_converter",
]
