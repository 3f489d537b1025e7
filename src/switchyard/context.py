"""Dispatch context — the mutable record threaded through a pipeline.

The transport layer creates a ``Context`` per request (or per socket
event) and hands it to ``Route.handle()``. The route binds itself to
``context.route`` and fills in ``context.event`` before any step runs;
steps communicate through the remaining fields.

Steps may also hang their own attributes on the context::

    def load_user(context):
        context.user = users.get(context.params["id"])
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from switchyard.routing.route import Route


class ViewRenderer(Protocol):
    """Renders a named view for a context. Supplied by the application."""

    def __call__(self, name: str, context: "Context", /) -> Any: ...


@dataclass(eq=False)
class Context:
    """Per-dispatch state.

    ``errors`` and ``is_cancelled`` are the two short-circuit signals the
    pipeline inspects before every step.
    """

    path: str
    params: dict[str, Any] = field(default_factory=dict)
    event: str | None = None
    method: str | None = None
    format: str | None = None

    # Set by the route during dispatch
    route: "Route | None" = None

    # Short-circuit signals
    errors: list[Any] = field(default_factory=list)
    is_cancelled: bool = False

    # Captures from unnamed groups (``*``, ``:name*``)
    wildcards: list[str | None] = field(default_factory=list)

    # Free-form per-dispatch storage
    state: dict[str, Any] = field(default_factory=dict)

    # Rendering
    renderer: ViewRenderer | None = None
    view: str | None = None
    body: Any = None

    def cancel(self) -> None:
        """Stop the pipeline before the next step runs."""
        self.is_cancelled = True

    def render(self, name: str | None = None) -> Any:
        """Render *name* (or the route's view) through ``renderer``.

        Stores the view name on ``view`` and the renderer's output on
        ``body``. Without a renderer only the view name is recorded, so
        the transport layer can render it later.
        """
        if name is None:
            name = self.view or (self.route.view if self.route is not None else None)
        if name is None:
            return self.body
        self.view = name
        if self.renderer is not None:
            self.body = self.renderer(name, self)
        return self.body
