"""Tests for Route.handle() — matching, casting, lifecycle order, short-circuits."""

from typing import Any

import anyio
import pytest

from switchyard.context import Context
from switchyard.errors import Cancelled, CastingError, ValidationError
from switchyard.routing.registry import Registry
from switchyard.testing import Recorder, run


@pytest.fixture
def routes() -> Registry:
    return Registry()


class TestMatching:
    def test_no_match_calls_done_and_returns_false(self, routes: Registry) -> None:
        route = routes.define("/posts", "posts.index")
        calls = Recorder()
        route.use(calls.step("mw"))

        result = run(route, Context(path="/users"))

        assert result.handled is False
        assert result.done_calls == 1
        assert result.outcome is None
        assert calls.names == []

    def test_no_match_leaves_context_unbound(self, routes: Registry) -> None:
        route = routes.define("/posts", "posts.index")
        context = Context(path="/users")

        run(route, context)

        assert context.route is None
        assert context.event is None

    def test_method_mismatch_is_not_handled(self, routes: Registry) -> None:
        route = routes.define("/posts", "posts.create", "POST")
        assert run(route, Context(path="/posts", method="GET")).handled is False
        assert run(route, Context(path="/posts", method="post")).handled is True

    def test_method_unset_matches_any(self, routes: Registry) -> None:
        route = routes.define("/posts", "posts.create", "POST")
        assert run(route, Context(path="/posts")).handled is True

    def test_binds_route_and_event(self, routes: Registry) -> None:
        route = routes.define("/posts", "posts.index")
        seen: dict[str, Any] = {}

        def inspect_context(context: Context) -> None:
            seen["route"] = context.route
            seen["event"] = context.event

        route.use(inspect_context)
        run(route, Context(path="/posts"))

        assert seen == {"route": route, "event": "request"}

    def test_path_params_extracted(self, routes: Registry) -> None:
        route = routes.define("/:username", "users.show")
        context = Context(path="/alice")

        assert run(route, context).ok
        assert context.params == {"username": "alice"}


class TestParams:
    def test_casts_declared_params(self, routes: Registry) -> None:
        params = {"likes": "10", "published": "0"}
        context = Context(path="/posts", params=params)
        route = (
            routes.define("/posts", "posts.index")
            .param("likes", "integer")
            .param("published", "boolean")
        )

        result = run(route.route, context)

        assert result.ok
        assert params["likes"] == 10
        assert params["published"] is False

    def test_casts_path_captures(self, routes: Registry) -> None:
        route = routes.define("/posts/:id", "posts.show").param("id", "integer").route
        context = Context(path="/posts/42")

        run(route, context)

        assert context.params["id"] == 42

    def test_casting_error_propagates(self, routes: Registry) -> None:
        route = routes.define("/posts/:id", "posts.show").param("id", "integer").route
        calls = Recorder()
        route.use(calls.step("mw"))
        context = Context(path="/posts/abc")

        with pytest.raises(CastingError):
            run(route, context)

        assert calls.names == []
        assert context.route is None

    def test_validation_failure_reaches_done(self, routes: Registry) -> None:
        route = routes.define("/posts/:id", "posts.show").param("id", "integer").validate(
            "gte", 1
        ).route
        calls = Recorder()
        route.on("request", calls.step("show"))

        result = run(route, Context(path="/posts/0"))

        assert result.handled is True
        assert result.outcome == [ValidationError("id", "Must be at least 1")]
        assert calls.names == []

    def test_validation_passes_for_valid_input(self, routes: Registry) -> None:
        route = routes.define("/posts/:id", "posts.show").param("id", "integer").validate(
            "gte", 1
        ).route
        calls = Recorder()
        route.on("request", calls.step("show"))

        result = run(route, Context(path="/posts/7"))

        assert result.ok
        assert calls.names == ["show"]

    def test_validators_see_bound_route_and_event(self, routes: Registry) -> None:
        route = routes.define("/posts/:id", "posts.show")
        seen: list[tuple[Any, Any]] = []

        def check_id(value: Any) -> None:
            seen.append(("param", value))

        def check_context(context: Context) -> None:
            seen.append((context.route, context.event))

        route.param("id", "integer").validator(check_id).route.validator(check_context)

        assert run(route, Context(path="/posts/3")).ok
        assert seen == [("param", 3), (route, "request")]


class TestLifecycle:
    def test_enter_runs_before_event(self, routes: Registry) -> None:
        route = routes.define("/", "index")
        observed: list[bool] = []

        def enter(context: Context) -> None:
            context.state["entered"] = True

        def request(context: Context) -> None:
            observed.append(context.state.get("entered", False))

        route.on("request", request).enter(enter)
        result = run(route, Context(path="/"))

        assert result.ok
        assert observed == [True]

    def test_full_order(self, routes: Registry) -> None:
        calls = Recorder()
        route = (
            routes.define("/", "index")
            .format(calls.step("format"))
            .on("request", calls.step("request"))
            .enter(calls.step("enter"))
            .exit(calls.step("exit"))
            .use(calls.step("mw1"), calls.continuation("mw2"))
        )

        run(route, Context(path="/"))

        assert calls.names == ["mw1", "mw2", "enter", "request", "format"]

    def test_custom_event(self, routes: Registry) -> None:
        calls = Recorder()
        route = (
            routes.define("/chat", "chat")
            .on("request", calls.step("request"))
            .on("message", calls.step("message"))
        )

        run(route, Context(path="/chat", event="message"))

        assert calls.names == ["message"]

    def test_exit_event_runs_enter_then_exit(self, routes: Registry) -> None:
        calls = Recorder()
        route = routes.define("/", "index").enter(calls.step("enter")).exit(calls.step("exit"))

        run(route, Context(path="/", event="exit"))

        assert calls.names == ["enter", "exit"]

    def test_wildcard_format_any_context_format(self, routes: Registry) -> None:
        calls = Recorder()
        route = routes.define("/", "index").format(calls.step("any"))

        result = run(route, Context(path="/", format="json"))

        assert result.ok
        assert calls.names == ["any"]

    def test_accept_without_handler_dispatches(self, routes: Registry) -> None:
        route = routes.define("/", "index").accept("json")
        assert run(route, Context(path="/", format="json")).ok


class TestShortCircuit:
    def test_cancel_in_middleware(self, routes: Registry) -> None:
        calls = Recorder()
        route = (
            routes.define("/", "index")
            .use(calls.step("cancel", lambda ctx: setattr(ctx, "is_cancelled", True)))
            .on("request", calls.step("spy"))
        )

        result = run(route, Context(path="/"))

        assert result.done_calls == 1
        assert isinstance(result.outcome, Cancelled)
        assert calls.names == ["cancel"]

    def test_errors_in_enter(self, routes: Registry) -> None:
        calls = Recorder()
        route = (
            routes.define("/", "index")
            .enter(calls.step("enter", lambda ctx: ctx.errors.append("denied")))
            .on("request", calls.step("spy"))
        )

        result = run(route, Context(path="/"))

        assert result.outcome == ["denied"]
        assert calls.names == ["enter"]

    def test_step_error(self, routes: Registry) -> None:
        err = PermissionError("no")
        calls = Recorder()
        route = (
            routes.define("/", "index")
            .use(calls.continuation("auth", err))
            .on("request", calls.step("spy"))
        )

        result = run(route, Context(path="/"))

        assert result.outcome is err
        assert calls.names == ["auth"]

    def test_step_exception_propagates(self, routes: Registry) -> None:
        def broken(context: Context) -> None:
            raise ZeroDivisionError

        route = routes.define("/", "index").on("request", broken)

        with pytest.raises(ZeroDivisionError):
            run(route, Context(path="/"))


class TestRender:
    def test_render_uses_renderer(self, routes: Registry) -> None:
        rendered: list[str] = []

        def renderer(name: str, context: Context) -> str:
            rendered.append(name)
            return f"<h1>{name}</h1>"

        route = routes.define("/", "index").render("home")
        context = Context(path="/", renderer=renderer)

        assert run(route, context).ok
        assert rendered == ["home"]
        assert context.view == "home"
        assert context.body == "<h1>home</h1>"

    def test_render_without_renderer_records_view(self, routes: Registry) -> None:
        route = routes.define("/", "index").render("home")
        context = Context(path="/")

        run(route, context)

        assert context.view == "home"
        assert context.body is None

    def test_html_handler_renders_named_view(self, routes: Registry) -> None:
        route = routes.define("/", "index").render("home")
        context = Context(path="/", renderer=lambda name, ctx: name.upper())

        handler = route.negotiate("html")
        assert handler is not None
        handler(context)

        assert context.body == "HOME"


class TestHandleAsync:
    @pytest.mark.anyio
    async def test_not_handled(self, routes: Registry) -> None:
        route = routes.define("/posts", "posts.index")
        assert await route.handle_async(Context(path="/users")) == (False, None)

    @pytest.mark.anyio
    async def test_async_steps(self, routes: Registry) -> None:
        calls = Recorder()

        async def load(context: Context) -> None:
            await anyio.sleep(0)
            context.state["post"] = {"id": context.params["id"]}

        route = (
            routes.define("/posts/:id", "posts.show")
            .param("id", "integer")
            .enter(load)
            .on("request", calls.step("show"))
        )

        context = Context(path="/posts/5")
        handled, outcome = await route.handle_async(context)

        assert handled is True
        assert outcome is None
        assert context.state["post"] == {"id": 5}
        assert calls.names == ["show"]

    @pytest.mark.anyio
    async def test_async_step_with_next(self, routes: Registry) -> None:
        calls = Recorder()

        async def authorize(context: Context, next_: Any) -> None:
            await anyio.sleep(0)
            context.state["user"] = "alice"
            next_()

        route = (
            routes.define("/", "index")
            .enter(authorize)
            .on("request", calls.step("show"))
        )

        context = Context(path="/")
        handled, outcome = await route.handle_async(context)

        assert handled is True
        assert outcome is None
        assert context.state["user"] == "alice"
        assert calls.names == ["show"]

    @pytest.mark.anyio
    async def test_async_step_error_through_next(self, routes: Registry) -> None:
        err = PermissionError("no")

        async def deny(context: Context, next_: Any) -> None:
            next_(err)

        route = routes.define("/", "index").use(deny)

        assert await route.handle_async(Context(path="/")) == (True, err)
