"""End-to-end routing through App + Router.routes()."""

import pytest

from waypoint.app import App
from waypoint.config import RoutesConfig
from waypoint.errors import MethodNotAllowed, MethodNotImplemented
from waypoint.routing.router import Router
from waypoint.testing import TestClient

VERBS = ["options", "head", "get", "post", "put", "patch", "delete"]


def _app(router: Router, **kwargs) -> App:
    app = App()
    app.use(router.routes(**kwargs))
    return app


def world(ctx, next):
    ctx.body = "world"


def noop(ctx, next):
    return None


class TestCore:
    async def test_200_with_valid_path_and_body(self) -> None:
        router = Router()
        router.get("/hello", world)

        async with TestClient(_app(router)) as client:
            response = await client.get("/hello")
        assert response.status == 200
        assert response.text == "world"

    async def test_no_routes_returns_404(self) -> None:
        async with TestClient(_app(Router())) as client:
            response = await client.get("/hello")
        assert response.status == 404

    async def test_use_alone_does_not_run(self) -> None:
        router = Router()
        router.use("/", world)

        async with TestClient(_app(router)) as client:
            response = await client.get("/")
        assert response.status == 404

    async def test_use_without_path_applies_to_all_routes(self) -> None:
        router = Router()

        async def prefix(ctx, next):
            ctx.body = "wor"
            await next()

        def suffix(ctx, next):
            ctx.body += "ld"

        router.use(prefix)
        router.get("/hello", suffix)

        async with TestClient(_app(router)) as client:
            response = await client.get("/hello")
        assert response.status == 200
        assert response.text == "world"

    async def test_continues_to_next_host_middleware(self) -> None:
        app = App()
        router = Router()

        async def first(ctx, next):
            ctx.body = "1"
            result = await next()
            ctx.body += result

        async def second(ctx, next):
            ctx.body += "2"
            return await next()

        def last(ctx, next):
            ctx.body += "3"
            return "4"

        router.get("/", second)
        app.use(first)
        app.use(router.routes())
        app.use(last)

        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.text == "1234"

    async def test_downstream_runs_after_chain(self) -> None:
        app = App()
        router = Router()
        order: list[str] = []

        async def handler(ctx, next):
            order.append("route")
            ctx.body = "done"

        def downstream(ctx, next):
            order.append("downstream")

        router.get("/", handler)
        app.use(router.routes())
        app.use(downstream)

        async with TestClient(app) as client:
            await client.get("/")
        assert order == ["route", "downstream"]

    async def test_routes_added_after_routes_call_apply(self) -> None:
        router = Router()
        app = _app(router)
        router.get("/late", world)

        async with TestClient(app) as client:
            response = await client.get("/late")
        assert response.text == "world"


class TestMethods:
    @pytest.mark.parametrize("verb", VERBS)
    async def test_verb_helper(self, verb: str) -> None:
        router = Router()
        getattr(router, verb)("/hello", world)

        async with TestClient(_app(router)) as client:
            response = await client.request(verb, "/hello")
        assert response.status == 200
        assert response.text == ("" if verb == "head" else "world")

    @pytest.mark.parametrize("verb", VERBS)
    async def test_verb_helper_without_path(self, verb: str) -> None:
        router = Router()
        getattr(router, verb)(world)

        async with TestClient(_app(router)) as client:
            response = await client.request(verb, "/")
        assert response.status == 200
        assert response.text == ("" if verb == "head" else "world")

    async def test_all(self) -> None:
        router = Router()
        router.all("/hello", world)

        async with TestClient(_app(router)) as client:
            for verb in VERBS:
                response = await client.request(verb, "/hello")
                assert response.status == 200
                assert response.text == ("" if verb == "head" else "world")

    async def test_all_without_path(self) -> None:
        router = Router()
        router.all(world)

        async with TestClient(_app(router)) as client:
            for verb in VERBS:
                response = await client.request(verb, "/")
                assert response.status == 200

    async def test_head_keeps_content_length(self) -> None:
        router = Router()
        router.get("/", world)

        async with TestClient(_app(router)) as client:
            response = await client.head("/")
        assert response.status == 200
        assert response.body == b""
        assert response.header("content-length") == "5"


class TestMount:
    async def test_mount_serves_prefixed_path(self) -> None:
        router = Router()
        router2 = Router()
        router.get("/", world)
        router2.mount("/hello", router)

        async with TestClient(_app(router2)) as client:
            response = await client.get("/hello")
            old = await client.get("/")
        assert response.status == 200
        assert response.text == "world"
        assert old.status == 404

    async def test_nested_mount_sets_route_path(self) -> None:
        root = Router()
        api = Router()
        router = Router()
        seen: list[str] = []

        def ticket(ctx, next):
            seen.append(ctx.route.path)
            ctx.body = "world"

        router.get("/:id", ticket)
        api.mount("/ticket", router)
        root.mount("/api/v1", api)

        async with TestClient(_app(root)) as client:
            response = await client.get("/api/v1/ticket/66")
        assert response.status == 200
        assert response.text == "world"
        assert seen == ["/api/v1/ticket/:id"]

    async def test_use_applies_only_to_children(self) -> None:
        router = Router()
        router2 = Router()

        async def hello(ctx, next):
            ctx.body = "hello"
            await next()

        def append_world(ctx, next):
            ctx.body += "world"

        def pouet(ctx, next):
            ctx.body = (ctx.body or "") + "pouet"

        router.use(hello)
        router.get("/", append_world)
        router2.get("/", pouet)
        router2.mount("/hello", router)

        async with TestClient(_app(router2)) as client:
            child = await client.get("/hello")
            parent = await client.get("/")
        assert child.text == "helloworld"
        assert parent.text == "pouet"


class TestURLParameters:
    async def test_params_from_mount_prefix_and_child(self) -> None:
        router = Router()
        router2 = Router()

        def show(ctx, next):
            ctx.body = ctx.params

        router.get("/:two/test", show)
        router2.mount("/:one", router)

        async with TestClient(_app(router2)) as client:
            response = await client.get("/one/two/test")
        assert response.status == 200
        assert response.json() == {"one": "one", "two": "two"}

    async def test_params_decoded(self) -> None:
        router = Router()

        def show(ctx, next):
            ctx.body = ctx.params["name"]

        router.get("/greet/:name", show)

        async with TestClient(_app(router)) as client:
            response = await client.get("/greet/J%C3%BCrgen")
        assert response.text == "Jürgen"


class TestMultipleMiddleware:
    async def test_multiple_routes_cascade(self) -> None:
        router = Router()

        async def first(ctx, next):
            ctx.body = "wor"
            await next()

        def second(ctx, next):
            ctx.body += "ld"

        router.get("/hello", first)
        router.get("/hello", second)

        async with TestClient(_app(router)) as client:
            response = await client.get("/hello")
        assert response.text == "world"

    async def test_multiple_routes_without_next_stop(self) -> None:
        router = Router()

        def first(ctx, next):
            ctx.body = "wor"

        def second(ctx, next):
            ctx.body += "ld"

        router.get("/hello", first)
        router.get("/hello", second)

        async with TestClient(_app(router)) as client:
            response = await client.get("/hello")
        assert response.status == 200
        assert response.text == "wor"

    async def test_middleware_as_list(self) -> None:
        router = Router()

        async def hello(ctx, next):
            ctx.body = "hello"
            await next()

        def append_world(ctx, next):
            ctx.body += "world"

        router.get("/", [hello, append_world])

        async with TestClient(_app(router)) as client:
            response = await client.get("/")
        assert response.text == "helloworld"

    async def test_middleware_as_arguments(self) -> None:
        router = Router()

        async def hello(ctx, next):
            ctx.body = "hello"
            await next()

        def append_world(ctx, next):
            ctx.body += "world"

        router.get("/", hello, append_world)

        async with TestClient(_app(router)) as client:
            response = await client.get("/")
        assert response.text == "helloworld"

    async def test_multiple_middleware_on_use(self) -> None:
        router = Router()

        async def hello(ctx, next):
            ctx.body = "hello"
            await next()

        def append_world(ctx, next):
            ctx.body += "world"

        router.use(hello, append_world)
        router.get("/", noop)

        async with TestClient(_app(router)) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.text == "helloworld"


class TestMethodOutcomes:
    async def test_501_for_unsupported_method(self) -> None:
        router = Router()
        router.get("/", noop)

        async with TestClient(_app(router)) as client:
            response = await client.request("SEARCH", "/")
        assert response.status == 501

    async def test_unsupported_method_on_unrouted_path_passes_through(self) -> None:
        router = Router()
        router.get("/", noop)

        async with TestClient(_app(router)) as client:
            response = await client.request("SEARCH", "/elsewhere")
        assert response.status == 404

    async def test_throw_501(self) -> None:
        router = Router()
        router.get("/", noop)
        app = _app(router, throw=True)
        caught: list[Exception] = []

        @app.error(MethodNotImplemented)
        def not_implemented(ctx, exc):
            caught.append(exc)

        async with TestClient(app) as client:
            response = await client.request("SEARCH", "/")
        assert response.status == 501
        assert len(caught) == 1
        assert caught[0].status == 501

    async def test_405_with_allow_header(self) -> None:
        router = Router()
        router.use(noop)
        router.get("/", noop)
        router.get("/", noop)
        router.put("/", noop)

        async with TestClient(_app(router)) as client:
            response = await client.post("/")
        assert response.status == 405
        assert response.header("Allow") == "HEAD, GET, PUT"

    async def test_throw_405_carries_allow(self) -> None:
        router = Router()
        router.get("/", noop)
        router.get("/", noop)
        router.put("/", noop)
        app = App()
        app.use(router.routes(RoutesConfig(throw=True)))
        caught: list[MethodNotAllowed] = []

        @app.error(405)
        def not_allowed(ctx, exc):
            caught.append(exc)
            return {"allow": exc.allow}

        async with TestClient(app) as client:
            response = await client.post("/")
        assert response.status == 405
        assert response.header("Allow") == "HEAD, GET, PUT"
        assert response.json() == {"allow": "HEAD, GET, PUT"}
        assert isinstance(caught[0], MethodNotAllowed)

    async def test_head_served_by_get(self) -> None:
        router = Router()

        def pouet(ctx, next):
            ctx.body = "pouet"

        router.get("/", pouet)

        async with TestClient(_app(router)) as client:
            response = await client.head("/")
        assert response.status == 200

    async def test_options_responds_204_with_allow(self) -> None:
        router = Router()
        router.get("/", noop)
        router.post("/", noop)

        async with TestClient(_app(router)) as client:
            response = await client.options("/")
        assert response.status == 204
        assert response.body == b""
        assert response.header("Allow") == "HEAD, GET, POST"

    async def test_explicit_options_route_wins(self) -> None:
        router = Router()

        def preflight(ctx, next):
            ctx.status = 200
            ctx.body = "custom"

        router.get("/", noop)
        router.options("/", preflight)

        async with TestClient(_app(router)) as client:
            response = await client.options("/")
        assert response.status == 200
        assert response.text == "custom"
