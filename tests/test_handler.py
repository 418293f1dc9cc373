"""Tests for Router.get_handler — action wrapping, rendering, and redirects."""

from typing import Any
from unittest.mock import MagicMock, call, patch

import pytest

from perch.errors import ActionError, ActionNotFound
from perch.http.request import BoundRoute, Request
from perch.routing.context import ExecutionContext
from perch.routing.router import Router

PATTERN = "/users/:id"


@pytest.fixture
def app() -> object:
    return object()


@pytest.fixture
def request_(app: object) -> Request:
    return Request(
        path="/users/1",
        route=BoundRoute(pattern=PATTERN, keys=("id",)),
        params={"id": 1},
        app=app,
    )


def _response() -> MagicMock:
    return MagicMock(spec=["render", "redirect"])


class TestGetHandler:
    def test_calls_action_with_context_and_renders(self, request_: Request, app: object) -> None:
        route = {"controller": "users", "action": "show"}
        res = _response()
        seen: dict[str, Any] = {}

        def action(ctx: ExecutionContext, params: dict[str, Any], callback: Any) -> None:
            seen["params"] = params
            seen["ctx"] = ctx
            callback(None, "template/path", {"some": "data"})

        handler = Router().get_handler(action, PATTERN, route)
        handler(request_, res)

        assert seen["params"] == {"id": 1}
        assert seen["ctx"].current_route is route
        assert seen["ctx"].app is app
        assert callable(seen["ctx"].redirect_to)

        res.render.assert_called_once()
        view_path, options = res.render.call_args.args
        assert view_path == "template/path"
        assert options == {"locals": {"some": "data"}, "app": app, "req": request_}
        assert options["req"] is request_
        res.redirect.assert_not_called()

    def test_returns_none(self, request_: Request) -> None:
        handler = Router().get_handler(
            lambda ctx, params, cb: cb(None, "x", {}), PATTERN, {"controller": "users", "action": "show"}
        )
        assert handler(request_, _response()) is None

    def test_default_view_path_and_locals(self, request_: Request, app: object) -> None:
        res = _response()
        handler = Router().get_handler(
            lambda ctx, params, cb: cb(), PATTERN, {"controller": "users", "action": "show"}
        )
        handler(request_, res)
        res.render.assert_called_once_with("users/show", {"locals": {}, "app": app, "req": request_})

    def test_deferred_completion(self, request_: Request) -> None:
        res = _response()
        pending: list[Any] = []
        handler = Router().get_handler(
            lambda ctx, params, cb: pending.append(cb), PATTERN, {"controller": "users", "action": "show"}
        )
        handler(request_, res)
        res.render.assert_not_called()

        pending[0](None, "later", {"n": 1})
        res.render.assert_called_once()
        assert res.render.call_args.args[0] == "later"

    def test_callback_twice_raises(self, request_: Request) -> None:
        def action(ctx: ExecutionContext, params: dict[str, Any], callback: Any) -> None:
            callback(None, "a", {})
            callback(None, "b", {})

        handler = Router().get_handler(action, PATTERN, {"controller": "users", "action": "show"})
        with pytest.raises(RuntimeError, match="more than once"):
            handler(request_, _response())


class TestActionErrors:
    def test_error_goes_to_next(self, request_: Request) -> None:
        res = _response()
        next_ = MagicMock()
        error = ValueError("boom")
        handler = Router().get_handler(
            lambda ctx, params, cb: cb(error, "template/path", {}),
            PATTERN,
            {"controller": "users", "action": "show"},
        )
        handler(request_, res, next_)

        next_.assert_called_once_with(error)
        res.render.assert_not_called()
        res.redirect.assert_not_called()

    def test_error_raised_without_next(self, request_: Request) -> None:
        res = _response()
        handler = Router().get_handler(
            lambda ctx, params, cb: cb(ValueError("boom")),
            PATTERN,
            {"controller": "users", "action": "show"},
        )
        with pytest.raises(ValueError, match="boom"):
            handler(request_, res)
        res.render.assert_not_called()

    def test_non_exception_error_is_wrapped(self, request_: Request) -> None:
        next_ = MagicMock()
        handler = Router().get_handler(
            lambda ctx, params, cb: cb("not found in db"),
            PATTERN,
            {"controller": "users", "action": "show"},
        )
        handler(request_, _response(), next_)
        (exc,) = next_.call_args.args
        assert isinstance(exc, ActionError)
        assert str(exc) == "not found in db"

    def test_no_action_for_controller_route(self, request_: Request) -> None:
        handler = Router().get_handler(None, PATTERN, {"controller": "users", "action": "show"})
        with pytest.raises(ActionNotFound):
            handler(request_, _response())


class TestRedirectTo:
    def test_path_only(self, request_: Request) -> None:
        res = _response()
        handler = Router().get_handler(
            lambda ctx, params, cb: ctx.redirect_to("/some_uri"),
            PATTERN,
            {"controller": "users", "action": "show"},
        )
        handler(request_, res)

        res.redirect.assert_called_once()
        assert res.redirect.call_args == call("/some_uri")
        assert res.mock_calls == [call.redirect("/some_uri")]
        res.render.assert_not_called()

    def test_with_status_code(self, request_: Request) -> None:
        res = _response()
        handler = Router().get_handler(
            lambda ctx, params, cb: ctx.redirect_to(301, "/some_uri"),
            PATTERN,
            {"controller": "users", "action": "show"},
        )
        handler(request_, res)

        res.redirect.assert_called_once_with(301, "/some_uri")
        assert res.mock_calls == [call.redirect(301, "/some_uri")]

    def test_bad_arity(self, request_: Request) -> None:
        handler = Router().get_handler(
            lambda ctx, params, cb: ctx.redirect_to(),
            PATTERN,
            {"controller": "users", "action": "show"},
        )
        with pytest.raises(TypeError):
            handler(request_, _response())


class TestRedirectRoutes:
    def test_redirect_route_skips_action(self, request_: Request) -> None:
        res = _response()
        action = MagicMock()
        handler = Router().get_handler(action, PATTERN, {"redirect": "/people/:id"})
        handler(request_, res)

        action.assert_not_called()
        res.redirect.assert_called_once_with("/people/1")

    def test_get_redirect(self) -> None:
        r = Router()
        assert r.get_redirect({"redirect": "/a/:id/:missing"}, {"id": "x y"}) == "/a/x%20y/:missing"
        assert r.get_redirect({"controller": "a", "action": "b"}, {}) is None

    def test_registered_redirect_route(self) -> None:
        r = Router()
        _, _, handler = r.route("/old/:id", {"redirect": "/new/:id"})
        res = _response()
        handler(Request(route=BoundRoute("/old/:id", ("id",)), params={"id": "7"}), res)
        res.redirect.assert_called_once_with("/new/7")


class TestRouteMetaIsolation:
    def test_action_cannot_rewrite_registered_route(self, request_: Request) -> None:
        r = Router()
        r.route("/users/:id", "users#show", {"roles": ["admin"]})

        def action(ctx: ExecutionContext, params: dict[str, Any], callback: Any) -> None:
            with pytest.raises(TypeError):
                ctx.current_route["action"] = "changed"  # type: ignore[index]
            with pytest.raises(AttributeError):
                ctx.current_route["roles"].append("guest")
            assert ctx.current_route["roles"] == ("admin",)
            callback(None, "users/show", {})

        res = _response()
        with patch.object(Router, "get_action", return_value=action):
            r.routes()[0].handler(request_, res)

        res.render.assert_called_once()
        assert r.routes()[0].meta == {"controller": "users", "action": "show", "roles": ["admin"]}
        matched = r.match("/users/1")
        assert matched is not None
        assert matched.meta["action"] == "show"
