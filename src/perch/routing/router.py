"""Ordered route table with first-match-wins dispatch.

Routes are registered at startup, by hand or from the routes file, and
matched in registration order: an earlier route wins whenever two
patterns could both match a path.
"""

import copy
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any
from urllib.parse import quote

from perch._internal.types import Action, Callback, Handler, Next
from perch.config import RouterConfig
from perch.errors import ActionError, ActionNotFound, NotFound
from perch.http.protocol import RenderingResponse, RoutedRequest
from perch.http.request import BoundRoute, Request
from perch.routing.context import ExecutionContext
from perch.routing.loader import load_controller, load_route_declarations
from perch.routing.route import (
    CompiledPattern,
    ControllerAction,
    RedirectTarget,
    RouteEntry,
    action_spec_from_meta,
    compile_pattern,
    parse_action_spec,
)
from perch.security.xss import sanitize_value

logger = logging.getLogger("perch.router")

_PLACEHOLDER = re.compile(r":(\w+)")


@dataclass(frozen=True, slots=True)
class _TableRow:
    """A registered route plus its compiled pattern."""

    entry: RouteEntry
    compiled: CompiledPattern


class Router:
    """Ordered route table for controller/action dispatch.

    Usage::

        router = Router(RouterConfig(entry_path="myapp"))
        router.build_routes()
        router.dispatch(Request.from_url("/users/42", app=app), response)

    Not thread-safe during registration. Once startup is done the table
    is only read. Controller modules are loaded lazily on first dispatch,
    so two threads hitting a cold route at once may load a module twice;
    the second load replaces the first in the cache.
    """

    __slots__ = ("_controllers", "_table", "app", "config")

    def __init__(self, config: RouterConfig | None = None, *, app: Any = None) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self.app = app
        self._table: list[_TableRow] = []
        self._controllers: dict[str, Any] = {}

    # -- Registration --

    def route(
        self,
        pattern: str,
        action_spec: str | Mapping[str, Any],
        extra_meta: Mapping[str, Any] | None = None,
    ) -> RouteEntry:
        """Append a route and return ``(pattern, meta, handler)``.

        Args:
            pattern: Path template; ``:name`` segments capture. The
                leading ``/`` is optional.
            action_spec: ``"controller#action"``, or a mapping with
                ``controller``/``action`` or ``redirect`` keys plus any
                extra metadata.
            extra_meta: Merged over the meta built from *action_spec*
                (e.g. ``{"role": "admin"}``).

        Raises:
            ConfigurationError: If the resulting meta is malformed.
        """
        row = self._build_row(pattern, action_spec, extra_meta)
        self._table.append(row)
        return row.entry

    def routes(self) -> list[RouteEntry]:
        """Return a copy of the route table, in match order.

        Meta mappings are deep-copied, so nothing done to the result can
        reach the table.
        """
        return [self._copy_entry(row.entry) for row in self._table]

    def build_routes(self) -> list[RouteEntry]:
        """Register every route declared in ``config.routes_file``.

        Declaration order becomes match order. Nothing is registered
        unless every declaration is valid.

        Raises:
            ConfigurationError: If the routes file is missing, fails to
                import, raises while declaring, or declares routes in
                neither supported form.
        """
        routes_file = self.config.routes_file
        rows: list[_TableRow] = []
        for declaration in load_route_declarations(routes_file):
            pattern, spec, *rest = declaration
            rows.append(self._build_row(pattern, spec, rest[0] if rest else None))
        self._table.extend(rows)
        logger.debug("built %d routes from %s", len(rows), routes_file)
        return self.routes()

    # -- Matching --

    def match(self, path: str) -> RouteEntry | None:
        """Return the first route matching *path*, or ``None``.

        The leading ``/`` is optional and a query string is ignored.
        """
        found = self.match_params(path)
        if found is None:
            return None
        return found[0]

    def match_params(self, path: str) -> tuple[RouteEntry, dict[str, str]] | None:
        """Like ``match()``, but also return the captured path values."""
        path = "/" + path.partition("?")[0].lstrip("/")
        for row in self._table:
            captures = row.compiled.match(path)
            if captures is not None:
                logger.debug("match %s -> %s", path, row.entry.pattern)
                return self._copy_entry(row.entry), captures
        return None

    # -- Params --

    def get_params(self, request: RoutedRequest) -> dict[str, Any]:
        """Merge query and path-capture params into one sanitized mapping.

        Path captures are the names in ``request.route.keys``, read from
        ``request.params``. On a key collision the path capture wins.
        """
        params: dict[str, Any] = {}
        for key, value in request.query.items():
            params[key] = sanitize_value(value)

        route = request.route
        if route is not None:
            bound = request.params or {}
            for key in route.keys:
                if key in bound:
                    params[key] = sanitize_value(bound[key])
        return params

    def get_redirect(self, route_meta: Mapping[str, Any], params: Mapping[str, Any]) -> str | None:
        """Return the redirect target for *route_meta*, or ``None``.

        ``:name`` placeholders are filled from *params* (percent-encoded);
        placeholders with no matching param are left as written.
        """
        target = route_meta.get("redirect")
        if target is None:
            return None

        def fill(m: re.Match[str]) -> str:
            name = m.group(1)
            if name in params:
                return quote(str(params[name]), safe="")
            return m.group(0)

        return _PLACEHOLDER.sub(fill, str(target))

    # -- Actions and handlers --

    def get_action(self, route_meta: Mapping[str, Any]) -> Action:
        """Resolve a route's action function from its controller module.

        Raises:
            ActionNotFound: If the controller module or the action
                function doesn't exist.
        """
        spec = action_spec_from_meta(route_meta)
        if isinstance(spec, RedirectTarget):
            msg = f"Redirect route {dict(route_meta)!r} has no action."
            raise ActionNotFound(msg)

        module = self._controllers.get(spec.controller)
        if module is None:
            module = load_controller(self.config.controllers_dir, spec.controller)
            self._controllers[spec.controller] = module

        action = getattr(module, spec.action, None)
        if action is None or not callable(action):
            msg = f"Action {spec.action!r} not found on controller {spec.controller!r}."
            raise ActionNotFound(msg)
        return action

    def get_handler(
        self,
        action: Action | None,
        pattern: str,
        route_meta: Mapping[str, Any],
    ) -> Handler:
        """Wrap *action* into a ``handler(request, response, next_=None)``.

        The handler builds params from the request, then either redirects
        (redirect routes) or calls ``action(context, params, callback)``.
        The action finishes by calling ``callback(error, view_path,
        locals)``; with no error the response renders *view_path* with
        ``{"locals": locals, "app": app, "req": request}``.

        Action errors never render. They go to ``next_`` when the host
        framework passes one, and are raised otherwise.
        """
        router = self

        def handler(
            request: RoutedRequest,
            response: RenderingResponse,
            next_: Next | None = None,
        ) -> None:
            params = router.get_params(request)

            redirect = router.get_redirect(route_meta, params)
            if redirect is not None:
                response.redirect(redirect)
                return

            if action is None:
                msg = f"No action for route {pattern!r}."
                raise ActionNotFound(msg)

            app = request.app
            context = ExecutionContext(app, route_meta, response)
            completed = False

            def callback(
                error: Any = None,
                view_path: str | None = None,
                view_locals: Mapping[str, Any] | None = None,
            ) -> None:
                nonlocal completed
                if completed:
                    msg = f"Completion callback for {pattern!r} called more than once."
                    raise RuntimeError(msg)
                completed = True

                if error is not None:
                    logger.debug("action for %s failed: %r", pattern, error)
                    exc = error if isinstance(error, BaseException) else ActionError(str(error))
                    if next_ is not None:
                        next_(exc)
                        return
                    raise exc

                view_path = view_path or router.default_view_path(route_meta)
                locals_ = view_locals if view_locals is not None else {}
                response.render(view_path, {"locals": locals_, "app": app, "req": request})

            action(context, params, callback)

        return handler

    @staticmethod
    def default_view_path(route_meta: Mapping[str, Any]) -> str:
        """``"<controller>/<action>"``, the view rendered when an action names none."""
        return f"{route_meta.get('controller', '')}/{route_meta.get('action', '')}"

    # -- Dispatch --

    def dispatch(
        self,
        request: Request,
        response: RenderingResponse,
        next_: Next | None = None,
    ) -> RouteEntry:
        """Match ``request.path`` and run the route's handler.

        The matched route and its captures are bound onto a copy of the
        request before the handler sees it. Returns the matched route.

        Raises:
            NotFound: If no route matches.
        """
        found = self.match_params(request.path)
        if found is None:
            raise NotFound(f"No route matches {request.path!r}")

        entry, captures = found
        bound = replace(
            request,
            route=BoundRoute(pattern=entry.pattern, keys=tuple(captures)),
            params={**request.params, **captures},
            app=request.app if request.app is not None else self.app,
        )
        entry.handler(bound, response, next_)
        return entry

    # -- Internal --

    def _build_row(
        self,
        pattern: str,
        action_spec: str | Mapping[str, Any],
        extra_meta: Mapping[str, Any] | None,
    ) -> _TableRow:
        """Validate and compile one route without registering it."""
        if isinstance(action_spec, str):
            spec = parse_action_spec(action_spec)
            meta: dict[str, Any] = {"controller": spec.controller, "action": spec.action}
        else:
            meta = dict(action_spec)
        if extra_meta:
            meta.update(extra_meta)

        # Validates the controller/redirect shape
        resolved = action_spec_from_meta(meta)

        compiled = compile_pattern(pattern)
        # Actions see a read-only snapshot; the table keeps its own dict
        view = _freeze(meta)
        action = self._lazy_action(view) if isinstance(resolved, ControllerAction) else None
        handler = self.get_handler(action, compiled.pattern, view)
        logger.debug("route %s -> %s", compiled.pattern, meta)
        return _TableRow(entry=RouteEntry(compiled.pattern, meta, handler), compiled=compiled)

    def _lazy_action(self, route_meta: Mapping[str, Any]) -> Action:
        """An action that resolves the controller on first call."""
        resolved: list[Action] = []

        def action(context: ExecutionContext, params: dict[str, Any], callback: Callback) -> Any:
            if not resolved:
                resolved.append(self.get_action(route_meta))
            return resolved[0](context, params, callback)

        return action

    @staticmethod
    def _copy_entry(entry: RouteEntry) -> RouteEntry:
        return RouteEntry(entry.pattern, copy.deepcopy(entry.meta), entry.handler)


def _freeze(value: Any) -> Any:
    """Deep read-only copy: mappings become proxies, lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(v) for v in value)
    return copy.deepcopy(value)
