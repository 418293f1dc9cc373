"""Perch — controller/action routing for server-side MVC applications.

Maps URL patterns to controller actions or redirects, matches paths in
registration order, and wraps actions into handlers that render views.

Basic usage::

    from perch import Request, ResponseWriter, Router, RouterConfig

    router = Router(RouterConfig(entry_path="myapp"))
    router.build_routes()

    writer = ResponseWriter(env)
    router.dispatch(Request.from_url("/users/42"), writer)
    response = writer.finish()
"""

__version__ = "0.1.0-dev"
__all__ = [
    "ActionError",
    "ActionNotFound",
    "ConfigurationError",
    "ExecutionContext",
    "HTTPError",
    "NotFound",
    "PerchError",
    "Request",
    "Response",
    "ResponseWriter",
    "RouteEntry",
    "Router",
    "RouterConfig",
    "sanitize",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from perch.routing.router import Router

        return Router

    if name == "RouterConfig":
        from perch.config import RouterConfig

        return RouterConfig

    if name == "RouteEntry":
        from perch.routing.route import RouteEntry

        return RouteEntry

    if name == "ExecutionContext":
        from perch.routing.context import ExecutionContext

        return ExecutionContext

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name in ("Response", "ResponseWriter"):
        from perch.http import response as _resp

        return getattr(_resp, name)

    if name == "sanitize":
        from perch.security.xss import sanitize

        return sanitize

    if name in (
        "ActionError",
        "ActionNotFound",
        "ConfigurationError",
        "HTTPError",
        "NotFound",
        "PerchError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
