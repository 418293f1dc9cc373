"""Structural contracts for the host framework's request and response.

perch never owns the HTTP server. Anything that quacks like these
protocols can be routed: the concrete ``Request``/``ResponseWriter``
types in this package, or thin adapters over another framework's objects.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MatchedRoute(Protocol):
    """Route-match metadata bound to a request by the framework."""

    @property
    def keys(self) -> Sequence[str]: ...


@runtime_checkable
class RoutedRequest(Protocol):
    """An in-flight request as the router sees it.

    ``params`` may carry framework state besides path captures; only the
    names listed in ``route.keys`` are read from it.
    """

    @property
    def query(self) -> Mapping[str, Any]: ...
    @property
    def route(self) -> MatchedRoute | None: ...
    @property
    def params(self) -> Mapping[str, Any]: ...
    @property
    def app(self) -> Any: ...


@runtime_checkable
class RenderingResponse(Protocol):
    """The two response operations a handler needs.

    ``redirect`` accepts ``(path)`` or ``(status, path)``; the default
    status is the framework's business.
    """

    def render(self, view_path: str, options: Mapping[str, Any]) -> Any: ...
    def redirect(self, *args: Any) -> Any: ...
