"""Immutable routed request.

The minimal request shape the router reads: path, query string, the
route bound by the match, its captured params, and the application
handle. Host frameworks can pass their own objects instead, as long as
they satisfy ``perch.http.protocol.RoutedRequest``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from perch.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class BoundRoute:
    """The route a request matched: literal pattern plus capture names."""

    pattern: str
    keys: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable routed request.

    ``route`` and ``params`` are empty until ``Router.dispatch()`` binds
    the matched route onto a copy of the request.
    """

    path: str = "/"
    query: Mapping[str, Any] = field(default_factory=QueryParams)
    route: BoundRoute | None = None
    params: Mapping[str, Any] = field(default_factory=dict)
    app: Any = None

    @property
    def url(self) -> str:
        """Path plus query string, when the query came from a raw string."""
        raw = self.query.raw if isinstance(self.query, QueryParams) else ""
        if raw:
            return f"{self.path}?{raw}"
        return self.path

    @classmethod
    def from_url(cls, url: str, *, app: Any = None) -> Request:
        """Create a Request from a ``path?query`` string."""
        path, _, query_string = url.partition("?")
        return cls(path=path or "/", query=QueryParams(query_string), app=app)
