"""Perch exception hierarchy.

Shared across Router, handlers, and the CLI so every module raises and
catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when router configuration is invalid.

    Typically raised at startup by ``Router.build_routes()`` or
    ``Router.route()``, before any request is served.
    """


class ActionNotFound(ConfigurationError):  # noqa: N818
    """A route names a controller module or action that does not exist."""


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by ``Router.dispatch()``. The host framework is expected to
    catch these and produce the matching response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class ActionError(PerchError):
    """An action reported an error that is not an exception instance.

    Wraps plain values passed as the callback's error argument so the
    framework's error chain always receives an exception.
    """
