"""Response writer for routed handlers.

``ResponseWriter`` is the mutable side handlers write to through
``render`` and ``redirect``; ``finish()`` hands back a frozen
``Response`` the host server can send.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from kida import Environment

from perch.templating.integration import render_view


@dataclass(frozen=True, slots=True)
class Response:
    """A finished HTTP response."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def location(self) -> str | None:
        """The ``Location`` header, for redirects."""
        for name, value in self.headers:
            if name.lower() == "location":
                return value
        return None

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


class ResponseWriter:
    """Collects the outcome of one handler invocation.

    Usage::

        writer = ResponseWriter(env)
        router.dispatch(Request.from_url("/users/42"), writer)
        response = writer.finish()

    Exactly one of ``render`` or ``redirect`` may be called.
    """

    __slots__ = ("_body", "_env", "_extension", "_headers", "_status", "sent")

    def __init__(self, env: Environment | None = None, *, extension: str = ".html") -> None:
        self._env = env
        self._extension = extension
        self._body = ""
        self._status = 200
        self._headers: list[tuple[str, str]] = []
        self.sent = False

    def render(self, view_path: str, options: Mapping[str, Any]) -> None:
        """Render *view_path* with ``options["locals"]`` as the template context."""
        self._check_not_sent()
        if self._env is None:
            msg = f"Cannot render {view_path!r}: no template environment configured."
            raise RuntimeError(msg)
        self._body = render_view(self._env, view_path, options, self._extension)
        self.sent = True

    def redirect(self, *args: Any) -> None:
        """Redirect to a path: ``redirect(path)`` or ``redirect(status, path)``.

        Defaults to 302 Found.
        """
        self._check_not_sent()
        match args:
            case (str() as url,):
                status = 302
            case (int() as status, str() as url):
                pass
            case _:
                msg = f"redirect() takes (path) or (status, path), got {args!r}"
                raise TypeError(msg)
        self._status = status
        self._headers.append(("Location", url))
        self.sent = True

    def finish(self) -> Response:
        """Freeze what was written into a ``Response``."""
        return Response(body=self._body, status=self._status, headers=tuple(self._headers))

    def _check_not_sent(self) -> None:
        if self.sent:
            msg = "Response already sent."
            raise RuntimeError(msg)
