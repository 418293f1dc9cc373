"""Per-request execution context handed to controller actions."""

from collections.abc import Mapping
from typing import Any

from perch.http.protocol import RenderingResponse


class ExecutionContext:
    """What an action can see and do besides its params.

    Created fresh for each dispatched request and dropped once the
    action's callback fires::

        def show(ctx, params, callback):
            if params["id"] == "me":
                ctx.redirect_to("/account")
                return
            callback(None, "users/show", {"user": ctx.app.users[params["id"]]})
    """

    __slots__ = ("_response", "app", "current_route")

    def __init__(
        self,
        app: Any,
        current_route: Mapping[str, Any],
        response: RenderingResponse,
    ) -> None:
        self.app = app
        self.current_route = current_route
        self._response = response

    def redirect_to(self, *args: Any) -> Any:
        """Redirect: ``redirect_to(path)`` or ``redirect_to(status, path)``.

        Arguments go to ``response.redirect`` unchanged, so the default
        status is whatever the response decides.
        """
        if len(args) not in (1, 2):
            msg = f"redirect_to() takes (path) or (status, path), got {len(args)} arguments"
            raise TypeError(msg)
        return self._response.redirect(*args)

    def __repr__(self) -> str:
        return f"ExecutionContext(current_route={self.current_route!r})"
