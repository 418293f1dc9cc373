"""Route definitions, action specs, and compiled patterns."""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple
from urllib.parse import unquote

from perch.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ControllerAction:
    """Dispatch to ``action`` on ``controller`` (``"users#show"``)."""

    controller: str
    action: str


@dataclass(frozen=True, slots=True)
class RedirectTarget:
    """Redirect to ``path``; may contain ``:name`` placeholders."""

    path: str


type ActionSpec = ControllerAction | RedirectTarget


def parse_action_spec(spec: str) -> ControllerAction:
    """Parse ``"controller#action"`` into a ``ControllerAction``.

    Raises ``ConfigurationError`` if either half is missing.
    """
    controller, sep, action = spec.partition("#")
    if not sep or not controller or not action:
        msg = f"Action spec {spec!r} must look like 'controller#action'."
        raise ConfigurationError(msg)
    return ControllerAction(controller=controller, action=action)


def action_spec_from_meta(meta: Mapping[str, Any]) -> ActionSpec:
    """Read the action spec back out of a route's meta mapping.

    A meta mapping holds either ``controller`` and ``action`` or
    ``redirect``, never both. Extra keys (``role``, ...) are ignored here.
    """
    has_redirect = "redirect" in meta
    has_controller = "controller" in meta or "action" in meta
    if has_redirect and has_controller:
        msg = f"Route meta {dict(meta)!r} combines 'redirect' with 'controller'/'action'."
        raise ConfigurationError(msg)
    if has_redirect:
        return RedirectTarget(path=str(meta["redirect"]))
    if meta.get("controller") and meta.get("action"):
        return ControllerAction(controller=str(meta["controller"]), action=str(meta["action"]))
    msg = f"Route meta {dict(meta)!r} needs 'controller' and 'action', or 'redirect'."
    raise ConfigurationError(msg)


class RouteEntry(NamedTuple):
    """A registered route: ``(pattern, meta, handler)``.

    Also the shape ``Router.match()`` returns.
    """

    pattern: str
    meta: dict[str, Any]
    handler: Callable[..., Any]


def normalize_pattern(pattern: str) -> str:
    """Ensure *pattern* starts with exactly one ``/``."""
    return "/" + pattern.lstrip("/")


_PARAM_SEGMENT = re.compile(r"^:(\w+)$")


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A route pattern compiled to a regex.

    Examples::

        "/users"      -> keys ()
        "/users/:id"  -> keys ("id",)
    """

    pattern: str
    regex: re.Pattern[str]
    keys: tuple[str, ...]

    def match(self, path: str) -> dict[str, str] | None:
        """Return captured values for *path*, or ``None`` if it doesn't match."""
        m = self.regex.match(path)
        if m is None:
            return None
        return {key: unquote(value) for key, value in zip(self.keys, m.groups(), strict=True)}


def compile_pattern(pattern: str) -> CompiledPattern:
    """Compile a ``/literal/:name`` pattern.

    A literal segment matches only itself; ``:name`` matches one
    non-empty segment. A single trailing slash on the path is tolerated.
    """
    normalized = normalize_pattern(pattern)
    keys: list[str] = []
    parts: list[str] = []
    for segment in normalized.strip("/").split("/"):
        if not segment:
            continue
        param = _PARAM_SEGMENT.match(segment)
        if param:
            keys.append(param.group(1))
            parts.append("([^/]+)")
        else:
            parts.append(re.escape(segment))
    body = "/" + "/".join(parts)
    regex = re.compile(f"^{body}/?$" if parts else "^/$")
    return CompiledPattern(pattern=normalized, regex=regex, keys=tuple(keys))
