"""Kida environment setup and view rendering.

Creates a kida Environment from perch's RouterConfig. The environment is
created once at startup and shared by every ``ResponseWriter``.
"""

from collections.abc import Mapping
from typing import Any

from kida import Environment, FileSystemLoader

from perch.config import RouterConfig


def create_environment(config: RouterConfig) -> Environment:
    """Create a kida Environment rooted at ``config.templates_dir``."""
    return Environment(
        loader=FileSystemLoader(str(config.templates_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )


def render_view(
    env: Environment,
    view_path: str,
    options: Mapping[str, Any],
    extension: str = ".html",
) -> str:
    """Render a view with the handler's render options.

    ``options`` is the mapping handlers pass to ``response.render``:
    ``locals`` is flattened into the template context, ``app`` and
    ``req`` are exposed alongside it.
    """
    name = view_path if view_path.endswith(extension) else f"{view_path}{extension}"
    context: dict[str, Any] = dict(options.get("locals") or {})
    context["app"] = options.get("app")
    context["req"] = options.get("req")
    template = env.get_template(name)
    return template.render(context)
