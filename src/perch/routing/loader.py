"""Loading route declarations and controllers from the application tree.

A routes file declares routes in one of two forms. A ``routes``
function that receives a ``match`` callable::

    def routes(match):
        match("users/login", "users#login")
        match("users/:id", "users#show")
        match("admin", "admin#index", {"role": "admin"})

or a module-level ``ROUTES`` sequence of 2- or 3-tuples::

    ROUTES = [
        ("users/login", "users#login"),
        ("old-home", {"redirect": "/"}),
    ]

Controllers live beside it as ``<name>_controller.py`` modules whose
module-level functions are the actions.
"""

from __future__ import annotations

import importlib.util
from collections.abc import Mapping, Sequence
from pathlib import Path
from types import ModuleType
from typing import Any

from perch.errors import ActionNotFound, ConfigurationError

# (pattern, spec) or (pattern, spec, extra_meta)
type RouteDeclaration = tuple[Any, ...]


def load_module(path: Path, module_name: str) -> ModuleType:
    """Execute the Python file at *path* as a fresh module.

    Raises ``ConfigurationError`` if the file is missing or fails to
    import; the original exception is chained.
    """
    if not path.is_file():
        msg = f"File not found: {path}"
        raise ConfigurationError(msg)

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        msg = f"Cannot load {path} as a Python module."
        raise ConfigurationError(msg)

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        msg = f"Error importing {path}: {exc}"
        raise ConfigurationError(msg) from exc
    return module


def load_route_declarations(routes_file: Path) -> list[RouteDeclaration]:
    """Read route declarations from *routes_file*, in declaration order."""
    module = load_module(routes_file, f"_perch_routes_{id(routes_file)}")

    declarations: list[RouteDeclaration] = []
    routes_fn = getattr(module, "routes", None)
    if callable(routes_fn):

        def match(
            pattern: str,
            spec: str | Mapping[str, Any],
            extra: Mapping[str, Any] | None = None,
        ) -> None:
            declarations.append((pattern, spec, extra))

        try:
            routes_fn(match)
        except Exception as exc:
            msg = f"Error declaring routes in {routes_file}: {exc}"
            raise ConfigurationError(msg) from exc
        return declarations

    table = getattr(module, "ROUTES", None)
    if table is None:
        msg = f"Routes file {routes_file} defines neither a routes(match) function nor ROUTES."
        raise ConfigurationError(msg)

    for item in table:
        if not isinstance(item, Sequence) or isinstance(item, str) or len(item) not in (2, 3):
            msg = f"Invalid route declaration in {routes_file}: {item!r}"
            raise ConfigurationError(msg)
        declarations.append(tuple(item))
    return declarations


def load_controller(controllers_dir: Path, name: str) -> ModuleType:
    """Load ``<controllers_dir>/<name>_controller.py``.

    Raises ``ActionNotFound`` if no such file exists.
    """
    path = controllers_dir / f"{name}_controller.py"
    if not path.is_file():
        msg = f"Controller {name!r} not found (expected {path})."
        raise ActionNotFound(msg)
    return load_module(path, f"_perch_controller_{name}")
