"""Router configuration.

RouterConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    Every path is derived from ``entry_path`` unless overridden::

        config = RouterConfig(entry_path="myapp")
        config.routes_file      # myapp/app/routes.py
        config.controllers_dir  # myapp/app/controllers
        config.templates_dir    # myapp/app/templates
    """

    # Application layout
    entry_path: str | Path = "."
    routes_path: str | Path | None = None
    controllers_path: str | Path | None = None

    # Templates
    template_dir: str | Path | None = None
    template_extension: str = ".html"
    autoescape: bool = True

    debug: bool = False

    @property
    def routes_file(self) -> Path:
        if self.routes_path is not None:
            return Path(self.routes_path)
        return Path(self.entry_path) / "app" / "routes.py"

    @property
    def controllers_dir(self) -> Path:
        if self.controllers_path is not None:
            return Path(self.controllers_path)
        return Path(self.entry_path) / "app" / "controllers"

    @property
    def templates_dir(self) -> Path:
        if self.template_dir is not None:
            return Path(self.template_dir)
        return Path(self.entry_path) / "app" / "templates"
