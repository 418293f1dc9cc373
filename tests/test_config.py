"""Tests for perch.config — RouterConfig frozen dataclass."""

from pathlib import Path

import pytest

from perch.config import RouterConfig


class TestRouterConfig:
    def test_defaults(self) -> None:
        cfg = RouterConfig()

        assert cfg.entry_path == "."
        assert cfg.template_extension == ".html"
        assert cfg.autoescape is True
        assert cfg.debug is False

    def test_derived_paths(self) -> None:
        cfg = RouterConfig(entry_path="myapp")

        assert cfg.routes_file == Path("myapp/app/routes.py")
        assert cfg.controllers_dir == Path("myapp/app/controllers")
        assert cfg.templates_dir == Path("myapp/app/templates")

    def test_overrides(self, tmp_path: Path) -> None:
        cfg = RouterConfig(
            entry_path="ignored",
            routes_path=tmp_path / "r.py",
            controllers_path=tmp_path / "c",
            template_dir=tmp_path / "t",
        )

        assert cfg.routes_file == tmp_path / "r.py"
        assert cfg.controllers_dir == tmp_path / "c"
        assert cfg.templates_dir == tmp_path / "t"

    def test_frozen(self) -> None:
        cfg = RouterConfig()

        with pytest.raises(AttributeError):
            cfg.debug = True  # type: ignore[misc]
