"""Tests for callback naming conventions, loaders, and discovery sources."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from callbackhub.callbacks import (
    Callback,
    ChainLoader,
    DirectoryLoader,
    EntryPointLoader,
    EntryPointPluginSource,
    FactoryLoader,
    PackageLoader,
    StaticPluginSource,
    callback_identifier,
    callback_module,
    underscore,
)
from callbackhub.callbacks.loader import ENTRY_POINT_GROUP


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_callback(root: Path, plugin_dir: str, module: str, body: str) -> Path:
    path = root / plugin_dir / f"{module}.py"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


class BlogCallback(Callback):
    pass


class FakeEntryPoint:
    """Stands in for importlib.metadata.EntryPoint."""

    def __init__(self, name: str, obj: Any = None, error: Exception | None = None) -> None:
        self.name = name
        self._obj = obj
        self._error = error

    def load(self) -> Any:
        if self._error is not None:
            raise self._error
        return self._obj


# ---------------------------------------------------------------------------
# Naming convention
# ---------------------------------------------------------------------------


class TestNamingConvention:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Blog", "blog"),
            ("BlogPosts", "blog_posts"),
            ("PageCache", "page_cache"),
            ("blog", "blog"),
            ("HTMLParser", "h_t_m_l_parser"),
        ],
    )
    def test_underscore(self, name: str, expected: str) -> None:
        assert underscore(name) == expected

    def test_callback_identifier(self) -> None:
        assert callback_identifier("Blog") == "BlogCallback"

    def test_callback_module(self) -> None:
        assert callback_module("BlogPosts") == "blog_posts_callback"


# ---------------------------------------------------------------------------
# FactoryLoader
# ---------------------------------------------------------------------------


class TestFactoryLoader:
    def test_resolves_registered(self) -> None:
        loader = FactoryLoader({"Blog": BlogCallback})
        assert loader.resolve("Blog") is BlogCallback

    def test_unknown_returns_none(self) -> None:
        assert FactoryLoader().resolve("Blog") is None

    def test_register_and_names(self) -> None:
        loader = FactoryLoader()
        loader.register("Search", BlogCallback)
        loader.register("Blog", BlogCallback)
        assert loader.names() == ["Search", "Blog"]

    def test_mapping_is_copied(self) -> None:
        mapping = {"Blog": BlogCallback}
        loader = FactoryLoader(mapping)
        mapping.clear()
        assert loader.resolve("Blog") is BlogCallback


# ---------------------------------------------------------------------------
# DirectoryLoader
# ---------------------------------------------------------------------------


class TestDirectoryLoader:
    def test_path_for(self, tmp_path: Path) -> None:
        loader = DirectoryLoader(tmp_path)
        assert loader.path_for("BlogPosts") == tmp_path / "blog_posts" / "blog_posts_callback.py"

    def test_loads_callback_class(self, tmp_path: Path) -> None:
        _write_callback(
            tmp_path,
            "blog_posts",
            "blog_posts_callback",
            """
            from callbackhub.callbacks.base import Callback

            class BlogPostsCallback(Callback):
                def on_before_filter(self, context):
                    context.append("blog")
            """,
        )
        factory = DirectoryLoader(tmp_path).resolve("BlogPosts")
        assert factory is not None
        assert factory.__name__ == "BlogPostsCallback"
        ctx: list[str] = []
        factory().on_before_filter(ctx)
        assert ctx == ["blog"]

    def test_missing_file_returns_none(self, tmp_path: Path) -> None:
        assert DirectoryLoader(tmp_path).resolve("Blog") is None

    def test_missing_class_returns_none(self, tmp_path: Path) -> None:
        _write_callback(tmp_path, "blog", "blog_callback", "VALUE = 1\n")
        assert DirectoryLoader(tmp_path).resolve("Blog") is None

    def test_non_callback_class_returns_none(self, tmp_path: Path) -> None:
        _write_callback(
            tmp_path,
            "blog",
            "blog_callback",
            """
            class BlogCallback:
                pass
            """,
        )
        assert DirectoryLoader(tmp_path).resolve("Blog") is None

    def test_broken_module_returns_none(self, tmp_path: Path) -> None:
        _write_callback(tmp_path, "blog", "blog_callback", "raise RuntimeError('bad plugin')\n")
        assert DirectoryLoader(tmp_path).resolve("Blog") is None
        assert "callbackhub_plugins.blog_callback" not in sys.modules

    def test_module_cached_per_loader(self, tmp_path: Path) -> None:
        _write_callback(
            tmp_path,
            "blog",
            "blog_callback",
            """
            from callbackhub.callbacks.base import Callback

            class BlogCallback(Callback):
                pass
            """,
        )
        loader = DirectoryLoader(tmp_path)
        assert loader.resolve("Blog") is loader.resolve("Blog")

    def test_dataclass_in_callback_file(self, tmp_path: Path) -> None:
        _write_callback(
            tmp_path,
            "blog",
            "blog_callback",
            """
            from dataclasses import dataclass

            from callbackhub.callbacks.base import Callback

            @dataclass
            class Settings:
                limit: int = 10

            class BlogCallback(Callback):
                settings = Settings()
            """,
        )
        factory = DirectoryLoader(tmp_path).resolve("Blog")
        assert factory is not None
        assert factory().settings.limit == 10

    def test_example_plugins(self, example_plugins_dir: Path) -> None:
        loader = DirectoryLoader(example_plugins_dir)
        assert loader.resolve("Audit").__name__ == "AuditCallback"
        assert loader.resolve("PageCache").__name__ == "PageCacheCallback"


# ---------------------------------------------------------------------------
# PackageLoader
# ---------------------------------------------------------------------------


@pytest.fixture
def plugin_package(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Create an importable ``hostapp_plugins`` package with a Blog callback."""
    pkg = tmp_path / "hostapp_plugins"
    (pkg / "blog").mkdir(parents=True)
    (pkg / "__init__.py").write_text("")
    (pkg / "blog" / "__init__.py").write_text("")
    (pkg / "blog" / "blog_callback.py").write_text(
        textwrap.dedent(
            """
            from callbackhub.callbacks.base import Callback

            class BlogCallback(Callback):
                pass
            """
        )
    )
    (pkg / "broken").mkdir()
    (pkg / "broken" / "__init__.py").write_text("")
    (pkg / "broken" / "broken_callback.py").write_text("import does_not_exist_anywhere\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    yield "hostapp_plugins"
    for name in [m for m in sys.modules if m.startswith("hostapp_plugins")]:
        del sys.modules[name]


class TestPackageLoader:
    def test_module_for(self) -> None:
        assert PackageLoader("app.plugins").module_for("BlogPosts") == (
            "app.plugins.blog_posts.blog_posts_callback"
        )

    def test_resolves_class(self, plugin_package: str) -> None:
        factory = PackageLoader(plugin_package).resolve("Blog")
        assert factory is not None
        assert factory.__name__ == "BlogCallback"

    def test_missing_module_returns_none(self, plugin_package: str) -> None:
        assert PackageLoader(plugin_package).resolve("Search") is None

    def test_broken_import_returns_none(self, plugin_package: str) -> None:
        assert PackageLoader(plugin_package).resolve("Broken") is None


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


class TestEntryPoints:
    def _patch(self, eps: list[FakeEntryPoint]):
        return patch("callbackhub.callbacks.loader.select_entry_points", return_value=eps)

    def test_loader_resolves_by_name(self) -> None:
        with self._patch([FakeEntryPoint("Search"), FakeEntryPoint("Blog", BlogCallback)]):
            assert EntryPointLoader().resolve("Blog") is BlogCallback

    def test_loader_missing_returns_none(self) -> None:
        with self._patch([]):
            assert EntryPointLoader().resolve("Blog") is None

    def test_loader_load_error_returns_none(self) -> None:
        with self._patch([FakeEntryPoint("Blog", error=ImportError("gone"))]):
            assert EntryPointLoader().resolve("Blog") is None

    def test_loader_non_callable_returns_none(self) -> None:
        with self._patch([FakeEntryPoint("Blog", obj="not callable")]):
            assert EntryPointLoader().resolve("Blog") is None

    def test_source_lists_names_once(self) -> None:
        eps = [FakeEntryPoint("Search"), FakeEntryPoint("Blog"), FakeEntryPoint("Search")]
        with patch("callbackhub.callbacks.discovery.select_entry_points", return_value=eps) as sel:
            assert EntryPointPluginSource().list_plugins() == ["Search", "Blog"]
        sel.assert_called_once_with(ENTRY_POINT_GROUP)

    def test_real_metadata_lookup_tolerates_unknown_group(self) -> None:
        assert EntryPointPluginSource("callbackhub.tests.no_such_group").list_plugins() == []


# ---------------------------------------------------------------------------
# ChainLoader / StaticPluginSource
# ---------------------------------------------------------------------------


class TestChainLoader:
    def test_first_hit_wins(self) -> None:
        class OtherBlog(Callback):
            pass

        chain = ChainLoader(
            FactoryLoader(),
            FactoryLoader({"Blog": BlogCallback}),
            FactoryLoader({"Blog": OtherBlog}),
        )
        assert chain.resolve("Blog") is BlogCallback

    def test_no_hit(self) -> None:
        assert ChainLoader(FactoryLoader()).resolve("Blog") is None

    def test_empty_chain(self) -> None:
        assert ChainLoader().resolve("Blog") is None


class TestStaticPluginSource:
    def test_preserves_order(self) -> None:
        assert StaticPluginSource(["Search", "Blog"]).list_plugins() == ["Search", "Blog"]

    def test_returns_copy(self) -> None:
        source = StaticPluginSource(["Blog"])
        source.list_plugins().append("Other")
        assert source.list_plugins() == ["Blog"]

    def test_accepts_generator(self) -> None:
        source = StaticPluginSource(name for name in ["A", "B"])
        assert source.list_plugins() == ["A", "B"]
