"""Tests for the Engine configuration API."""

import os
from typing import Any
from unittest.mock import MagicMock

import pytest

from partsmith import __version__
from partsmith.core.engine import Engine, default_transformer, normalize_paths
from partsmith.core.errors import (
    InvalidAdapter,
    InvalidCallback,
    InvalidCommand,
    InvalidConfig,
    InvalidEntityType,
    InvalidExtension,
    InvalidMethod,
    InvalidPlugin,
    InvalidSrc,
    InvalidTransformer,
)
from tests.fakes import FakeSource


def noop_plugin(records: Any, engine: Any) -> Any:
    return records


def noop_method(args: tuple[Any, ...], state: Any, engine: Any) -> None:
    return None


def render(target: Any, context: Any, engine: Any) -> str:
    return "rendered"


@pytest.fixture
def bare_engine() -> Engine:
    return Engine(source=FakeSource())


class TestConstruction:
    """Tests for Engine construction."""

    def test_defaults(self, bare_engine: Engine) -> None:
        assert bare_engine.state.files is None
        assert bare_engine.state.components is None
        assert bare_engine.src == ()
        assert bare_engine.transformer is default_transformer
        assert bare_engine.version == __version__
        assert bare_engine.get() == {}

    def test_config_is_applied(self, tmp_path) -> None:
        engine = Engine({"src": str(tmp_path), "project": {"title": "Library"}}, source=FakeSource())

        assert engine.src == (str(tmp_path),)
        assert engine.get("project.title") == "Library"

    def test_invalid_config_fails_fast(self) -> None:
        with pytest.raises(InvalidConfig):
            Engine(["not", "a", "mapping"])  # type: ignore[arg-type]

    def test_default_error_listener_installed(self, bare_engine: Engine) -> None:
        assert len(bare_engine.listeners("error")) == 1


class TestSrc:
    """Tests for add_src."""

    def test_single_path_is_made_absolute(self, bare_engine: Engine) -> None:
        bare_engine.add_src("patterns")

        assert bare_engine.src == (os.path.abspath("patterns"),)

    def test_list_and_pathlike(self, bare_engine: Engine, tmp_path) -> None:
        bare_engine.add_src([tmp_path / "a", str(tmp_path / "b")])

        assert bare_engine.src == (str(tmp_path / "a"), str(tmp_path / "b"))

    def test_duplicates_skipped(self, bare_engine: Engine, tmp_path) -> None:
        bare_engine.add_src(str(tmp_path)).add_src([str(tmp_path), str(tmp_path / "x")])

        assert bare_engine.src == (str(tmp_path), str(tmp_path / "x"))

    def test_user_home_expanded(self, bare_engine: Engine) -> None:
        bare_engine.add_src("~/patterns")

        assert bare_engine.src == (os.path.join(os.path.expanduser("~"), "patterns"),)

    @pytest.mark.parametrize("value", ["", 3, None, {"path": "x"}, b"bytes"])
    def test_invalid_src(self, bare_engine: Engine, value: Any) -> None:
        with pytest.raises(InvalidSrc):
            bare_engine.add_src(value)

    def test_invalid_entry_adds_nothing(self, bare_engine: Engine, tmp_path) -> None:
        with pytest.raises(InvalidSrc):
            bare_engine.add_src([str(tmp_path), ""])

        assert bare_engine.src == ()

    def test_adding_src_logs(self, bare_engine: Engine, tmp_path) -> None:
        listener = MagicMock()
        bare_engine.on("log.debug", listener)

        bare_engine.add_src(str(tmp_path))

        listener.assert_called_once_with(f"Adding src: {tmp_path}", None, "debug")

    def test_normalize_paths_returns_list(self) -> None:
        assert normalize_paths("a") == [os.path.abspath("a")]


class TestPluginsAndMethods:
    """Tests for add_plugin and add_method."""

    def test_plugin_defaults_to_components(self, bare_engine: Engine) -> None:
        bare_engine.add_plugin(noop_plugin)

        assert bare_engine.components.plugins.plugins == (noop_plugin,)
        assert len(bare_engine.files.plugins) == 0

    def test_plugin_on_files(self, bare_engine: Engine) -> None:
        bare_engine.add_plugin(noop_plugin, "files")

        assert bare_engine.files.plugins.plugins == (noop_plugin,)
        assert len(bare_engine.components.plugins) == 0

    def test_plugin_invalid_target(self, bare_engine: Engine) -> None:
        with pytest.raises(InvalidEntityType):
            bare_engine.add_plugin(noop_plugin, "pages")

    def test_plugin_not_callable(self, bare_engine: Engine) -> None:
        with pytest.raises(InvalidPlugin):
            bare_engine.add_plugin("plugin")  # type: ignore[arg-type]

    def test_method_registration(self, bare_engine: Engine) -> None:
        bare_engine.add_method("count", noop_method)
        bare_engine.add_method("names", noop_method, "files")

        assert bare_engine.components.methods.names() == ["count"]
        assert bare_engine.files.methods.names() == ["names"]

    def test_method_validation(self, bare_engine: Engine) -> None:
        with pytest.raises(InvalidMethod):
            bare_engine.add_method("", noop_method)

        with pytest.raises(InvalidMethod):
            bare_engine.add_method("count", None)  # type: ignore[arg-type]

        with pytest.raises(InvalidEntityType):
            bare_engine.add_method("count", noop_method, "pages")

        assert len(bare_engine.components.methods) == 0

    def test_method_cannot_shadow_collection_api(self, bare_engine: Engine) -> None:
        with pytest.raises(InvalidMethod, match="shadows a Collection attribute"):
            bare_engine.add_method("filter", noop_method)

        with pytest.raises(InvalidMethod):
            bare_engine.add_method("find.by_tag", noop_method, "files")

        assert len(bare_engine.components.methods) == 0
        assert len(bare_engine.files.methods) == 0

    def test_registration_does_not_touch_state(self, bare_engine: Engine) -> None:
        bare_engine.add_plugin(noop_plugin).add_method("count", noop_method)

        assert bare_engine.state.components is None


class TestTransformerAndExtensions:
    """Tests for set_transformer and add_extension."""

    def test_set_transformer_replaces(self, bare_engine: Engine) -> None:
        first = MagicMock()
        second = MagicMock()

        bare_engine.set_transformer(first).set_transformer(second)

        assert bare_engine.transformer is second

    def test_invalid_transformer(self, bare_engine: Engine) -> None:
        with pytest.raises(InvalidTransformer):
            bare_engine.set_transformer("transform")  # type: ignore[arg-type]

    def test_extension_called_immediately(self, bare_engine: Engine) -> None:
        def extension(engine: Engine) -> None:
            engine.add_plugin(noop_plugin, "files")
            engine.add_method("count", noop_method)

        assert bare_engine.add_extension(extension) is bare_engine
        assert len(bare_engine.files.plugins) == 1
        assert "count" in bare_engine.components.methods

    def test_invalid_extension(self, bare_engine: Engine) -> None:
        with pytest.raises(InvalidExtension):
            bare_engine.add_extension(None)  # type: ignore[arg-type]

    def test_async_extension_rejected(self, bare_engine: Engine) -> None:
        async def extension(engine: Engine) -> None:
            return None

        with pytest.raises(InvalidExtension, match="synchronous"):
            bare_engine.add_extension(extension)


class TestAdaptersAndCommands:
    """Tests for add_adapter and add_command."""

    def test_adapter_registers_plugin_and_method(self, bare_engine: Engine) -> None:
        bare_engine.add_adapter({"name": "html", "render": render, "extensions": [".html"]})

        assert "html" in bare_engine.adapters
        assert len(bare_engine.files.plugins) == 1
        assert len(bare_engine.components.plugins) == 0
        assert bare_engine.components.methods.names() == ["render.html"]

    def test_duplicate_adapter_rejected(self, bare_engine: Engine) -> None:
        bare_engine.add_adapter({"name": "html", "render": render})

        with pytest.raises(InvalidAdapter):
            bare_engine.add_adapter({"name": "html", "render": render})

        assert len(bare_engine.files.plugins) == 1

    def test_malformed_adapter(self, bare_engine: Engine) -> None:
        with pytest.raises(InvalidAdapter):
            bare_engine.add_adapter({"render": render})

        assert len(bare_engine.files.plugins) == 0

    def test_command(self, bare_engine: Engine) -> None:
        bare_engine.add_command({"name": "build", "handler": noop_method})

        assert bare_engine.commands.names() == ["build"]

        with pytest.raises(InvalidCommand):
            bare_engine.add_command({"name": "build", "handler": noop_method})


class TestConfigure:
    """Tests for configure."""

    def test_applies_every_option(self, bare_engine: Engine, tmp_path) -> None:
        extension = MagicMock()
        transformer = MagicMock()

        bare_engine.configure(
            {
                "src": [str(tmp_path)],
                "adapters": [{"name": "html", "render": render, "extensions": ["html"]}],
                "plugins": {"files": [noop_plugin], "components": [noop_plugin]},
                "methods": {"components": {"count": noop_method}},
                "transformer": transformer,
                "extensions": [extension],
                "theme": {"colour": "green"},
            }
        )

        assert bare_engine.src == (str(tmp_path),)
        assert bare_engine.adapters.names() == ["html"]
        assert len(bare_engine.files.plugins) == 2
        assert len(bare_engine.components.plugins) == 1
        assert bare_engine.components.methods.names() == ["render.html", "count"]
        assert bare_engine.transformer is transformer
        assert bare_engine.get("theme.colour") == "green"
        extension.assert_called_once_with(bare_engine)

    def test_invalid_option_applies_nothing(self, bare_engine: Engine, tmp_path) -> None:
        with pytest.raises(InvalidMethod):
            bare_engine.configure(
                {
                    "src": str(tmp_path),
                    "plugins": {"files": [noop_plugin]},
                    "methods": {"components": {"": noop_method}},
                }
            )

        assert bare_engine.src == ()
        assert len(bare_engine.files.plugins) == 0

    def test_duplicate_adapters_in_options(self, bare_engine: Engine) -> None:
        with pytest.raises(InvalidAdapter, match="more than once"):
            bare_engine.configure(
                {
                    "adapters": [
                        {"name": "html", "render": render},
                        {"name": "html", "render": render},
                    ]
                }
            )

        assert len(bare_engine.adapters) == 0

    def test_non_mapping(self, bare_engine: Engine) -> None:
        with pytest.raises(InvalidConfig):
            bare_engine.configure("src")  # type: ignore[arg-type]

    def test_set_and_get(self, bare_engine: Engine) -> None:
        assert bare_engine.set("a.b", 1) is bare_engine
        assert bare_engine.get("a.b") == 1
        assert bare_engine.get("a.c", "default") == "default"
        assert bare_engine.get() == {"a": {"b": 1}}


class TestWatchAndLog:
    """Tests for watch and log."""

    def test_watch_merges_paths(self, tmp_path) -> None:
        source = FakeSource()
        engine = Engine(source=source).add_src(str(tmp_path / "a"))
        callback = MagicMock()

        handle = engine.watch([str(tmp_path / "b"), str(tmp_path / "a")], callback)

        assert handle["paths"] == [str(tmp_path / "a"), str(tmp_path / "b")]
        assert handle["on_change"] is callback

    def test_watch_callback_only(self, tmp_path) -> None:
        source = FakeSource()
        engine = Engine(source=source).add_src(str(tmp_path))
        callback = MagicMock()

        handle = engine.watch(callback)

        assert handle["paths"] == [str(tmp_path)]
        assert handle["on_change"] is callback

    def test_watch_default_callback(self, bare_engine: Engine) -> None:
        handle = bare_engine.watch()

        assert callable(handle["on_change"])

    def test_watch_invalid_callback(self, bare_engine: Engine) -> None:
        with pytest.raises(InvalidCallback):
            bare_engine.watch(None, "callback")  # type: ignore[arg-type]

    def test_log_defaults_to_debug(self, bare_engine: Engine) -> None:
        listener = MagicMock()
        bare_engine.on("log.*", listener)

        assert bare_engine.log("hello") is bare_engine

        listener.assert_called_once_with("hello", None, "debug")

    def test_log_with_level_and_data(self, bare_engine: Engine) -> None:
        listener = MagicMock()
        bare_engine.on("log.warning", listener)

        bare_engine.log("careful", "warning", {"n": 1})

        listener.assert_called_once_with("careful", {"n": 1}, "warning")

    def test_log_data_without_level(self, bare_engine: Engine) -> None:
        listener = MagicMock()
        bare_engine.on("log.debug", listener)

        bare_engine.log("payload", {"n": 1})

        listener.assert_called_once_with("payload", {"n": 1}, "debug")
