"""Tests for the Adapter and Command schemas."""

import pytest
from pydantic import ValidationError

from partsmith.schemas.adapter import Adapter
from partsmith.schemas.command import Command
from partsmith.schemas.method import MethodDescriptor


def render(target, context, engine):
    return ""


class TestAdapter:
    """Tests for Adapter schema."""

    def test_minimal_adapter(self) -> None:
        adapter = Adapter(name="html", render=render)

        assert adapter.extensions == ()
        assert adapter.match is None

    def test_extensions_normalized(self) -> None:
        adapter = Adapter(name="html", render=render, extensions=["HTML", ".htm"])

        assert adapter.extensions == (".html", ".htm")

    def test_single_extension_string(self) -> None:
        adapter = Adapter(name="md", render=render, extensions="md")

        assert adapter.extensions == (".md",)

    @pytest.mark.parametrize("name", ["", "has space", "dotted.name"])
    def test_invalid_name(self, name: str) -> None:
        with pytest.raises(ValidationError):
            Adapter(name=name, render=render)

    def test_render_must_be_callable(self) -> None:
        with pytest.raises(ValidationError):
            Adapter(name="html", render="render")

    def test_empty_extension_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Adapter(name="html", render=render, extensions=["."])

    def test_extra_fields_kept(self) -> None:
        adapter = Adapter(name="html", render=render, engine_version="2")

        assert adapter.model_extra == {"engine_version": "2"}

    def test_handles_by_extension(self) -> None:
        adapter = Adapter(name="html", render=render, extensions=[".html"])

        assert adapter.handles({"ext": ".HTML"})
        assert not adapter.handles({"ext": ".md"})
        assert not adapter.handles({"name": "no-ext"})
        assert not adapter.handles("plain string")

    def test_handles_by_match(self) -> None:
        adapter = Adapter(
            name="readme",
            render=render,
            match=lambda record: record.get("base") == "README.md",
        )

        assert adapter.handles({"base": "README.md", "ext": ".md"})
        assert not adapter.handles({"base": "index.md", "ext": ".md"})

    def test_frozen(self) -> None:
        adapter = Adapter(name="html", render=render)

        with pytest.raises(ValidationError):
            adapter.name = "other"


class TestCommand:
    """Tests for Command schema."""

    def test_defaults(self) -> None:
        command = Command(name="build", handler=render)

        assert command.description == ""
        assert command.options == {}

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Command(name="build", handler=render, alias="b")


class TestMethodDescriptor:
    """Tests for MethodDescriptor schema."""

    @pytest.mark.parametrize("name", ["count", "render.html", "a.b.c"])
    def test_valid_names(self, name: str) -> None:
        assert MethodDescriptor(name=name, handler=render).name == name

    @pytest.mark.parametrize("name", ["", ".count", "render.", "a..b", "has space"])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(ValidationError):
            MethodDescriptor(name=name, handler=render)
