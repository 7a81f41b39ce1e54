"""Engine configuration options.

Recognised keys are validated and applied through the engine's
configuration API; any other key is kept in the engine's ConfigStore.

Example:
    {
        "src": ["./components", "./docs"],
        "adapters": [{"name": "html", "render": render_html, "extensions": [".html"]}],
        "plugins": {"files": [tag_readme]},
        "methods": {"components": {"count": count_components}},
        "transformer": files_to_components,
        "project": {"title": "Pattern library"}
    }
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from partsmith.schemas.adapter import Adapter

TargetKey = Literal["files", "components"]


class EngineOptions(BaseModel):
    """Shape of the mapping accepted by ``Engine.configure``."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="allow")

    src: str | Path | list[str | Path] | None = None
    transformer: Callable[..., Any] | None = None
    adapters: list[Adapter] | None = None
    extensions: list[Callable[..., Any]] | None = None
    plugins: dict[TargetKey, list[Callable[..., Any]]] | None = None
    methods: dict[TargetKey, dict[str, Callable[..., Any]]] | None = None

    @property
    def settings(self) -> dict[str, Any]:
        """Keys not recognised as engine options."""
        return dict(self.model_extra or {})
