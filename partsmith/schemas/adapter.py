"""Render adapter descriptor."""

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Adapter(BaseModel):
    """A named rendering capability.

    Registering an adapter tags matching file records with its name and
    adds a ``render.<name>`` method to components.

    Attributes:
        name: Adapter identifier, used in the render method name
        render: ``render(target, context, engine)``, sync or async
        extensions: File extensions handled by this adapter
        match: Optional predicate over a file record, checked in addition
            to ``extensions``
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="allow", frozen=True)

    name: str = Field(min_length=1, pattern=r"^[A-Za-z0-9_-]+$")
    render: Callable[..., Any]
    extensions: tuple[str, ...] = Field(default_factory=tuple)
    match: Callable[[Any], Any] | None = None

    @field_validator("extensions", mode="before")
    @classmethod
    def normalize_extensions(cls, value: Any) -> Any:
        """Lowercase extensions and give them a leading dot."""
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set)):
            return value
        normalized = []
        for ext in value:
            if not isinstance(ext, str) or not ext.strip("."):
                raise ValueError(f"Invalid extension: {ext!r}")
            normalized.append("." + ext.lower().lstrip("."))
        return tuple(normalized)

    def handles(self, record: Any) -> bool:
        """Check whether a file record should be rendered by this adapter."""
        if self.match is not None and self.match(record):
            return True
        if not self.extensions or not isinstance(record, Mapping):
            return False
        ext = record.get("ext")
        return isinstance(ext, str) and ext.lower() in self.extensions
