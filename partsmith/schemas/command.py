"""Command descriptor passed through to the command registry."""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Command(BaseModel):
    """A named command exposed by an extension.

    Attributes:
        name: Command name, unique per engine
        handler: Callable executed by the command runner
        description: Human readable summary
        options: Free-form option declarations for the command runner
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid", frozen=True)

    name: str = Field(min_length=1)
    handler: Callable[..., Any]
    description: str = ""
    options: dict[str, Any] = Field(default_factory=dict)
