"""Collection method descriptor."""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MethodDescriptor(BaseModel):
    """A method to register on a target.

    Attributes:
        name: Method name; dots create namespaces (``render.html``)
        handler: ``handler(args, state, engine)``
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid", frozen=True)

    name: str = Field(min_length=1, pattern=r"^[^.\s]+(\.[^.\s]+)*$")
    handler: Callable[..., Any]
