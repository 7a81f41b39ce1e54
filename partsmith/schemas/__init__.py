"""Pydantic schemas for configuration descriptors."""

from partsmith.schemas.adapter import Adapter
from partsmith.schemas.command import Command
from partsmith.schemas.method import MethodDescriptor
from partsmith.schemas.options import EngineOptions

__all__ = [
    "Adapter",
    "Command",
    "EngineOptions",
    "MethodDescriptor",
]
