"""Core module - engine, pipelines, collections and registries."""

from partsmith.core.adapters import AdapterRegistry
from partsmith.core.collection import Collection
from partsmith.core.commands import CommandRegistry
from partsmith.core.config_store import ConfigStore
from partsmith.core.engine import Engine, EngineState, ParseResult, ParseStatus
from partsmith.core.events import EventBus
from partsmith.core.method_registry import Method, MethodRegistry
from partsmith.core.plugin_pipeline import PluginPipeline
from partsmith.core.target import TARGETS, Target

__all__ = [
    "AdapterRegistry",
    "Collection",
    "CommandRegistry",
    "ConfigStore",
    "Engine",
    "EngineState",
    "EventBus",
    "Method",
    "MethodRegistry",
    "ParseResult",
    "ParseStatus",
    "PluginPipeline",
    "TARGETS",
    "Target",
]
