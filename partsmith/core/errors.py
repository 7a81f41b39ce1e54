"""Error taxonomy for the engine.

Configuration errors are raised synchronously by the configuration API,
before any state changes. Pipeline and source errors are raised during a
parse and delivered through the parse call's error channel.
"""

from typing import Any


class PartsmithError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(PartsmithError, ValueError):
    """Raised when a configuration call receives malformed input."""


class InvalidConfig(ConfigurationError):
    """Configuration options have the wrong shape."""


class InvalidSrc(ConfigurationError):
    """A source path is not a usable path string."""


class InvalidMethod(ConfigurationError):
    """A method descriptor is missing a name or a callable handler."""


class InvalidEntityType(ConfigurationError):
    """A target name is not one of the known targets."""


class InvalidPlugin(ConfigurationError):
    """A plugin is not callable."""


class InvalidExtension(ConfigurationError):
    """An extension is not callable."""


class InvalidTransformer(ConfigurationError):
    """A transformer is not callable."""


class InvalidCallback(ConfigurationError):
    """A parse callback is not callable or cannot take three arguments."""


class InvalidAdapter(ConfigurationError):
    """An adapter descriptor is malformed or its name is already registered."""


class InvalidCommand(ConfigurationError):
    """A command descriptor is malformed or its name is already registered."""


class PipelineError(PartsmithError):
    """A plugin or the transformer failed during a parse.

    The original exception is chained as ``__cause__`` and its message is
    kept as this error's message.

    Attributes:
        target: Lane that failed ("files", "components" or "transformer")
        step: Index of the failing plugin, None for the transformer
    """

    def __init__(self, message: str, target: str, step: int | None = None) -> None:
        super().__init__(message)
        self.target = target
        self.step = step

    @classmethod
    def wrap(cls, exc: BaseException, target: str, step: int | None = None) -> "PipelineError":
        """Build a PipelineError carrying the message of ``exc``."""
        return cls(str(exc), target=target, step=step)


class SourceIOError(PartsmithError):
    """The file-source collaborator failed to read or watch sources.

    Attributes:
        paths: Source paths involved in the failed operation
    """

    def __init__(self, message: str, paths: Any = None) -> None:
        super().__init__(message)
        self.paths = list(paths) if paths is not None else []
