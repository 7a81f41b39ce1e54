"""Registry for commands contributed by extensions.

The engine does not run commands; it only collects them for a command
runner.
"""

from collections.abc import Iterator

from partsmith.core import validate
from partsmith.core.errors import InvalidCommand
from partsmith.infra.logging import get_logger
from partsmith.schemas.command import Command

logger = get_logger(__name__)


class CommandRegistry:
    """Commands keyed by name, in registration order."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def add(self, descriptor: object) -> Command:
        """Validate and register a command.

        Raises:
            InvalidCommand: If the descriptor is malformed or the name is taken
        """
        command = validate.command(descriptor)
        if command.name in self._commands:
            raise InvalidCommand(f"Command '{command.name}' is already registered")
        self._commands[command.name] = command
        logger.debug("Command registered", name=command.name)
        return command

    def get(self, name: str) -> Command:
        """Get a registered command.

        Raises:
            KeyError: If command not registered
        """
        if name not in self._commands:
            raise KeyError(f"Command not registered: {name}")
        return self._commands[name]

    def names(self) -> list[str]:
        return list(self._commands.keys())

    def __iter__(self) -> Iterator[Command]:
        return iter(list(self._commands.values()))

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands
