"""
Command table and dispatch.

Handlers are plain callables taking the command context (for word access) and
the stream. A handler may answer by returning a string, which is written to
the stream as-is, or by writing to the stream itself.

Registering the same name twice is allowed, but lookup is a first-match scan
in registration order, so the later entry can never be reached.
"""

import logging
from typing import Callable, List, Optional, Protocol, Tuple

from serial_cmdline.stream import Stream

logger = logging.getLogger(__name__)

MAX_HANDLERS = 16


class CommandContext(Protocol):
    """Word access a handler gets for the line that triggered it."""

    def get_word(self, index: int = 0) -> str:
        ...

    def get_command_line(self) -> str:
        ...


CommandHandler = Callable[..., Optional[str]]


def unknown_command(context: CommandContext, stream: Stream) -> None:
    """Built-in default handler: say the command was not recognized."""
    stream.print(f'Unknown command "{context.get_word()}".\n')


class CommandDispatcher:
    """Fixed-capacity table of command handlers plus a default handler."""

    def __init__(self, max_handlers: int = MAX_HANDLERS) -> None:
        self.max_handlers = max_handlers
        self.default_handler: Optional[CommandHandler] = unknown_command
        self._entries: List[Tuple[str, CommandHandler]] = []

    @property
    def handler_count(self) -> int:
        return len(self._entries)

    @property
    def command_names(self) -> List[str]:
        """Registered names in registration order (duplicates included)."""
        return [name for name, _ in self._entries]

    def register(self, name: str, handler: CommandHandler) -> bool:
        """Append a handler for name.

        Returns:
            False, leaving the table untouched, if the table is full.
        """
        if len(self._entries) >= self.max_handlers:
            logger.warning(
                f"Cannot register '{name}': table full ({self.max_handlers} handlers)"
            )
            return False
        self._entries.append((name, handler))
        logger.debug(f"Registered handler for '{name}'")
        return True

    def register_default(self, handler: Optional[CommandHandler]) -> None:
        """Replace the default handler; None disables default handling."""
        self.default_handler = handler

    def find(self, name: str) -> Optional[CommandHandler]:
        """Return the first handler registered under exactly name, if any."""
        for entry_name, handler in self._entries:
            if entry_name == name:
                return handler
        return None

    def lookup(self, name: str) -> Optional[CommandHandler]:
        """Return the handler that would run for name, without running it."""
        handler = self.find(name)
        if handler is None:
            return self.default_handler
        return handler

    def dispatch(self, context: CommandContext, stream: Stream) -> bool:
        """Run the handler for the context's command word.

        Returns:
            True if a handler ran.
        """
        command = context.get_word(0)
        if not command:
            return False

        handler = self.find(command)
        if handler is None:
            logger.debug(f"No handler for '{command}', using default")
            handler = self.default_handler
        if handler is None:
            return False

        logger.debug(f"Dispatching '{context.get_command_line()}'")
        response = handler(context, stream)
        if response:
            stream.print(response)
        return True
