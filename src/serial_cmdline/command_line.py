"""
CommandLine: a line editor and a command dispatcher bound to one stream.

Typical use from an embedding program:

    cmd = CommandLine(SerialStream.open("/dev/ttyUSB0"))
    cmd.register_handler("status", lambda cmd, stream: "ok\\n")
    while True:
        cmd.run()

run() never blocks: it drains whatever bytes are waiting and returns, after
running at most one handler.
"""

import logging
from typing import List, Optional

from serial_cmdline.dispatcher import (
    MAX_HANDLERS,
    CommandDispatcher,
    CommandHandler,
)
from serial_cmdline.editor import PROMPT, EditorState, LineEditor
from serial_cmdline.stream import Stream

logger = logging.getLogger(__name__)


class CommandLine:
    """Command line UI over a Stream."""

    def __init__(
        self,
        stream: Stream,
        echo: bool = True,
        max_handlers: int = MAX_HANDLERS,
        prompt: str = PROMPT,
    ) -> None:
        self._stream = stream
        self._editor = LineEditor(stream, echo=echo, prompt=prompt)
        self._dispatcher = CommandDispatcher(max_handlers)

    @property
    def stream(self) -> Stream:
        return self._stream

    @property
    def echo(self) -> bool:
        return self._editor.echo

    @property
    def prompt(self) -> str:
        return self._editor.prompt

    @property
    def max_handlers(self) -> int:
        return self._dispatcher.max_handlers

    @property
    def state(self) -> EditorState:
        return self._editor.state

    def register_handler(self, name: str, handler: CommandHandler) -> bool:
        """Attach the handler for name; False if there are too many handlers."""
        return self._dispatcher.register(name, handler)

    def register_default_handler(self, handler: Optional[CommandHandler]) -> None:
        """Attach the handler for unrecognized commands (None for no handler)."""
        self._dispatcher.register_default(handler)

    def run(self) -> None:
        """Service the stream. Call this repeatedly from the main loop."""
        self._editor.begin_line()
        while self._stream.available():
            byte = self._stream.read()
            if byte < 0:
                break
            if self._editor.feed(byte) is not None:
                self._dispatcher.dispatch(self, self._stream)
                return

    def cancel(self) -> None:
        """Forget any partial input; the next run() reissues the prompt."""
        logger.debug("Command input cancelled")
        self._editor.cancel()

    def get_word(self, index: int = 0) -> str:
        """Return word number index (0 is the command) or "" if not entered."""
        return self._editor.get_word(index)

    def get_command_line(self) -> str:
        """Return the trimmed command line."""
        return self._editor.get_command_line()

    def get_handler_count(self) -> int:
        return self._dispatcher.handler_count

    def get_handler_for(self, name: str) -> Optional[CommandHandler]:
        """Return the handler for name, the default handler, or None."""
        return self._dispatcher.lookup(name)

    def get_command_names(self) -> List[str]:
        return self._dispatcher.command_names
