import logging
from typing import Optional

from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory
from prompt_toolkit.shortcuts import PromptSession
from prompt_toolkit.styles import Style

from serial_cmdline.command_line import CommandLine
from serial_cmdline.console.key_bindings import get_key_bindings
from serial_cmdline.console.rendering import (
    clear_terminal,
    render_banner,
    render_error,
    render_output,
)
from serial_cmdline.editor import CARRIAGE_RETURN, INPUT_ENCODING
from serial_cmdline.runtime_config import RuntimeConfig, get_data_dir
from serial_cmdline.stream import BufferStream

logger = logging.getLogger(__name__)

EXIT_WORDS = ("exit", "quit")


class ReplConsole:
    """Console that runs an interactive local prompt against the command line.

    prompt_toolkit does the line editing; each submitted line is pushed through
    an in-memory stream so handlers run exactly as they would on a device.

    "exit" and "quit" end the session unless a command of that name is
    registered, in which case the command runs instead. Characters outside
    latin-1 cannot reach the editor and are replaced with "?".
    """

    command_line: CommandLine
    prompt_session: Optional[PromptSession[str]]

    style: Style = Style.from_dict(
        {"prompt": "ansicyan bold", "auto-suggestion": "#888888"}
    )

    def __init__(
        self, command_line: CommandLine, config: RuntimeConfig, greeting: str = ""
    ) -> None:
        self.command_line = command_line
        self.config = config
        self.greeting = greeting
        self.prompt_session = None

    @property
    def stream(self) -> BufferStream:
        stream = self.command_line.stream
        if not isinstance(stream, BufferStream):
            raise ValueError("The REPL needs an in-memory stream")
        return stream

    def is_exit(self, user_input: str) -> bool:
        """True if the input should end the session rather than run a command."""
        word = user_input.strip()
        return (
            word.lower() in EXIT_WORDS
            and word not in self.command_line.get_command_names()
        )

    def process(self, user_input: str) -> str:
        """Run one line through the command line; return what the handler wrote."""
        stream = self.stream
        # The editor reads one character per byte
        stream.feed(user_input.encode(INPUT_ENCODING, errors="replace"))
        stream.feed(bytes([CARRIAGE_RETURN]))
        try:
            self.command_line.run()
        except Exception as e:
            logger.exception(f"Handler for '{user_input}' failed")
            render_error(f"{self.command_line.get_word()}: {e}")
        return stream.drain().decode(stream.encoding, errors="replace")

    async def run(self) -> None:
        """Interactive REPL loop for the console interface."""
        clear_terminal()
        names = self.command_line.get_command_names()
        render_banner(
            "SERIAL CMDLINE",
            {"Mode": self.config.mode.value, "Commands": ", ".join(names)},
        )
        render_output(self.greeting)

        # Store prompt history under the XDG data directory
        history_dir = get_data_dir()
        history_dir.mkdir(parents=True, exist_ok=True)
        history_path = history_dir / "prompt_history"

        self.prompt_session = PromptSession(
            message=self.command_line.prompt,
            history=FileHistory(str(history_path)),
            auto_suggest=AutoSuggestFromHistory(),
            completer=WordCompleter(sorted(set(names))),
            complete_while_typing=True,
            key_bindings=get_key_bindings(self.command_line.get_command_line),
            style=self.style,
        )

        try:
            while True:
                logger.info("Prompting user...")
                user_input = await self.prompt_session.prompt_async()
                if self.is_exit(user_input):
                    break
                render_output(self.process(user_input))
        except (KeyboardInterrupt, EOFError):
            pass
