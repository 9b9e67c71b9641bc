import asyncio
import logging
from typing import Protocol

from serial_cmdline.command_line import CommandLine
from serial_cmdline.console.rendering import render_banner, render_error, render_output
from serial_cmdline.console.repl_console import ReplConsole
from serial_cmdline.editor import INPUT_ENCODING
from serial_cmdline.runtime_config import RuntimeConfig
from serial_cmdline.stream import BufferStream

__all__ = ["ConsoleInterface", "HeadlessConsole", "PollingConsole", "ReplConsole"]

logger = logging.getLogger(__name__)


class ConsoleInterface(Protocol):
    """Common interface for console interactions."""

    command_line: CommandLine

    async def run(self) -> None:
        pass


class PollingConsole(ConsoleInterface):
    """Console that services a device stream (serial port or local TTY) by polling."""

    def __init__(
        self, command_line: CommandLine, config: RuntimeConfig, greeting: str = ""
    ) -> None:
        self.command_line = command_line
        self.config = config
        self.greeting = greeting
        self._should_stop = False

    def stop(self) -> None:
        """Leave the polling loop after the current iteration."""
        self._should_stop = True

    def poll(self) -> None:
        """One main-loop iteration: let the command line service its stream.

        Handler errors are reported and polling goes on. Stream errors (a
        serial device unplugged, a closed TTY) propagate and end the loop.
        """
        # Raises if the device has gone away, which ends the loop
        self.command_line.stream.available()
        try:
            self.command_line.run()
        except Exception as e:
            logger.exception(
                f"Handler for '{self.command_line.get_command_line()}' failed"
            )
            render_error(f"{self.command_line.get_word()}: {e}")

    async def run(self) -> None:
        """Poll the command line until stopped or interrupted."""
        details = {"Mode": self.config.mode.value}
        if self.config.port:
            details["Port"] = f"{self.config.port} @ {self.config.baudrate} baud"
        details["Echo"] = "on" if self.command_line.echo else "off"
        render_banner("SERIAL CMDLINE", details)

        if self.greeting:
            self.command_line.stream.print(self.greeting)

        logger.info(f"Polling every {self.config.poll_interval}s")
        while not self._should_stop:
            self.poll()
            await asyncio.sleep(self.config.poll_interval)


class HeadlessConsole(ConsoleInterface):
    """Console that runs a single command line and prints what it wrote."""

    def __init__(self, command_line: CommandLine, config: RuntimeConfig) -> None:
        self.command_line = command_line
        self.config = config

    async def run(self) -> None:
        """
        Feed the configured command through the command line and render the output.
        """
        if not self.config.command:
            raise ValueError("A command is required for headless mode")
        stream = self.command_line.stream
        if not isinstance(stream, BufferStream):
            raise ValueError("Headless mode needs an in-memory stream")

        logger.info(f"Running headless command: {self.config.command}")
        line = self.config.command.encode(INPUT_ENCODING, errors="replace")
        stream.feed(line + b"\r")
        self.command_line.run()
        render_output(stream.drain().decode(stream.encoding, errors="replace"))
