import asyncio
import logging
from typing import Callable, Optional

import serial
import typer
from typing_extensions import Annotated

from serial_cmdline.command_line import CommandLine
from serial_cmdline.console.console import (
    ConsoleInterface,
    HeadlessConsole,
    PollingConsole,
    ReplConsole,
)
from serial_cmdline.console.terminal import TerminalStream
from serial_cmdline.demo_commands import register_demo_commands, startup_message
from serial_cmdline.logger import setup_logging
from serial_cmdline.runtime_config import (
    BAUDRATE_ENV,
    DEFAULT_BAUDRATE,
    DEFAULT_POLL_INTERVAL,
    PORT_ENV,
    ModeChoice,
    RuntimeConfig,
    load_envs,
)
from serial_cmdline.stream import BufferStream, SerialStream, Stream, list_serial_ports

logger = logging.getLogger(__name__)

# Global factory functions - set by create_app()
_command_line_factory: Optional[Callable[[RuntimeConfig], CommandLine]] = None
_console_factory: Optional[
    Callable[[CommandLine, RuntimeConfig], ConsoleInterface]
] = None


def open_stream(config: RuntimeConfig) -> Stream:
    """Open the stream the configured mode talks over."""
    if config.command or config.mode == ModeChoice.repl:
        return BufferStream()
    if config.mode == ModeChoice.terminal:
        return TerminalStream()
    if not config.port:
        raise ValueError("A serial port is required in serial mode")
    return SerialStream.open(config.port, config.baudrate)


def default_command_line_factory(config: RuntimeConfig) -> CommandLine:
    """Default factory: open the stream and attach the example commands."""
    stream = open_stream(config)
    # Nobody types on an in-memory stream, so there is nothing to echo
    echo = config.echo and not isinstance(stream, BufferStream)
    command_line = CommandLine(stream, echo=echo, max_handlers=config.max_handlers)
    if not register_demo_commands(command_line):
        stream.print(
            f"Too many commands. Currently this command line supports "
            f"{command_line.max_handlers} commands.\n"
        )
    return command_line


def default_console_factory(
    command_line: CommandLine, config: RuntimeConfig
) -> ConsoleInterface:
    """Default factory for creating Console instances."""
    if config.command:
        return HeadlessConsole(command_line, config)
    if config.mode == ModeChoice.repl:
        return ReplConsole(command_line, config, greeting=startup_message())
    return PollingConsole(command_line, config, greeting=startup_message())


def list_ports() -> None:
    """List the serial ports available on this machine."""
    ports = list_serial_ports()
    if not ports:
        typer.echo("No serial ports found.")
        return
    for port in ports:
        typer.echo(port)


def main(
    ctx: typer.Context,
    mode: Annotated[
        ModeChoice,
        typer.Option("--mode", help="Input source: serial, terminal, or repl"),
    ] = ModeChoice.serial,
    port: Annotated[
        Optional[str],
        typer.Option("--port", "-p", envvar=PORT_ENV, help="Serial device path"),
    ] = None,
    baudrate: Annotated[
        int,
        typer.Option("--baudrate", "-b", envvar=BAUDRATE_ENV, help="Serial baud rate"),
    ] = DEFAULT_BAUDRATE,
    echo: Annotated[
        bool,
        typer.Option("--echo/--no-echo", help="Echo typed characters back on the stream"),
    ] = True,
    poll_interval: Annotated[
        float,
        typer.Option("--poll-interval", help="Seconds between polls of the stream"),
    ] = DEFAULT_POLL_INTERVAL,
    command: Annotated[
        Optional[str],
        typer.Option(
            "--command",
            "-c",
            help="Run a single command line through the example commands and exit",
        ),
    ] = None,
) -> None:
    """SERIAL CMDLINE - line-oriented command interpreter over a byte stream"""
    if ctx.invoked_subcommand is not None:
        return

    if mode == ModeChoice.serial and not command and not port:
        typer.echo(
            f"Error: a serial port is required. Set {PORT_ENV} or use the --port option",
            err=True,
        )
        raise typer.Exit(code=1)

    cfg = RuntimeConfig(
        mode=mode,
        port=port,
        baudrate=baudrate,
        echo=echo,
        poll_interval=poll_interval,
        command=command,
    )

    factory = _command_line_factory or default_command_line_factory
    console_fact = _console_factory or default_console_factory
    try:
        command_line = factory(cfg)
    except serial.SerialException as e:
        typer.echo(f"Error: could not open {cfg.port}: {e}", err=True)
        raise typer.Exit(code=1)

    logger.info(f"Starting command line in {cfg.mode.value} mode")
    try:
        with command_line.stream:
            console = console_fact(command_line, cfg)
            asyncio.run(console.run())
    except KeyboardInterrupt:
        print("\nExiting...")
    except serial.SerialException as e:
        typer.echo(f"Error: lost connection to {cfg.port}: {e}", err=True)
        raise typer.Exit(code=1)


def create_app(
    command_line_factory: Optional[Callable[[RuntimeConfig], CommandLine]] = None,
    console_factory: Optional[
        Callable[[CommandLine, RuntimeConfig], ConsoleInterface]
    ] = None,
) -> typer.Typer:
    """
    Create and configure the Typer application.

    Args:
        command_line_factory: Factory function to create CommandLine instances
        console_factory: Factory function to create Console instances

    Returns:
        Typer application
    """
    setup_logging()

    # Load port and related settings from .env if not already set in the environment
    load_envs()

    # Set global factory functions
    global _command_line_factory, _console_factory
    _command_line_factory = command_line_factory
    _console_factory = console_factory

    app = typer.Typer(rich_markup_mode=None)
    app.command("ports")(list_ports)
    app.callback(invoke_without_command=True)(main)

    return app


# Create default app instance for the console script
app = create_app()


if __name__ == "__main__":
    app()
