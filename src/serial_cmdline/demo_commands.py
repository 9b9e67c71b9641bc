"""
The example command set: help, h, maxcmds and echo, plus a default handler.
"""

import logging
import re

from serial_cmdline.command_line import CommandLine
from serial_cmdline.stream import Stream

logger = logging.getLogger(__name__)

BANNER = "serial-cmdline example, Version 1.0.0\n"

HELP_TEXT = (
    "Help for " + BANNER + "\n"
    "Command        Function\n"
    "=============  ===========================================================\n"
    "help           Display this text.\n"
    "h              Same as help.\n"
    "maxcmds        Display the current maximum number of commands.\n"
    "echo <int>     Echo the integer that is the first parameter of the command.\n"
    "\n"
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def to_int(word: str) -> int:
    """Parse a leading integer the way Arduino's String.toInt() does (0 if none)."""
    match = _LEADING_INT.match(word)
    return int(match.group(1)) if match else 0


def startup_message() -> str:
    return BANNER + 'Type "help" for a list of commands.\n'


def on_default_command(cmd: CommandLine, stream: Stream) -> None:
    """Say the command isn't supported (writes to the stream directly)."""
    stream.print(f'The command "{cmd.get_word()}" is not supported.\n')


def on_help(cmd: CommandLine, stream: Stream) -> str:
    return HELP_TEXT


def on_maxcmds(cmd: CommandLine, stream: Stream) -> str:
    return (
        "The maximum number of commands this command line currently supports "
        f"is {cmd.max_handlers}.\n"
    )


def on_echo(cmd: CommandLine, stream: Stream) -> str:
    word = cmd.get_word(1)
    if word == "":
        return "Expected an integer to echo; got nothing.\n"
    return f"The echo command received {to_int(word)}.\n"


def register_demo_commands(cmd: CommandLine) -> bool:
    """Attach the example handlers.

    Returns:
        False if the command table ran out of room.
    """
    cmd.register_default_handler(on_default_command)
    attached = (
        cmd.register_handler("help", on_help)
        and cmd.register_handler("h", on_help)
        and cmd.register_handler("maxcmds", on_maxcmds)
        and cmd.register_handler("echo", on_echo)
    )
    if not attached:
        logger.warning(
            f"Too many commands; this command line supports {cmd.max_handlers}"
        )
    return attached
